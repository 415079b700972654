from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_slug(slug: str) -> str:
    """Slugs are lowercase, matching how formulas and triggers read identifiers."""
    return str(slug).strip().lower()


class BiomarkerDefinition(BaseModel):
    """Curated reference for one biomarker. Immutable for the duration of an analysis run."""

    model_config = ConfigDict(frozen=True)

    slug: str = Field(description="Canonical id, the only name formulas and triggers may use")
    name: str
    category: str | None = None
    unit: str | None = None
    optimal_min: float | None = None
    optimal_max: float | None = None
    lab_min: float | None = None
    lab_max: float | None = None
    clinical_insight: str | None = None
    metaphor: str | None = None
    source_ref: str | None = None
    aliases: tuple[str, ...] = Field(default=(), description="Other names labs print for this biomarker")

    @field_validator("slug", mode="before")
    @classmethod
    def lowercase_slug(cls, value: str) -> str:
        return normalize_slug(value)


class MetricDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    name: str
    formula: str = Field(description="Arithmetic over {slug} placeholders")
    target_min: float | None = None
    target_max: float | None = None
    risk_insight: str | None = None
    source_ref: str | None = None

    @field_validator("slug", mode="before")
    @classmethod
    def lowercase_slug(cls, value: str) -> str:
        return normalize_slug(value)


class ProtocolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    trigger_condition: str = Field(description="Boolean expression over slugs, e.g. 'ferritina < 70'")
    type: str
    title: str
    description: str
    dosage: str | None = None
    source_ref: str | None = None

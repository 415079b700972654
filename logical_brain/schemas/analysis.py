from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from logical_brain.schemas.catalog import BiomarkerDefinition, MetricDefinition, ProtocolDefinition

LabStatus = Literal["low", "normal", "high"]
OptimalStatus = Literal["below_optimal", "optimal", "above_optimal"]
Tier = Literal["optimal", "suboptimal", "abnormal"]
TargetStatus = Literal["below_target", "within_target", "above_target"]


class ObservedParameter(BaseModel):
    """A parameter as extracted from a document, before any catalog matching."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str | float | int | None = None
    unit: str | None = None
    reference_range: str | None = None
    status: str | None = None
    document_type: str = "unknown"
    source_document_id: str | None = None
    exam_date: str | None = None


class ExtractedParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = Field(default=(), description="Deduplicated, lexicographically sorted names")
    details: dict[str, ObservedParameter] = Field(default_factory=dict, description="First-seen detail per name")
    observations: tuple[ObservedParameter, ...] = Field(
        default=(), description="Every parameter line, in extraction order"
    )
    by_document_type: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @property
    def observed(self) -> list[ObservedParameter]:
        """Observed parameters in extraction order."""
        return list(self.details.values())


class EvaluatedBiomarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    definition: BiomarkerDefinition
    observed: ObservedParameter
    value: float
    status: LabStatus
    optimal_status: OptimalStatus | None = None
    tier: Tier
    message: str


class EvaluatedMetric(BaseModel):
    model_config = ConfigDict(frozen=True)

    definition: MetricDefinition
    value: float
    status: TargetStatus
    message: str


class SkippedMetric(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    name: str
    formula: str
    reason: str


class TriggeredProtocol(BaseModel):
    model_config = ConfigDict(frozen=True)

    definition: ProtocolDefinition
    satisfied_condition: str


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_biomarkers: int = 0
    optimal: int = 0
    suboptimal: int = 0
    abnormal: int = 0
    metrics_calculated: int = 0
    protocols_triggered: int = 0
    lab_range_alerts: tuple[str, ...] = ()


class LogicalAnalysis(BaseModel):
    """Deterministic fact base computed from one document set."""

    model_config = ConfigDict(frozen=True)

    biomarkers: tuple[EvaluatedBiomarker, ...] = ()
    metrics: tuple[EvaluatedMetric, ...] = ()
    skipped_metrics: tuple[SkippedMetric, ...] = ()
    protocols: tuple[TriggeredProtocol, ...] = ()
    unknown_slugs: tuple[str, ...] = ()
    summary: AnalysisSummary = AnalysisSummary()

    def values(self) -> dict[str, float]:
        """Slug -> value map over evaluated biomarkers and metrics."""
        combined = {b.definition.slug: b.value for b in self.biomarkers}
        combined.update({m.definition.slug: m.value for m in self.metrics})
        return combined


class FactBase(BaseModel):
    """Everything the parallel prompt branches share. Computed once per document set."""

    model_config = ConfigDict(frozen=True)

    document_set_key: str
    analysis: LogicalAnalysis
    available_parameters: tuple[str, ...] = ()
    analysis_context: str = ""
    parameters_context: str = ""


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    hallucinated_parameters: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class BiomarkerValueIn(BaseModel):
    slug: str
    value: float


class EvaluateRequest(BaseModel):
    biomarkers: list[BiomarkerValueIn]


class LogicalAnalysisRequest(BaseModel):
    user_id: str | None = None
    document_ids: list[str] | None = None
    documents: list[Any] = Field(default_factory=list, description="Untrusted structured documents")


class ValidationRequest(BaseModel):
    text: str
    available_parameters: list[str] = Field(default_factory=list)


class LogicalAnalysisResponse(BaseModel):
    cached: bool = False
    fact_base: FactBase
    biomarker_snapshot: dict[str, dict[str, Any]] = Field(default_factory=dict)

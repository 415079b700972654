from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from logical_brain.database import Base


class BiomarkerReference(Base):
    """Functional (optimal) vs laboratory ranges for one biomarker."""

    __tablename__ = "biomarkers_reference"

    slug: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    optimal_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    optimal_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    lab_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    lab_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    clinical_insight: Mapped[str | None] = mapped_column(Text, nullable=True)
    metaphor: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_ref: Mapped[str | None] = mapped_column(String(200), nullable=True)
    common_aliases: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class CalculatedMetric(Base):
    """Formula over biomarker slugs, e.g. ``{triglicerideos} / {hdl}``."""

    __tablename__ = "calculated_metrics"

    slug: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    formula: Mapped[str] = mapped_column(String(500), nullable=False)
    target_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    target_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    risk_insight: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_ref: Mapped[str | None] = mapped_column(String(200), nullable=True)
    position: Mapped[int] = mapped_column(nullable=False, default=0)

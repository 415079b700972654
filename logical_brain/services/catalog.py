"""
Reference Catalog

Read-only snapshot of biomarker, metric and protocol definitions. Loaded once
(per process or per request) and passed explicitly into every evaluator call;
formulas and trigger conditions are parsed here, once per definition.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from logical_brain.exceptions import ExpressionError, LogicalBrainError
from logical_brain.models.biomarker import BiomarkerReference, CalculatedMetric
from logical_brain.models.protocol import ProtocolRecord
from logical_brain.schemas.catalog import BiomarkerDefinition, MetricDefinition, ProtocolDefinition, normalize_slug
from logical_brain.services.expressions import Arithmetic, Condition, parse_condition, parse_formula, variables

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceCatalog:
    biomarkers: tuple[BiomarkerDefinition, ...] = ()
    metrics: tuple[MetricDefinition, ...] = ()
    protocols: tuple[ProtocolDefinition, ...] = ()
    formula_trees: Mapping[str, Arithmetic] = field(default_factory=lambda: MappingProxyType({}))
    formula_errors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    trigger_trees: Mapping[str, Condition] = field(default_factory=lambda: MappingProxyType({}))
    trigger_errors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    unresolved_references: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def biomarker(self, slug: str) -> BiomarkerDefinition | None:
        return next((b for b in self.biomarkers if b.slug == normalize_slug(slug)), None)

    def metric(self, slug: str) -> MetricDefinition | None:
        return next((m for m in self.metrics if m.slug == normalize_slug(slug)), None)

    def protocol(self, protocol_id: str) -> ProtocolDefinition | None:
        return next((p for p in self.protocols if p.id == protocol_id), None)


def build_catalog(
    biomarkers: Iterable[BiomarkerDefinition],
    metrics: Iterable[MetricDefinition] = (),
    protocols: Iterable[ProtocolDefinition] = (),
) -> ReferenceCatalog:
    biomarkers = tuple(biomarkers)
    metrics = tuple(metrics)
    protocols = tuple(protocols)

    seen: set[str] = set()
    for slug in [b.slug for b in biomarkers] + [m.slug for m in metrics]:
        if slug in seen:
            raise LogicalBrainError(f"Duplicate catalog slug: {slug}", code="CATALOG_ERROR", details={"slug": slug})
        seen.add(slug)

    formula_trees: dict[str, Arithmetic] = {}
    formula_errors: dict[str, str] = {}
    for metric in metrics:
        try:
            formula_trees[metric.slug] = parse_formula(metric.formula)
        except ExpressionError as exc:
            logger.warning("Metric %s has an invalid formula %r: %s", metric.slug, metric.formula, exc.message)
            formula_errors[metric.slug] = exc.message

    trigger_trees: dict[str, Condition] = {}
    trigger_errors: dict[str, str] = {}
    for protocol in protocols:
        try:
            trigger_trees[protocol.id] = parse_condition(protocol.trigger_condition)
        except ExpressionError as exc:
            logger.warning(
                "Protocol %r has an invalid trigger %r: %s", protocol.title, protocol.trigger_condition, exc.message
            )
            trigger_errors[protocol.id] = exc.message

    # Never fatal: a formula or trigger over an unknown slug simply never evaluates
    unresolved: dict[str, tuple[str, ...]] = {}
    for key, tree in list(formula_trees.items()) + list(trigger_trees.items()):
        missing = tuple(sorted(variables(tree) - seen))
        if missing:
            logger.warning("Catalog entry %s references unknown slugs: %s", key, ", ".join(missing))
            unresolved[key] = missing

    return ReferenceCatalog(
        biomarkers=biomarkers,
        metrics=metrics,
        protocols=protocols,
        formula_trees=MappingProxyType(formula_trees),
        formula_errors=MappingProxyType(formula_errors),
        trigger_trees=MappingProxyType(trigger_trees),
        trigger_errors=MappingProxyType(trigger_errors),
        unresolved_references=MappingProxyType(unresolved),
    )


def _to_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def _load_aliases(raw_aliases: str | None) -> tuple[str, ...]:
    if not raw_aliases:
        return ()
    try:
        parsed = json.loads(raw_aliases)
    except json.JSONDecodeError:
        return ()
    if isinstance(parsed, list):
        return tuple(str(item) for item in parsed)
    return ()


def biomarker_from_record(row: BiomarkerReference) -> BiomarkerDefinition:
    return BiomarkerDefinition(
        slug=row.slug,
        name=row.name,
        category=row.category,
        unit=row.unit,
        optimal_min=_to_float(row.optimal_min),
        optimal_max=_to_float(row.optimal_max),
        lab_min=_to_float(row.lab_min),
        lab_max=_to_float(row.lab_max),
        clinical_insight=row.clinical_insight,
        metaphor=row.metaphor,
        source_ref=row.source_ref,
        aliases=_load_aliases(row.common_aliases),
    )


def metric_from_record(row: CalculatedMetric) -> MetricDefinition:
    return MetricDefinition(
        slug=row.slug,
        name=row.name,
        formula=row.formula,
        target_min=_to_float(row.target_min),
        target_max=_to_float(row.target_max),
        risk_insight=row.risk_insight,
        source_ref=row.source_ref,
    )


def protocol_from_record(row: ProtocolRecord) -> ProtocolDefinition:
    return ProtocolDefinition(
        id=row.id,
        trigger_condition=row.trigger_condition,
        type=row.type,
        title=row.title,
        description=row.description,
        dosage=row.dosage,
        source_ref=row.source_ref,
    )


def load_catalog(db: Session) -> ReferenceCatalog:
    """Snapshot the catalog tables in declaration order."""
    biomarkers = db.query(BiomarkerReference).order_by(BiomarkerReference.position, BiomarkerReference.slug).all()
    metrics = db.query(CalculatedMetric).order_by(CalculatedMetric.position, CalculatedMetric.slug).all()
    protocols = db.query(ProtocolRecord).order_by(ProtocolRecord.position, ProtocolRecord.created_at).all()

    catalog = build_catalog(
        biomarkers=[biomarker_from_record(row) for row in biomarkers],
        metrics=[metric_from_record(row) for row in metrics],
        protocols=[protocol_from_record(row) for row in protocols],
    )
    logger.debug(
        "Loaded reference catalog: %s biomarkers, %s metrics, %s protocols",
        len(catalog.biomarkers),
        len(catalog.metrics),
        len(catalog.protocols),
    )
    return catalog

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from logical_brain.config import settings
from logical_brain.exceptions import ExpressionError
from logical_brain.schemas.analysis import EvaluatedMetric, SkippedMetric
from logical_brain.schemas.catalog import MetricDefinition
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.evaluator import format_number
from logical_brain.services.expressions import evaluate_arithmetic, parse_formula, variables

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricResults:
    calculated: dict[str, EvaluatedMetric] = field(default_factory=dict)
    skipped: list[SkippedMetric] = field(default_factory=list)


def round_value(value: float, places: int | None = None) -> float:
    """Half-up rounding on the decimal representation, so 2.005 -> 2.01 regardless of float noise."""
    places = settings.metric_decimal_places if places is None else places
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def classify_metric(definition: MetricDefinition, value: float) -> EvaluatedMetric:
    status = "within_target"
    message = "Dentro da faixa alvo"
    if definition.target_min is not None and value < definition.target_min:
        status = "below_target"
        message = f"Abaixo do alvo (ideal: ≥ {format_number(definition.target_min)})"
    elif definition.target_max is not None and value > definition.target_max:
        status = "above_target"
        message = f"Acima do alvo (ideal: ≤ {format_number(definition.target_max)})"
    return EvaluatedMetric(definition=definition, value=value, status=status, message=message)


def _skip(definition: MetricDefinition, reason: str) -> SkippedMetric:
    logger.debug("Metric %s not computed: %s", definition.slug, reason)
    return SkippedMetric(slug=definition.slug, name=definition.name, formula=definition.formula, reason=reason)


def calculate_metrics(catalog: ReferenceCatalog, values: Mapping[str, float]) -> MetricResults:
    """
    Evaluate every catalog formula over the evaluated biomarker values.

    A metric with any unresolved slug is skipped outright; a partially
    computed ratio would be clinically misleading.
    """
    results = MetricResults()
    for definition in catalog.metrics:
        if definition.slug in catalog.formula_errors:
            results.skipped.append(_skip(definition, "Fórmula inválida"))
            continue

        tree = catalog.formula_trees.get(definition.slug)
        if tree is None:
            try:
                tree = parse_formula(definition.formula)
            except ExpressionError:
                results.skipped.append(_skip(definition, "Fórmula inválida"))
                continue

        required = variables(tree)
        if not required:
            results.skipped.append(_skip(definition, "Fórmula não referencia biomarcadores"))
            continue

        missing = sorted(slug for slug in required if slug not in values)
        if missing:
            results.skipped.append(
                _skip(definition, f"Biomarcador necessário não fornecido: {', '.join(missing)}")
            )
            continue

        try:
            raw = evaluate_arithmetic(tree, values)
        except ExpressionError as exc:
            results.skipped.append(_skip(definition, f"Erro ao calcular métrica: {exc.message}"))
            continue

        results.calculated[definition.slug] = classify_metric(definition, round_value(raw))

    logger.info("Calculated %s metrics, skipped %s", len(results.calculated), len(results.skipped))
    return results

import logging
from datetime import date, datetime
from typing import Iterable, Mapping

from logical_brain.schemas.analysis import EvaluatedBiomarker, ObservedParameter
from logical_brain.schemas.catalog import BiomarkerDefinition, normalize_slug
from logical_brain.services.analytes import ANALYTE_NAMES
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.matching import match_score, names_match, normalize_name
from logical_brain.services.values import to_float

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    return f"{value:g}"


def candidate_names(definition: BiomarkerDefinition) -> tuple[str, ...]:
    names = [definition.name, definition.slug.replace("_", " ")]
    names.extend(definition.aliases)
    return tuple(dict.fromkeys(name for name in names if name))


def classify_biomarker(
    definition: BiomarkerDefinition, observed: ObservedParameter, value: float
) -> EvaluatedBiomarker:
    """Optimal range first, then the lab range. A missing bound is unbounded on that side."""
    optimal_status = None
    message = "Dentro da faixa ótima"
    if definition.optimal_min is not None or definition.optimal_max is not None:
        optimal_status = "optimal"
        if definition.optimal_min is not None and value < definition.optimal_min:
            optimal_status = "below_optimal"
            message = f"Abaixo do ideal (ótimo: ≥ {format_number(definition.optimal_min)})"
        elif definition.optimal_max is not None and value > definition.optimal_max:
            optimal_status = "above_optimal"
            message = f"Acima do ideal (ótimo: ≤ {format_number(definition.optimal_max)})"

    status = "normal"
    if definition.lab_min is not None and value < definition.lab_min:
        status = "low"
        message = f"Abaixo do limite laboratorial ({format_number(definition.lab_min)})"
    elif definition.lab_max is not None and value > definition.lab_max:
        status = "high"
        message = f"Acima do limite laboratorial ({format_number(definition.lab_max)})"

    if status != "normal":
        tier = "abnormal"
    elif optimal_status in ("below_optimal", "above_optimal"):
        tier = "suboptimal"
    else:
        tier = "optimal"

    return EvaluatedBiomarker(
        definition=definition,
        observed=observed,
        value=value,
        status=status,
        optimal_status=optimal_status,
        tier=tier,
        message=message,
    )


def _analyte_names(catalog: ReferenceCatalog) -> dict[str, tuple[str, ...]]:
    """Catalog names and aliases merged into the analyte table, catalog slugs first."""
    merged: dict[str, list[str]] = {
        definition.slug: list(candidate_names(definition)) for definition in catalog.biomarkers
    }
    for slug, names in ANALYTE_NAMES.items():
        merged.setdefault(slug, []).extend(names)
    return {slug: tuple(dict.fromkeys(names)) for slug, names in merged.items()}


def resolve_analyte(name: str, analytes: Mapping[str, tuple[str, ...]]) -> tuple[str, float] | None:
    """
    Best analyte slug for a lab line name, with its similarity score.

    Ranked by rapidfuzz score, then by the length of the matched variation so
    the more specific name wins. Ties keep table order.
    """
    best: tuple[str, tuple[float, int]] | None = None
    for slug, variations in analytes.items():
        for variation in variations:
            if not names_match(variation, name):
                continue
            rank = (match_score(variation, name), len(normalize_name(variation)))
            if best is None or rank > best[1]:
                best = (slug, rank)
    if best is None:
        return None
    return best[0], best[1][0]


def _exam_day(observed: ObservedParameter) -> date:
    """ISO or dd/mm/yyyy exam date; anything else sorts as oldest."""
    raw = (observed.exam_date or "").strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    try:
        return datetime.strptime(raw[:10], "%d/%m/%Y").date()
    except ValueError:
        return date.min


def evaluate_biomarkers(
    observed: Iterable[ObservedParameter], catalog: ReferenceCatalog
) -> dict[str, EvaluatedBiomarker]:
    """
    Resolve observed parameters to analytes and classify the catalog ones.

    Each lab line resolves to exactly one analyte; a line whose analyte is not
    in the catalog is consumed by it and never reassigned. When several lines
    resolve to the same slug the most recent exam date wins, then the better
    name match, then extraction order. Undated lines count as oldest.
    Non-numeric values are ignored.
    """
    analytes = _analyte_names(catalog)
    definitions = {definition.slug: definition for definition in catalog.biomarkers}

    chosen: dict[str, tuple[tuple[date, float], ObservedParameter, float]] = {}
    for param in observed:
        value = to_float(param.value)
        if value is None:
            logger.debug("Could not parse value for %s = %r", param.name, param.value)
            continue
        resolved = resolve_analyte(param.name, analytes)
        if resolved is None:
            continue
        slug, score = resolved
        if slug not in definitions:
            logger.debug("%s resolved to %s, which is not in the catalog", param.name, slug)
            continue
        rank = (_exam_day(param), score)
        current = chosen.get(slug)
        if current is None or rank > current[0]:
            chosen[slug] = (rank, param, value)

    evaluations: dict[str, EvaluatedBiomarker] = {}
    for definition in catalog.biomarkers:
        if definition.slug not in chosen:
            continue
        _, param, value = chosen[definition.slug]
        evaluations[definition.slug] = classify_biomarker(definition, param, value)
        logger.debug("Matched %s -> %s = %s", param.name, definition.slug, value)

    logger.info("Evaluated %s of %s catalog biomarkers", len(evaluations), len(catalog.biomarkers))
    return evaluations


def evaluate_values(
    catalog: ReferenceCatalog, values: Mapping[str, float]
) -> tuple[dict[str, EvaluatedBiomarker], list[str]]:
    """
    Evaluate slug -> value pairs directly. Slugs are compared case-insensitively;
    unknown ones are returned as given, never evaluated.
    """
    by_slug = {normalize_slug(slug): value for slug, value in values.items()}
    evaluations: dict[str, EvaluatedBiomarker] = {}
    for definition in catalog.biomarkers:
        if definition.slug not in by_slug:
            continue
        value = float(by_slug[definition.slug])
        observed = ObservedParameter(
            name=definition.name, value=value, unit=definition.unit, document_type="direct"
        )
        evaluations[definition.slug] = classify_biomarker(definition, observed, value)

    known = {b.slug for b in catalog.biomarkers}
    unknown = [slug for slug in values if normalize_slug(slug) not in known]
    if unknown:
        logger.warning("Biomarker slugs not found in the reference catalog: %s", ", ".join(unknown))
    return evaluations, unknown

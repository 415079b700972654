import logging
from typing import Mapping

from logical_brain.exceptions import ExpressionError
from logical_brain.schemas.analysis import TriggeredProtocol
from logical_brain.schemas.catalog import normalize_slug
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.expressions import Condition, evaluate_condition, parse_condition, variables

logger = logging.getLogger(__name__)


def _condition_holds(tree: Condition, values: Mapping[str, float], label: str) -> bool:
    if any(slug not in values for slug in variables(tree)):
        return False
    try:
        return evaluate_condition(tree, values)
    except ExpressionError as exc:
        logger.warning("Could not evaluate trigger for %s: %s", label, exc.message)
        return False


def evaluate_trigger(condition: str, values: Mapping[str, float]) -> bool:
    """
    True exactly when the condition holds with every referenced slug present.

    Unresolved slugs, syntax errors and arithmetic errors all yield False;
    this never raises.
    """
    values = {normalize_slug(slug): value for slug, value in values.items()}
    try:
        tree = parse_condition(condition)
    except ExpressionError as exc:
        logger.warning("Invalid trigger condition %r: %s", condition, exc.message)
        return False
    return _condition_holds(tree, values, repr(condition))


def trigger_protocols(catalog: ReferenceCatalog, values: Mapping[str, float]) -> list[TriggeredProtocol]:
    """Fired protocols in catalog declaration order."""
    values = {normalize_slug(slug): value for slug, value in values.items()}
    triggered: list[TriggeredProtocol] = []
    for protocol in catalog.protocols:
        if protocol.id in catalog.trigger_errors:
            continue
        tree = catalog.trigger_trees.get(protocol.id)
        fired = (
            _condition_holds(tree, values, protocol.title)
            if tree is not None
            else evaluate_trigger(protocol.trigger_condition, values)
        )
        if fired:
            triggered.append(TriggeredProtocol(definition=protocol, satisfied_condition=protocol.trigger_condition))

    if triggered:
        logger.info("Protocols triggered: %s", ", ".join(p.definition.title for p in triggered))
    return triggered

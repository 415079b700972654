import math
import re

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?|-?\.\d+")


def to_float(value: str | float | int | None) -> float | None:
    """Parse a lab value such as ``"12.5"``, ``"12,5"``, ``"< 0.5"`` or ``"> 100"``; ``None`` if no number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    cleaned = value.replace("<", "").replace(">", "").replace("≤", "").replace("≥", "")
    cleaned = cleaned.replace(",", ".").strip()
    match = _NUMBER_RE.search(cleaned)
    if not match:
        return None
    try:
        number = float(match.group(0))
    except ValueError:
        return None
    return number if math.isfinite(number) else None

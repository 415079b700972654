import re
import unicodedata
from functools import lru_cache

from rapidfuzz import fuzz

from logical_brain.config import settings

# Each group lists names that denote the same analyte. Two names are linked
# when they contain two different members of the same group.
ABBREVIATION_GROUPS: tuple[tuple[str, ...], ...] = (
    ("gama gt", "gamma gt", "ggt", "gama glutamil transferase", "gamaglutamiltransferase"),
    (
        "tgo",
        "ast",
        "sgot",
        "aspartato aminotransferase",
        "transaminase oxalacetica",
        "transaminase glutamico oxalacetica",
    ),
    ("tgp", "alt", "sgpt", "alanina aminotransferase", "transaminase piruvica", "transaminase glutamico piruvica"),
    ("tsh", "tireoestimulante", "hormonio tireoestimulante", "thyroid stimulating hormone"),
    ("hba1c", "a1c", "hemoglobina glicada", "hemoglobina glicosilada"),
    ("vcm", "mcv", "volume corpuscular medio"),
    ("hcm", "mch", "hemoglobina corpuscular media"),
    ("chcm", "mchc", "concentracao de hemoglobina corpuscular media"),
    ("rdw", "red cell distribution width", "amplitude de distribuicao dos eritrocitos"),
    ("t3 livre", "t3l", "free t3", "triiodotironina livre"),
    ("t4 livre", "t4l", "free t4", "tiroxina livre"),
    ("t3 reverso", "t3r", "reverse t3"),
    ("vitamina d", "vitamin d", "25 oh vitamina d", "25 hidroxivitamina d", "25ohd"),
    ("vitamina b12", "vitamin b12", "cobalamina"),
    ("acido folico", "folato", "folic acid"),
    ("fosfatase alcalina", "alkaline phosphatase", "alp"),
    ("pcr", "crp", "proteina c reativa"),
    ("leucocitos", "white blood cells", "wbc"),
    ("hemacias", "eritrocitos", "red blood cells", "rbc"),
    ("plaquetas", "platelets", "plt"),
    ("triglicerideos", "triglicerides", "triglycerides"),
    ("glicose", "glicemia", "glucose"),
)


def fold(text: str) -> str:
    """Casefold and strip diacritics, keeping punctuation."""
    decomposed = unicodedata.normalize("NFD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@lru_cache(maxsize=4096)
def normalize_name(text: str) -> str:
    """Lowercase, accent-free, punctuation collapsed to single spaces."""
    return " ".join(re.sub(r"[^a-z0-9]+", " ", fold(text)).split())


def is_short_token(term: str, max_length: int | None = None) -> bool:
    """2-3 character tokens such as AST or ALT that hide inside unrelated words."""
    limit = max_length if max_length is not None else settings.matching_short_token_length
    return " " not in term and len(term) <= limit


@lru_cache(maxsize=4096)
def _boundary_pattern(term: str) -> re.Pattern:
    return re.compile(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])")


def contains_term(haystack: str, term: str) -> bool:
    """Containment on normalized text, with a word-boundary requirement for short tokens."""
    if not term or not haystack:
        return False
    if term not in haystack:
        return False
    if is_short_token(term):
        return _boundary_pattern(term).search(haystack) is not None
    return True


def _linked_by_abbreviation(a: str, b: str) -> bool:
    for group in ABBREVIATION_GROUPS:
        in_a = {member for member in group if contains_term(a, member)}
        if not in_a:
            continue
        in_b = {member for member in group if contains_term(b, member)}
        if any(x != y for x in in_a for y in in_b):
            return True
    return False


def names_match(a: str, b: str) -> bool:
    """Case-insensitive, symmetric, alias-aware name match."""
    na, nb = normalize_name(a), normalize_name(b)
    if not na or not nb:
        return False
    if contains_term(na, nb) or contains_term(nb, na):
        return True
    return _linked_by_abbreviation(na, nb)


def match_score(a: str, b: str) -> float:
    """Similarity in [0, 100] used to rank competing matches."""
    na, nb = normalize_name(a), normalize_name(b)
    if na == nb:
        return 100.0
    return float(fuzz.ratio(na, nb))


def is_parameter_available(name: str, available_parameters: list[str] | tuple[str, ...]) -> bool:
    return any(names_match(name, available) for available in available_parameters)

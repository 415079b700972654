"""
Hallucination Guard

Scans generated narrative for clinical parameters that were never measured.
A mention of an unavailable parameter is legitimate when its surroundings say
so ("não disponível", "sugerido para a próxima avaliação", "pending"...);
otherwise it is reported as hallucinated.

The exception patterns are heuristics. ``tests/test_guard.py`` keeps a
labeled corpus of accepted and rejected passages that every change to them
must keep passing.
"""
import logging
import re
from functools import lru_cache

from logical_brain.config import settings
from logical_brain.schemas.analysis import ValidationResult
from logical_brain.services.matching import fold, is_parameter_available, is_short_token, normalize_name

logger = logging.getLogger(__name__)

COMMON_PARAMETERS: tuple[str, ...] = (
    "TGO", "AST", "TGP", "ALT", "Gama GT", "Fosfatase Alcalina",
    "Bilirrubina", "Hemoglobina", "Hematócrito", "Leucócitos",
    "Plaquetas", "Glicose", "HbA1c", "Colesterol Total",
    "HDL", "LDL", "Triglicerídeos", "Creatinina", "Ureia",
    "TSH", "T4 Livre", "T3 Livre", "Vitamina D", "Vitamina B12", "Ferritina",
    "Ferro", "Testosterona", "Estradiol", "Insulina", "Cortisol",
)

_DISPONIVEL = r"disponive(?:l|is)"
_PARTICIPLE = r"(?:testad|medid|avaliad|realizad|dosad|solicitad)[oa]s?"

# {p} stands for the one occurrence under test; other mentions of the same
# parameter in the window are plain text and cannot excuse it.
_EXCEPTION_TEMPLATES: tuple[str, ...] = (
    # "X não está disponível", "X não foi testado"
    rf"{{p}}[^.;]{{{{0,100}}}}nao (?:esta |estao |foi |foram )?(?:{_DISPONIVEL}|{_PARTICIPLE})",
    # "dados de X não disponíveis"
    rf"(?:dados|valores|informacoes|resultados?)[^.;]{{{{0,80}}}}{{p}}[^.;]{{{{0,80}}}}nao (?:{_DISPONIVEL}|{_PARTICIPLE})",
    r"{p}[^.;]{{0,80}}(?:ausentes?|faltando|pendentes?|em aberto)",
    # "(T3 Livre: não disponível)"
    rf"\([^)]{{{{0,100}}}}{{p}}[^)]{{{{0,100}}}}(?:nao|sem) (?:{_DISPONIVEL}|testad|dados?)",
    # "T3 Livre e T3 Reverso: não disponíveis"
    rf"{{p}}[^:.]{{{{0,50}}}}:[^.]{{{{0,50}}}}nao (?:{_DISPONIVEL}|{_PARTICIPLE})",
    # "Exames recomendados: X", "marcadores sugeridos para a próxima avaliação: X"
    (
        r"\b(?:marcadores|exames|testes|parametros)[^.]{{0,100}}"
        r"(?:sugerid|recomendad|indicad|solicitad)[oa]s?[^.]{{0,100}}{p}"
    ),
    r"(?:sugerid|recomendad|solicitad)[oa]s?[^.:]{{0,60}}:[^.]{{0,100}}{p}",
    r"{p}[^.]{{0,80}}(?:proxim[ao]s?|futur[ao]s?|seguintes?).{{0,30}}(?:avaliacao|exame|ciclo|consulta)",
    r"(?:solicitar|pedir|incluir|adicionar|recomendar)[^.]{{0,80}}{p}",
    r"{p}[^.;]{{0,50}}(?:sem (?:dados|valores|resultados?))",
    # English phrasing
    r"{p}[^.;]{{0,100}}(?:not (?:available|tested|measured|assessed|performed)|unavailable|pending|missing)",
    (
        r"\b(?:recommend|suggest|request|order)(?:s|ed|ing)?\s+(?:(?:an?|the)\s+)?"
        r"(?:tests?|exams?|panels?|markers?|labs?)[^.]{{0,80}}{p}"
    ),
    r"\b(?:tests?|exams?|markers?)[^.]{{0,60}}(?:recommended|suggested|requested|ordered)[^.]{{0,80}}{p}",
    r"{p}[^.]{{0,80}}(?:next|future|follow[\s-]up|upcoming) (?:evaluation|exam|test|cycle|panel)",
)


@lru_cache(maxsize=256)
def _mention_pattern(parameter: str) -> re.Pattern:
    term = re.escape(normalize_name(parameter)).replace(r"\ ", r"\s+")
    # Only short tokens need word boundaries ("AST" inside "BASTONETES");
    # longer names also count inside derived words such as "leucocitose"
    if is_short_token(normalize_name(parameter)):
        return re.compile(rf"(?<![a-z0-9]){term}(?![a-z0-9])")
    return re.compile(term)


_SENTINEL = "\x00"
_EXCEPTION_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(template.format(p=re.escape(_SENTINEL))) for template in _EXCEPTION_TEMPLATES
)


def _fold_text(text: str) -> str:
    # One space per separator keeps character positions aligned with the input
    return re.sub(r"[\-_/]", " ", fold(text))


def _excerpt(text: str, start: int, end: int, radius: int = 40) -> str:
    snippet = " ".join(text[max(0, start - radius): end + radius].split())
    prefix = "..." if start - radius > 0 else ""
    suffix = "..." if end + radius < len(text) else ""
    return f"{prefix}{snippet}{suffix}"


def find_mentions(text: str, parameter: str) -> list[tuple[int, int]]:
    """Spans of mentions of ``parameter`` in the folded text."""
    return [match.span() for match in _mention_pattern(parameter).finditer(_fold_text(text))]


def is_excused_mention(folded_text: str, start: int, end: int, window: int | None = None) -> bool:
    """True when the occurrence at [start, end) sits in "not available" or "suggested" phrasing."""
    window = settings.guard_context_window if window is None else window
    context = folded_text[max(0, start - window): start] + _SENTINEL + folded_text[end: end + window]
    return any(pattern.search(context) for pattern in _EXCEPTION_PATTERNS)


def validate_mentioned_parameters(
    text: str,
    available_parameters: list[str] | tuple[str, ...],
    candidates: tuple[str, ...] = COMMON_PARAMETERS,
) -> ValidationResult:
    """
    Flag parameters the text talks about that are not in ``available_parameters``.

    A candidate is flagged when at least one of its mentions has no
    "not available / suggested for later" phrasing in its local window.
    """
    folded = _fold_text(text)
    # Excerpts come from the original text whenever folding kept character positions
    display = text if len(folded) == len(text) else folded

    hallucinated: list[str] = []
    warnings: list[str] = []

    for parameter in candidates:
        spans = [match.span() for match in _mention_pattern(parameter).finditer(folded)]
        if not spans:
            continue
        if is_parameter_available(parameter, available_parameters):
            continue

        unexcused = [(s, e) for s, e in spans if not is_excused_mention(folded, s, e)]
        if not unexcused:
            logger.debug("Mention of unavailable %s accepted by context", parameter)
            continue

        start, end = unexcused[0]
        hallucinated.append(parameter)
        warnings.append(
            f'"{parameter}" foi mencionado mas NÃO está disponível nos documentos. '
            f'Trecho: "{_excerpt(display, start, end)}"'
        )

    if hallucinated:
        logger.warning("Hallucinated parameters detected: %s", ", ".join(hallucinated))

    return ValidationResult(valid=not hallucinated, hallucinated_parameters=hallucinated, warnings=warnings)

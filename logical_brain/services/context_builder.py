"""
Available-parameters block injected into every specialist and synthesis prompt.

The block lists everything extracted from the documents, not only what the
catalog recognizes, so narrative text can be checked against the full list.
"""
from logical_brain.schemas.analysis import ExtractedParameters, ObservedParameter
from logical_brain.services.matching import contains_term, normalize_name

SEPARATOR = "═" * 55

NO_DATA_BLOCK = "\n".join(
    [
        SEPARATOR,
        "PARÂMETROS DISPONÍVEIS NOS DOCUMENTOS",
        SEPARATOR,
        "",
        "ATENÇÃO: Nenhum dado estruturado disponível nos documentos.",
        "Seja extremamente conservador: NÃO mencione valores, resultados ou status de nenhum exame.",
        "Se precisar citar um parâmetro, escreva explicitamente que ele \"não está disponível\".",
        "",
        SEPARATOR,
        "",
    ]
)

# Checked in this order; the first bucket with a keyword hit wins.
_BUCKET_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "hematology",
        (
            "hemoglobin", "leucocito", "plaqueta", "hematocrito", "hemacia", "eritrocito",
            "eosinofilo", "linfocito", "monocito", "basofilo", "neutrofilo", "bastonete",
            "segmentado", "vcm", "hcm", "chcm", "rdw",
        ),
    ),
    (
        "hormones",
        (
            "tsh", "t3", "t4", "testosterona", "estradiol", "cortisol", "progesterona",
            "prolactin", "fsh", "lh", "insulina", "hormonio", "shbg", "dhea",
        ),
    ),
    ("vitamins", ("vitamin", "b12", "acido folico", "folato", "zinco", "selenio")),
    (
        "biochemistry",
        (
            "glicose", "glicemia", "colesterol", "triglicerideo", "creatinina", "ureia",
            "acido urico", "transaminase", "tgo", "tgp", "gama gt", "fosfatase", "bilirrubina",
            "albumina", "proteina", "sodio", "potassio", "calcio", "magnesio", "ferro", "ferritina",
        ),
    ),
)

BUCKET_TITLES = {
    "hematology": "HEMATOLOGIA",
    "biochemistry": "BIOQUÍMICA",
    "hormones": "HORMÔNIOS",
    "vitamins": "VITAMINAS E MINERAIS",
    "other": "OUTROS PARÂMETROS",
}

RENDER_ORDER = ("hematology", "biochemistry", "hormones", "vitamins", "other")


def categorize_parameter(name: str) -> str:
    normalized = normalize_name(name)
    for bucket, keywords in _BUCKET_KEYWORDS:
        if any(contains_term(normalized, keyword) for keyword in keywords):
            return bucket
    return "other"


def format_parameter_line(param: ObservedParameter) -> str:
    value = "N/A" if param.value is None or param.value == "" else str(param.value)
    line = f"- {param.name}: {value}"
    if param.unit:
        line += f" {param.unit}"
    if param.reference_range:
        line += f" (Ref: {param.reference_range})"
    return line


def bucket_parameters(observed: list[ObservedParameter]) -> dict[str, list[ObservedParameter]]:
    buckets: dict[str, list[ObservedParameter]] = {bucket: [] for bucket in RENDER_ORDER}
    for param in observed:
        buckets[categorize_parameter(param.name)].append(param)
    return buckets


def build_parameters_context(extracted: ExtractedParameters) -> str:
    observed = extracted.observed
    if not observed:
        return NO_DATA_BLOCK

    lines = [
        SEPARATOR,
        "PARÂMETROS DISPONÍVEIS NOS DOCUMENTOS",
        SEPARATOR,
        "",
        "REGRA CRÍTICA: Você DEVE afirmar como medidos APENAS os parâmetros listados abaixo.",
        "NUNCA invente, infira ou mencione valores de parâmetros que NÃO estejam nesta lista.",
        "Se um parâmetro não foi testado, escreva \"não disponível\" ou \"não testado\".",
        "",
        f"Total de parâmetros disponíveis: {len(observed)}",
        "",
        "---",
        "",
    ]

    for bucket, params in bucket_parameters(observed).items():
        if not params:
            continue
        lines.append(f"## {BUCKET_TITLES[bucket]}")
        lines.extend(format_parameter_line(param) for param in params)
        lines.append("")

    lines.append(SEPARATOR)
    lines.append("")
    return "\n".join(lines)

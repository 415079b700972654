"""
Logical Brain Engine

Stateless facade over the deterministic pipeline:
documents -> observed parameters -> evaluated biomarkers -> metrics -> protocols.

Identical documents and catalog always yield an identical ``LogicalAnalysis``
and identical rendered text.
"""
import hashlib
import json
import logging
from typing import Any

from logical_brain.schemas.analysis import AnalysisSummary, EvaluatedBiomarker, FactBase, LogicalAnalysis
from logical_brain.schemas.documents import StructuredDocument, coerce_documents
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.context_builder import build_parameters_context
from logical_brain.services.evaluator import evaluate_biomarkers, evaluate_values, format_number
from logical_brain.services.extractor import extract_available_parameters
from logical_brain.services.metrics import calculate_metrics
from logical_brain.services.protocols import trigger_protocols

logger = logging.getLogger(__name__)

DOCUMENT_SET_KEY_VERSION = "v1"

_TIER_LABELS = {
    "optimal": ("✅", "ÓTIMO"),
    "suboptimal": ("⚠️", "SUBÓTIMO"),
    "abnormal": ("🔴", "ANORMAL"),
}


def _lab_range_alert(evaluation: EvaluatedBiomarker) -> str:
    unit = f" {evaluation.definition.unit}" if evaluation.definition.unit else ""
    return f"{evaluation.definition.name}: {format_number(evaluation.value)}{unit} - {evaluation.message}"


def _build_analysis(
    catalog: ReferenceCatalog,
    biomarkers: dict[str, EvaluatedBiomarker],
    unknown_slugs: list[str] | None = None,
) -> LogicalAnalysis:
    values = {slug: evaluation.value for slug, evaluation in biomarkers.items()}
    metric_results = calculate_metrics(catalog, values)

    combined = dict(values)
    combined.update({slug: metric.value for slug, metric in metric_results.calculated.items()})
    protocols = trigger_protocols(catalog, combined)

    evaluated = list(biomarkers.values())
    summary = AnalysisSummary(
        total_biomarkers=len(evaluated),
        optimal=sum(1 for b in evaluated if b.tier == "optimal"),
        suboptimal=sum(1 for b in evaluated if b.tier == "suboptimal"),
        abnormal=sum(1 for b in evaluated if b.tier == "abnormal"),
        metrics_calculated=len(metric_results.calculated),
        protocols_triggered=len(protocols),
        lab_range_alerts=tuple(_lab_range_alert(b) for b in evaluated if b.status != "normal"),
    )

    return LogicalAnalysis(
        biomarkers=tuple(evaluated),
        metrics=tuple(metric_results.calculated.values()),
        skipped_metrics=tuple(metric_results.skipped),
        protocols=tuple(protocols),
        unknown_slugs=tuple(unknown_slugs or ()),
        summary=summary,
    )


def run_logical_analysis(
    documents: list[StructuredDocument] | list[Any],
    catalog: ReferenceCatalog,
    document_ids: list[str] | None = None,
) -> LogicalAnalysis:
    extracted = extract_available_parameters(documents, document_ids)
    biomarkers = evaluate_biomarkers(extracted.observations, catalog)
    analysis = _build_analysis(catalog, biomarkers)
    logger.info(
        "Logical analysis: %s biomarkers, %s metrics, %s protocols",
        analysis.summary.total_biomarkers,
        analysis.summary.metrics_calculated,
        analysis.summary.protocols_triggered,
    )
    return analysis


def analyze_values(catalog: ReferenceCatalog, values: dict[str, float]) -> LogicalAnalysis:
    """Same pipeline, starting from slug -> value pairs instead of documents."""
    biomarkers, unknown = evaluate_values(catalog, values)
    return _build_analysis(catalog, biomarkers, unknown)


def _percent(part: int, total: int) -> int:
    return round(part * 100 / total) if total else 0


def format_logical_analysis_for_prompt(analysis: LogicalAnalysis) -> str:
    """Markdown block injected verbatim into every specialist prompt. Empty when nothing was evaluated."""
    if not analysis.biomarkers:
        return ""

    lines = [
        "## 🧠 ANÁLISE LÓGICA AUTOMÁTICA (DADOS VERIFICADOS)",
        "",
        "**IMPORTANTE:** Os dados abaixo foram calculados matematicamente e validados contra a base de conhecimento médico.",
        "Você DEVE usar essas informações como base para sua análise, interpretando e humanizando os resultados.",
        "",
        f"### 📊 Biomarcadores Avaliados ({len(analysis.biomarkers)})",
        "",
    ]

    for bio in analysis.biomarkers:
        ref = bio.definition
        unit = ref.unit or ""
        emoji, label = _TIER_LABELS[bio.tier]
        lines.append(f"{emoji} **{ref.name}**: {format_number(bio.value)} {unit}".rstrip())
        lines.append(f"   - Status: **{label}**")
        lines.append(f"   - {bio.message}")
        if ref.optimal_min is not None or ref.optimal_max is not None:
            low = format_number(ref.optimal_min) if ref.optimal_min is not None else "-"
            high = format_number(ref.optimal_max) if ref.optimal_max is not None else "-"
            lines.append(f"   - Faixa Ótima: {low} a {high} {unit}".rstrip())
        if ref.clinical_insight:
            lines.append(f"   - **Interpretação Clínica**: {ref.clinical_insight}")
        if ref.metaphor:
            lines.append(f"   - **Metáfora**: {ref.metaphor}")
        lines.append("")

    metric_count = len(analysis.metrics) + len(analysis.skipped_metrics)
    if metric_count:
        lines.extend([f"### 🧮 Métricas Calculadas ({metric_count})", ""])
        for metric in analysis.metrics:
            ref = metric.definition
            within = metric.status == "within_target"
            lines.append(f"{'✅' if within else '⚠️'} **{ref.name}**: {format_number(metric.value)}")
            lines.append(f"   - Fórmula: `{ref.formula}`")
            lines.append(f"   - Status: **{'ÓTIMO' if within else 'SUBÓTIMO'}**")
            lines.append(f"   - {metric.message}")
            if ref.risk_insight:
                lines.append(f"   - **Avaliação de Risco**: {ref.risk_insight}")
            lines.append("")
        for skipped in analysis.skipped_metrics:
            lines.append(f"⚪ **{skipped.name}**: Não calculável")
            lines.append(f"   - {skipped.reason}")
            lines.append("")

    if analysis.protocols:
        lines.extend(
            [
                f"### 📋 Protocolos Ativados Automaticamente ({len(analysis.protocols)})",
                "",
                "**Os protocolos abaixo foram AUTOMATICAMENTE selecionados com base em regras clínicas validadas.**",
                "**Você DEVE incluí-los na sua análise e usar sua expertise para explicá-los de forma humanizada.**",
                "",
            ]
        )
        for triggered in analysis.protocols:
            protocol = triggered.definition
            lines.extend(
                [
                    f"#### 📌 {protocol.title} ({protocol.type})",
                    "",
                    f"**Condição de Ativação:** `{triggered.satisfied_condition}`",
                    "",
                    "**Protocolo:**",
                    protocol.description,
                    "",
                ]
            )
            if protocol.dosage:
                lines.extend([f"**Dosagem:** {protocol.dosage}", ""])
            if protocol.source_ref:
                lines.extend([f"**Fonte:** {protocol.source_ref}", ""])

    summary = analysis.summary
    if summary.lab_range_alerts:
        lines.extend(
            [
                "### ⚠️ ALERTAS CRÍTICOS",
                "",
                "**Os seguintes biomarcadores estão FORA dos limites laboratoriais de referência:**",
                "",
            ]
        )
        lines.extend(f"- 🔴 {alert}" for alert in summary.lab_range_alerts)
        lines.extend(
            [
                "",
                "**Você DEVE destacar esses alertas na sua análise e recomendar avaliação médica.**",
                "",
            ]
        )

    total = summary.total_biomarkers
    lines.extend(
        [
            "---",
            "",
            "### 📈 Resumo Estatístico",
            "",
            f"- Total de biomarcadores: {total}",
            f"- Ótimos: {summary.optimal} ({_percent(summary.optimal, total)}%)",
            f"- Subótimos: {summary.suboptimal} ({_percent(summary.suboptimal, total)}%)",
            f"- Anormais: {summary.abnormal} ({_percent(summary.abnormal, total)}%)",
            f"- Métricas calculadas: {summary.metrics_calculated}",
            f"- Protocolos ativados: {summary.protocols_triggered}",
            "",
            "---",
            "",
            "**INSTRUÇÕES FINAIS PARA O AGENTE:**",
            "1. Use os dados acima como FUNDAMENTO da sua análise",
            "2. NÃO invente novos protocolos - use os sugeridos acima",
            "3. HUMANIZE e CONTEXTUALIZE os achados com sua expertise",
            "4. Explique o \"PORQUÊ\" de cada biomarcador estar alterado",
            "5. Conecte os biomarcadores entre si (visão sistêmica)",
            "6. Seja empático e educativo na comunicação",
            "",
        ]
    )
    return "\n".join(lines)


def create_biomarker_snapshot(analysis: LogicalAnalysis) -> dict[str, dict[str, Any]]:
    """slug -> latest value record, for storage on the patient profile."""
    return {
        bio.definition.slug: {
            "value": bio.value,
            "unit": bio.observed.unit or bio.definition.unit,
            "date": bio.observed.exam_date,
            "document_id": bio.observed.source_document_id,
            "status": bio.tier,
        }
        for bio in analysis.biomarkers
    }


def _normalize_id(value: Any) -> str:
    return " ".join(str(value).split()).lower()


def compute_document_set_key(
    documents: list[StructuredDocument] | list[Any], document_ids: list[str] | None = None
) -> str:
    """
    SHA-256 over the document set, independent of document order.

    Preimage: "v1|ids:<sorted ids>|docs:<sorted canonical JSON documents>".
    """
    structured = (
        list(documents)
        if isinstance(documents, (list, tuple)) and all(isinstance(d, StructuredDocument) for d in documents)
        else coerce_documents(documents, document_ids)
    )
    ids = sorted(_normalize_id(doc_id) for doc_id in (document_ids or []))
    payloads = sorted(
        json.dumps(doc.model_dump(mode="json", by_alias=True), sort_keys=True, ensure_ascii=False)
        for doc in structured
    )
    preimage = "|".join(
        [
            DOCUMENT_SET_KEY_VERSION,
            "ids:" + ",".join(doc_id.replace(",", "%2C") for doc_id in ids),
            "docs:" + json.dumps(payloads, ensure_ascii=False),
        ]
    )
    return hashlib.sha256(preimage.encode("utf-8")).hexdigest()


def build_fact_base(
    documents: list[StructuredDocument] | list[Any],
    catalog: ReferenceCatalog,
    document_ids: list[str] | None = None,
) -> FactBase:
    """Compute everything the parallel prompt branches share, once."""
    structured = coerce_documents(documents, document_ids)
    extracted = extract_available_parameters(structured)
    biomarkers = evaluate_biomarkers(extracted.observations, catalog)
    analysis = _build_analysis(catalog, biomarkers)

    return FactBase(
        document_set_key=compute_document_set_key(structured, document_ids),
        analysis=analysis,
        available_parameters=extracted.names,
        analysis_context=format_logical_analysis_for_prompt(analysis),
        parameters_context=build_parameters_context(extracted),
    )

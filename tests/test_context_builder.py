from logical_brain.services.context_builder import (
    NO_DATA_BLOCK,
    build_parameters_context,
    categorize_parameter,
    format_parameter_line,
)
from logical_brain.schemas.analysis import ObservedParameter
from logical_brain.services.extractor import extract_available_parameters


def test_categorize_parameter():
    assert categorize_parameter("Hemoglobina") == "hematology"
    assert categorize_parameter("BASTONETES") == "hematology"
    assert categorize_parameter("TSH") == "hormones"
    assert categorize_parameter("Vitamina D") == "vitamins"
    assert categorize_parameter("Glicose") == "biochemistry"
    assert categorize_parameter("Massa Magra") == "other"


def test_format_parameter_line():
    line = format_parameter_line(ObservedParameter(name="TSH", value="2.5", unit="uUI/mL", reference_range="0.4-4.5"))
    assert line == "- TSH: 2.5 uUI/mL (Ref: 0.4-4.5)"
    assert format_parameter_line(ObservedParameter(name="Cor")) == "- Cor: N/A"


def test_buckets_render_in_order_and_keep_extraction_order(make_document):
    extracted = extract_available_parameters(
        [
            make_document(
                [
                    {"name": "TSH", "value": "2.5"},
                    {"name": "Glicose", "value": "90", "unit": "mg/dL"},
                    {"name": "Plaquetas", "value": "250000"},
                    {"name": "Hemoglobina", "value": "14"},
                    {"name": "Creatinina", "value": "0.9"},
                ]
            )
        ]
    )

    context = build_parameters_context(extracted)

    assert "Total de parâmetros disponíveis: 5" in context
    assert "REGRA CRÍTICA" in context
    assert context.index("## HEMATOLOGIA") < context.index("## BIOQUÍMICA") < context.index("## HORMÔNIOS")
    assert context.index("- Plaquetas: 250000") < context.index("- Hemoglobina: 14")
    assert context.index("- Glicose: 90 mg/dL") < context.index("- Creatinina: 0.9")
    assert "## OUTROS PARÂMETROS" not in context


def test_empty_documents_emit_conservative_block():
    context = build_parameters_context(extract_available_parameters([]))
    assert context == NO_DATA_BLOCK
    assert "Seja extremamente conservador" in context

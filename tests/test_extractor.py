from logical_brain.schemas.documents import coerce_documents
from logical_brain.services.extractor import extract_available_parameters


def test_names_are_sorted_deduplicated_and_keep_first_detail(make_document):
    documents = [
        make_document([{"name": "TSH", "value": "2.5"}, {"name": "Glicose", "value": 90}], document_id="doc-1"),
        make_document([{"name": "TSH", "value": "3.1"}, {"name": "Ferritina", "value": "45"}], document_id="doc-2"),
    ]

    extracted = extract_available_parameters(documents)

    assert extracted.names == ("Ferritina", "Glicose", "TSH")
    assert extracted.details["TSH"].value == "2.5"
    assert extracted.details["TSH"].source_document_id == "doc-1"
    assert [p.name for p in extracted.observed] == ["TSH", "Glicose", "Ferritina"]


def test_observations_keep_every_line_in_order(make_document):
    documents = [
        make_document([{"name": "TSH", "value": "2.5"}], exam_date="2024-05-01"),
        make_document([{"name": "TSH", "value": "3.1"}], exam_date="2025-05-01"),
    ]

    extracted = extract_available_parameters(documents)

    assert [(p.value, p.exam_date) for p in extracted.observations] == [("2.5", "2024-05-01"), ("3.1", "2025-05-01")]
    assert extracted.details["TSH"].value == "2.5"


def test_groups_names_by_document_type(make_document):
    documents = [
        make_document([{"name": "TSH", "value": "2.5"}], document_type="lab_panel"),
        make_document([{"name": "Massa Magra", "value": "55"}], document_type="bioimpedance"),
        make_document([{"name": "TSH", "value": "2.7"}, {"name": "T4 Livre", "value": "1.1"}], document_type="lab_panel"),
    ]

    extracted = extract_available_parameters(documents)

    assert extracted.by_document_type == {
        "lab_panel": ("TSH", "T4 Livre"),
        "bioimpedance": ("Massa Magra",),
    }


def test_exact_identity_only(make_document):
    extracted = extract_available_parameters([make_document([{"name": "TGO"}, {"name": "TGO (AST)"}])])
    assert extracted.names == ("TGO", "TGO (AST)")


def test_malformed_input_is_dropped_silently(make_document):
    documents = [
        "not a document",
        {"documentType": "lab_panel", "modules": "oops"},
        {"documentType": "lab_panel", "modules": [None, {"parameters": "x"}, {"parameters": [{"value": 3}]}]},
        make_document([{"name": "  Ureia  ", "value": "30"}, {"name": "", "value": "1"}, 42]),
    ]

    extracted = extract_available_parameters(documents)

    assert extracted.names == ("Ureia",)


def test_non_list_input_is_empty():
    assert extract_available_parameters(None).names == ()
    assert extract_available_parameters({"modules": []}).names == ()


def test_document_ids_fill_missing_ids(make_document):
    documents = coerce_documents([make_document([{"name": "TSH", "value": "1"}])], document_ids=["abc"])
    assert documents[0].document_id == "abc"

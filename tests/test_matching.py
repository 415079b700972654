import pytest

from logical_brain.services.matching import contains_term, is_parameter_available, match_score, names_match, normalize_name
from logical_brain.services.values import to_float


@pytest.mark.parametrize(
    ("a", "b"),
    [
        ("TGO", "tgo"),
        ("Triglicerídeos", "TRIGLICERIDEOS"),
        ("TGO (AST)", "AST"),
        ("TGO", "Aspartato Aminotransferase"),
        ("Gama GT", "GGT"),
        ("Gama-GT", "gama gt"),
        ("HbA1c", "Hemoglobina Glicada"),
        ("TSH", "Hormônio Tireoestimulante"),
    ],
)
def test_names_match_is_symmetric(a, b):
    assert names_match(a, b)
    assert names_match(b, a)


@pytest.mark.parametrize(
    ("a", "b"),
    [
        ("AST", "BASTONETES"),
        ("TGO", "BASTONETES"),
        ("ALT", "ALTURA"),
        ("T3 Livre", "T4 Livre"),
        ("HDL", "LDL"),
        ("", "TSH"),
    ],
)
def test_names_do_not_match(a, b):
    assert not names_match(a, b)
    assert not names_match(b, a)


def test_short_tokens_need_word_boundary():
    assert contains_term("tgo ast", "ast")
    assert not contains_term("bastonetes", "ast")
    assert contains_term("gama glutamil transferase", "glutamil")


def test_normalize_name_folds_accents_and_punctuation():
    assert normalize_name("  Hematócrito  (%) ") == "hematocrito"
    assert normalize_name("Vitamina B-12") == "vitamina b 12"


def test_match_score_prefers_exact():
    assert match_score("Ferritina", "FERRITINA") == 100.0
    assert match_score("Insulina", "Insulina em Jejum") < 100.0


def test_is_parameter_available():
    available = ["TGO (AST)", "Glicose"]
    assert is_parameter_available("AST", available)
    assert is_parameter_available("Glicemia", available)
    assert not is_parameter_available("TGP", available)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (12, 12.0),
        ("12.5", 12.5),
        ("12,5", 12.5),
        ("< 0.5", 0.5),
        ("> 100", 100.0),
        ("Negativo", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ],
)
def test_to_float(raw, expected):
    assert to_float(raw) == expected

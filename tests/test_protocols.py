from logical_brain.services.protocols import evaluate_trigger, trigger_protocols


def test_or_trigger_fires_above_threshold():
    assert evaluate_trigger("x > 8 OR y > 100", {"x": 8.5, "y": 50})


def test_strict_boundaries_do_not_fire():
    assert not evaluate_trigger("x > 8 OR y > 100", {"x": 8.0, "y": 100})


def test_unresolved_slug_makes_whole_expression_false():
    assert not evaluate_trigger("x > 8 OR y > 100", {"x": 9})
    assert not evaluate_trigger("x > 8 AND y > 100", {})


def test_invalid_condition_is_false_and_never_raises():
    assert not evaluate_trigger("x >> 8", {"x": 9})
    assert not evaluate_trigger("x / 0 > 1", {"x": 9})


def test_trigger_protocols_in_catalog_order(catalog):
    values = {"insulina": 12.0, "triglicerideos": 90.0, "ferritina": 40.0}

    triggered = trigger_protocols(catalog, values)

    # "ferritina < 70 OR hemoglobina < 13" references a slug with no value
    assert [p.definition.title for p in triggered] == ["Protocolo Jantar Limpo", "Recuperação de Ferro"]
    assert triggered[0].satisfied_condition == "insulina > 8 OR triglicerideos > 100"


def test_nothing_fires_without_values(catalog):
    assert trigger_protocols(catalog, {}) == []

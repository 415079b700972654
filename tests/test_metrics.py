from logical_brain.schemas.catalog import MetricDefinition
from logical_brain.services.catalog import build_catalog
from logical_brain.services.metrics import calculate_metrics, round_value


def _catalog(**metric):
    return build_catalog(biomarkers=[], metrics=[MetricDefinition(slug="m", name="Metric", **metric)])


def test_ratio_on_target_boundary_is_within_target():
    results = calculate_metrics(_catalog(formula="{a}/{b}", target_max=2.0), {"a": 100, "b": 50})
    metric = results.calculated["m"]
    assert metric.value == 2.0
    assert metric.status == "within_target"


def test_rounded_value_above_boundary_is_above_target():
    results = calculate_metrics(_catalog(formula="{a}/{b}", target_max=2.0), {"a": 100.5, "b": 50})
    metric = results.calculated["m"]
    assert metric.value == 2.01
    assert metric.status == "above_target"
    assert metric.message == "Acima do alvo (ideal: ≤ 2)"


def test_below_target_min():
    results = calculate_metrics(_catalog(formula="{a}/{b}", target_min=20.0), {"a": 3.0, "b": 0.2})
    assert results.calculated["m"].status == "below_target"


def test_round_half_up():
    assert round_value(2.005) == 2.01
    assert round_value(1.234) == 1.23
    assert round_value(-1.005) == -1.01


def test_missing_variable_skips_metric():
    results = calculate_metrics(_catalog(formula="{a}/{b}", target_max=2.0), {"a": 100})
    assert results.calculated == {}
    assert results.skipped[0].reason == "Biomarcador necessário não fornecido: b"


def test_division_by_zero_skips_metric():
    results = calculate_metrics(_catalog(formula="{a}/{b}"), {"a": 1, "b": 0})
    assert results.calculated == {}
    assert results.skipped[0].reason.startswith("Erro ao calcular métrica")


def test_invalid_or_constant_formula_is_skipped():
    assert calculate_metrics(_catalog(formula="Variável (CKD-EPI)"), {}).skipped[0].reason == "Fórmula inválida"
    assert calculate_metrics(_catalog(formula="1 + 1"), {}).skipped[0].reason == "Fórmula não referencia biomarcadores"

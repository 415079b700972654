import threading

import pytest

from logical_brain.config import settings
from logical_brain.exceptions import SynthesisValidationError
from logical_brain.services.engine import build_fact_base
from logical_brain.services.workflow import (
    SpecialistAgent,
    build_agent_prompt,
    check_agent_output,
    run_specialist_agents,
    synthesize,
    validate_synthesis,
)

AGENTS = [
    SpecialistAgent(key="integrativa", title="Medicina Integrativa", instructions="Analise o metabolismo."),
    SpecialistAgent(key="nutricao", title="Nutrição", instructions="Analise a dieta."),
    SpecialistAgent(key="exercicio", title="Fisiologia do Exercício", instructions="Analise o treino."),
]


@pytest.fixture()
def fact_base(catalog, make_document):
    return build_fact_base(
        [make_document([{"name": "Insulina", "value": "12"}, {"name": "Ferritina", "value": "40"}])], catalog
    )


def test_agent_check_is_informational(fact_base):
    result = check_agent_output("A TGO está elevada.", fact_base, "nutricao")
    assert not result.valid
    assert result.hallucinated_parameters == ["TGO"]


def test_synthesis_gate_raises_with_full_list(fact_base):
    with pytest.raises(SynthesisValidationError) as exc_info:
        validate_synthesis("TGO e HDL alterados; Ferritina baixa.", fact_base.available_parameters)

    assert exc_info.value.hallucinated_parameters == ["TGO", "HDL"]
    assert exc_info.value.to_dict()["error"] == "SYNTHESIS_VALIDATION_FAILED"


def test_synthesis_gate_can_be_disabled(fact_base, monkeypatch):
    monkeypatch.setattr(settings, "synthesis_validation_enabled", False)
    assert validate_synthesis("TGO alterado.", fact_base.available_parameters).valid


def test_agent_prompt_embeds_shared_context(fact_base):
    prompt = build_agent_prompt(AGENTS[0], fact_base)
    assert prompt.startswith("Analise o metabolismo.")
    assert fact_base.analysis_context in prompt
    assert fact_base.parameters_context in prompt


def test_specialists_share_one_fact_base_and_keep_order(fact_base):
    prompts = []
    lock = threading.Lock()

    def generate(prompt):
        with lock:
            prompts.append(prompt)
        return "Ferritina baixa." if prompt.startswith("Analise a dieta.") else "TGO elevada."

    outputs = run_specialist_agents(fact_base, AGENTS, generate, max_workers=3)

    assert [o.agent.key for o in outputs] == ["integrativa", "nutricao", "exercicio"]
    assert [o.validation.valid for o in outputs] == [False, True, False]
    assert len(prompts) == 3
    assert all(fact_base.parameters_context in prompt for prompt in prompts)


def test_run_specialists_with_no_agents(fact_base):
    assert run_specialist_agents(fact_base, [], lambda prompt: "") == []


def test_synthesis_reuses_parameters_block(fact_base):
    outputs = run_specialist_agents(fact_base, AGENTS[:1], lambda prompt: "Insulina acima do ideal.")
    seen = []

    def generate(prompt):
        seen.append(prompt)
        return "Insulina acima do ideal; Ferritina abaixo do ideal. Sugerimos incluir TSH na próxima avaliação."

    result = synthesize(fact_base, outputs, generate)

    assert result.validation.valid
    assert fact_base.parameters_context in seen[0]
    assert "## Medicina Integrativa" in seen[0]


def test_synthesis_with_hallucination_is_not_returned(fact_base):
    with pytest.raises(SynthesisValidationError):
        synthesize(fact_base, [], lambda prompt: "O TSH está ótimo.")

"""
Validation gates and the parallel specialist fan-out.

The LLM call itself belongs to the caller and is passed in as ``generate``
(prompt in, text out). Every branch receives the same frozen ``FactBase``.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable

from logical_brain.config import settings
from logical_brain.exceptions import SynthesisValidationError
from logical_brain.schemas.analysis import FactBase, ValidationResult
from logical_brain.services.guard import validate_mentioned_parameters

logger = logging.getLogger(__name__)

Generate = Callable[[str], str]


@dataclass(frozen=True)
class SpecialistAgent:
    key: str
    title: str
    instructions: str


@dataclass(frozen=True)
class AgentOutput:
    agent: SpecialistAgent
    text: str
    validation: ValidationResult


@dataclass(frozen=True)
class SynthesisResult:
    text: str
    validation: ValidationResult


def check_agent_output(text: str, fact_base: FactBase, agent_key: str = "agent") -> ValidationResult:
    """Per-agent check. Informational only: failures are logged, never raised."""
    result = validate_mentioned_parameters(text, fact_base.available_parameters)
    if not result.valid:
        logger.warning(
            "Agent %s mentioned unavailable parameters: %s",
            agent_key,
            ", ".join(result.hallucinated_parameters),
        )
        for warning in result.warnings:
            logger.warning("  %s", warning)
    return result


def validate_synthesis(text: str, available_parameters: Iterable[str]) -> ValidationResult:
    """
    Gate for the consolidated synthesis.

    Raises ``SynthesisValidationError`` with the full hallucinated list when the
    text fails, so no unvalidated synthesis reaches storage.
    """
    if not settings.synthesis_validation_enabled:
        logger.warning("Synthesis validation is disabled")
        return ValidationResult(valid=True)

    result = validate_mentioned_parameters(text, tuple(available_parameters))
    if not result.valid:
        logger.error("Synthesis validation failed: %s", ", ".join(result.hallucinated_parameters))
        raise SynthesisValidationError(result.hallucinated_parameters, result.warnings)
    logger.info("Synthesis validation passed")
    return result


def build_agent_prompt(agent: SpecialistAgent, fact_base: FactBase) -> str:
    sections = [agent.instructions.strip(), ""]
    if fact_base.analysis_context:
        sections.extend([fact_base.analysis_context, ""])
    sections.append(fact_base.parameters_context)
    return "\n".join(sections)


def build_synthesis_prompt(fact_base: FactBase, outputs: Iterable[AgentOutput]) -> str:
    analyses = "\n\n---\n\n".join(f"## {output.agent.title}\n\n{output.text}" for output in outputs)
    return "\n".join(
        [
            "Você é um coordenador médico sênior especializado em medicina integrativa.",
            "",
            fact_base.parameters_context,
            "ANÁLISES DE MÚLTIPLOS ESPECIALISTAS:",
            "",
            analyses,
            "",
            "Sintetize as análises acima em um resumo consolidado.",
            "NUNCA afirme valores ou status de parâmetros que NÃO estão na lista de parâmetros disponíveis.",
            "Parâmetros não disponíveis só podem ser citados como \"não disponível\" ou como exame sugerido "
            "para a próxima avaliação.",
        ]
    )


def run_specialist_agents(
    fact_base: FactBase,
    agents: Iterable[SpecialistAgent],
    generate: Generate,
    max_workers: int | None = None,
) -> list[AgentOutput]:
    """
    Run every specialist in parallel over the same fact base.

    Results come back in the order the agents were given. An exception from
    ``generate`` propagates; retrying is the caller's job.
    """
    agents = list(agents)
    if not agents:
        return []

    workers = max_workers or settings.max_parallel_agents
    texts: dict[int, str] = {}
    with ThreadPoolExecutor(max_workers=min(workers, len(agents))) as executor:
        futures = {
            executor.submit(generate, build_agent_prompt(agent, fact_base)): index
            for index, agent in enumerate(agents)
        }
        for future in as_completed(futures):
            texts[futures[future]] = future.result()

    outputs = []
    for index, agent in enumerate(agents):
        text = texts[index]
        outputs.append(AgentOutput(agent=agent, text=text, validation=check_agent_output(text, fact_base, agent.key)))
    logger.info("Completed %s specialist analyses", len(outputs))
    return outputs


def synthesize(fact_base: FactBase, outputs: Iterable[AgentOutput], generate: Generate) -> SynthesisResult:
    text = generate(build_synthesis_prompt(fact_base, list(outputs)))
    validation = validate_synthesis(text, fact_base.available_parameters)
    return SynthesisResult(text=text, validation=validation)

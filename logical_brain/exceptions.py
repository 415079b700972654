"""
Exception hierarchy for the Logical Brain.

Only ``SynthesisValidationError`` is meant to escape the engine; everything
else is raised at a seam and caught by the layer that owns the fact.
"""
from typing import Any


class LogicalBrainError(Exception):
    """Base exception for engine errors."""

    def __init__(self, message: str, code: str = "LOGICAL_BRAIN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ExpressionError(LogicalBrainError):
    """A formula or trigger condition could not be tokenized, parsed or evaluated."""

    def __init__(self, message: str, expression: str = "", position: int | None = None):
        super().__init__(
            message=message,
            code="EXPRESSION_ERROR",
            details={"expression": expression, "position": position},
        )
        self.expression = expression
        self.position = position


class SynthesisValidationError(LogicalBrainError):
    """Generated synthesis text mentions parameters that are not in the patient's documents."""

    def __init__(self, hallucinated_parameters: list[str], warnings: list[str] | None = None):
        names = ", ".join(hallucinated_parameters)
        super().__init__(
            message=f"Synthesis validation failed: mentioned parameters that don't exist in documents: {names}",
            code="SYNTHESIS_VALIDATION_FAILED",
            details={
                "hallucinated_parameters": list(hallucinated_parameters),
                "warnings": list(warnings or []),
            },
        )
        self.hallucinated_parameters = list(hallucinated_parameters)
        self.warnings = list(warnings or [])

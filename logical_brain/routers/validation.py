from fastapi import APIRouter

from logical_brain.schemas.analysis import ValidationRequest, ValidationResult
from logical_brain.services.guard import validate_mentioned_parameters
from logical_brain.services.workflow import validate_synthesis

router = APIRouter(prefix="/api/validation", tags=["validation"])


@router.post("/parameters", response_model=ValidationResult)
def validate_parameters(payload: ValidationRequest):
    return validate_mentioned_parameters(payload.text, payload.available_parameters)


@router.post("/synthesis", response_model=ValidationResult)
def validate_synthesis_text(payload: ValidationRequest):
    # SynthesisValidationError is rendered as a 422 by the app-level handler
    return validate_synthesis(payload.text, payload.available_parameters)

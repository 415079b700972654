import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


class DocumentParameter(BaseModel):
    """One measured parameter as produced by the upstream structuring step."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(description="Parameter name exactly as printed by the lab")
    value: str | float | int | None = Field(default=None, description="Raw measured value")
    unit: str | None = Field(default=None, description="Unit of measurement")
    reference_range: str | None = Field(default=None, alias="referenceRange", description="Lab reference range")
    status: str | None = Field(default=None, description="Lab flag (high, low, normal...)")

    @field_validator("name", mode="before")
    @classmethod
    def _name_must_be_text(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("parameter name must be a non-empty string")
        return value.strip()

    @field_validator("value", mode="before")
    @classmethod
    def _scalar_value(cls, value: Any) -> str | float | int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (str, int, float)):
            return value
        return None

    @field_validator("unit", "reference_range", "status", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        return _optional_text(value)


class DocumentModule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    module_name: str | None = Field(default=None, alias="moduleName")
    parameters: tuple[DocumentParameter, ...] = ()


class StructuredDocument(BaseModel):
    """Structured medical document (lab panel, bioimpedance report, ...)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    document_id: str | None = Field(default=None, alias="documentId")
    document_type: str = Field(default="unknown", alias="documentType")
    exam_date: str | None = Field(default=None, alias="examDate")
    modules: tuple[DocumentModule, ...] = ()


def _coerce_parameter(raw: Any) -> DocumentParameter | None:
    if not isinstance(raw, dict):
        return None
    try:
        return DocumentParameter.model_validate(raw)
    except ValidationError:
        return None


def _coerce_module(raw: Any) -> DocumentModule | None:
    if not isinstance(raw, dict):
        return None
    raw_parameters = raw.get("parameters")
    if not isinstance(raw_parameters, list):
        raw_parameters = []
    parameters = tuple(p for p in (_coerce_parameter(item) for item in raw_parameters) if p is not None)
    return DocumentModule(module_name=_optional_text(raw.get("moduleName")), parameters=parameters)


def coerce_document(raw: Any, document_id: str | None = None) -> StructuredDocument | None:
    """Turn an untrusted payload into a ``StructuredDocument``; ``None`` if it has no modules list."""
    if isinstance(raw, StructuredDocument):
        return raw
    if not isinstance(raw, dict):
        return None
    raw_modules = raw.get("modules")
    if not isinstance(raw_modules, list):
        return None

    modules = tuple(m for m in (_coerce_module(item) for item in raw_modules) if m is not None)
    return StructuredDocument(
        document_id=document_id or _optional_text(raw.get("documentId")),
        document_type=_optional_text(raw.get("documentType")) or "unknown",
        exam_date=_optional_text(raw.get("examDate")),
        modules=modules,
    )


def coerce_documents(raw_documents: Any, document_ids: list[str] | None = None) -> list[StructuredDocument]:
    if not isinstance(raw_documents, (list, tuple)):
        return []

    documents: list[StructuredDocument] = []
    for index, raw in enumerate(raw_documents):
        document_id = document_ids[index] if document_ids and index < len(document_ids) else None
        document = coerce_document(raw, document_id=document_id)
        if document is None:
            logger.debug("Skipping malformed document at position %s", index)
            continue
        documents.append(document)
    return documents

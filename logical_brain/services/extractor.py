import logging
from typing import Any

from logical_brain.schemas.analysis import ExtractedParameters, ObservedParameter
from logical_brain.schemas.documents import StructuredDocument, coerce_documents

logger = logging.getLogger(__name__)


def extract_available_parameters(
    documents: list[StructuredDocument] | list[Any],
    document_ids: list[str] | None = None,
) -> ExtractedParameters:
    """
    Flatten structured documents into the parameters that were actually measured.

    Raw payloads are coerced first; anything malformed is dropped. Names are
    compared by exact string identity, so "TGO" and "TGO (AST)" stay distinct.
    """
    if not isinstance(documents, (list, tuple)):
        documents = []
    elif not all(isinstance(doc, StructuredDocument) for doc in documents):
        documents = coerce_documents(documents, document_ids)

    details: dict[str, ObservedParameter] = {}
    observations: list[ObservedParameter] = []
    by_document_type: dict[str, list[str]] = {}

    for document in documents:
        doc_params: list[str] = []
        for module in document.modules:
            for param in module.parameters:
                name = param.name
                if name not in doc_params:
                    doc_params.append(name)
                observation = ObservedParameter(
                    name=name,
                    value=param.value,
                    unit=param.unit,
                    reference_range=param.reference_range,
                    status=param.status,
                    document_type=document.document_type,
                    source_document_id=document.document_id,
                    exam_date=document.exam_date,
                )
                observations.append(observation)
                details.setdefault(name, observation)

        if doc_params:
            existing = by_document_type.setdefault(document.document_type, [])
            existing.extend(name for name in doc_params if name not in existing)

    extracted = ExtractedParameters(
        names=tuple(sorted(details)),
        details=details,
        observations=tuple(observations),
        by_document_type={doc_type: tuple(names) for doc_type, names in by_document_type.items()},
    )
    logger.info("Extracted %s parameters from %s documents", len(extracted.names), len(documents))
    return extracted

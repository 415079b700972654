import json
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from logical_brain.config import settings
from logical_brain.models.logical_analysis import LogicalAnalysisRecord
from logical_brain.schemas.analysis import FactBase
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.engine import build_fact_base, compute_document_set_key

logger = logging.getLogger(__name__)


def find_fact_base(db: Session, user_id: str, document_set_key: str) -> FactBase | None:
    record = (
        db.query(LogicalAnalysisRecord)
        .filter(
            LogicalAnalysisRecord.user_id == user_id,
            LogicalAnalysisRecord.document_set_key == document_set_key,
        )
        .first()
    )
    if record is None:
        return None
    return FactBase.model_validate_json(record.fact_base)


def get_or_create_fact_base(
    db: Session,
    user_id: str,
    documents: list[Any],
    catalog: ReferenceCatalog,
    document_ids: list[str] | None = None,
) -> tuple[FactBase, bool]:
    """
    Return the cached fact base for this user and document set, computing it on a miss.

    Entries are never updated; a different document set hashes to a new key.
    The boolean is True when the result came from the cache.
    """
    if not settings.analysis_cache_enabled:
        return build_fact_base(documents, catalog, document_ids), False

    key = compute_document_set_key(documents, document_ids)
    cached = find_fact_base(db, user_id, key)
    if cached is not None:
        logger.info("Logical analysis cache hit for user %s (%s)", user_id, key[:12])
        return cached, True

    fact_base = build_fact_base(documents, catalog, document_ids)

    db.add(
        LogicalAnalysisRecord(
            user_id=user_id,
            document_set_key=fact_base.document_set_key,
            document_ids=json.dumps(sorted(document_ids or [])),
            fact_base=fact_base.model_dump_json(),
        )
    )
    try:
        db.commit()
    except IntegrityError:
        # Another request stored the same document set first
        db.rollback()
        cached = find_fact_base(db, user_id, fact_base.document_set_key)
        if cached is None:
            raise
        return cached, True

    logger.info("Stored logical analysis for user %s (%s)", user_id, fact_base.document_set_key[:12])
    return fact_base, False

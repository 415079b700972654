from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from logical_brain.database import get_db
from logical_brain.routers.deps import get_catalog
from logical_brain.schemas.analysis import LogicalAnalysisRequest, LogicalAnalysisResponse
from logical_brain.services.analysis_cache import get_or_create_fact_base
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.engine import build_fact_base, create_biomarker_snapshot

router = APIRouter(prefix="/api/logical-analysis", tags=["logical-analysis"])


@router.post("", response_model=LogicalAnalysisResponse)
def run_analysis(
    payload: LogicalAnalysisRequest,
    db: Session = Depends(get_db),
    catalog: ReferenceCatalog = Depends(get_catalog),
):
    cached = False
    if payload.user_id:
        fact_base, cached = get_or_create_fact_base(
            db, payload.user_id, payload.documents, catalog, payload.document_ids
        )
    else:
        fact_base = build_fact_base(payload.documents, catalog, payload.document_ids)

    return LogicalAnalysisResponse(
        cached=cached,
        fact_base=fact_base,
        biomarker_snapshot=create_biomarker_snapshot(fact_base.analysis),
    )

from fastapi import APIRouter, Depends, HTTPException

from logical_brain.routers.deps import get_catalog
from logical_brain.schemas.analysis import EvaluateRequest, LogicalAnalysis
from logical_brain.schemas.catalog import BiomarkerDefinition, MetricDefinition, ProtocolDefinition
from logical_brain.services.catalog import ReferenceCatalog
from logical_brain.services.engine import analyze_values

router = APIRouter(prefix="/api/medical-knowledge", tags=["medical-knowledge"])


@router.get("/biomarkers", response_model=list[BiomarkerDefinition])
def list_biomarkers(category: str | None = None, catalog: ReferenceCatalog = Depends(get_catalog)):
    if category:
        return [b for b in catalog.biomarkers if b.category == category]
    return list(catalog.biomarkers)


@router.get("/biomarkers/{slug}", response_model=BiomarkerDefinition)
def get_biomarker(slug: str, catalog: ReferenceCatalog = Depends(get_catalog)):
    biomarker = catalog.biomarker(slug)
    if biomarker is None:
        raise HTTPException(status_code=404, detail=f"Biomarker '{slug}' not found")
    return biomarker


@router.get("/metrics", response_model=list[MetricDefinition])
def list_metrics(catalog: ReferenceCatalog = Depends(get_catalog)):
    return list(catalog.metrics)


@router.get("/protocols", response_model=list[ProtocolDefinition])
def list_protocols(catalog: ReferenceCatalog = Depends(get_catalog)):
    return list(catalog.protocols)


@router.post("/evaluate", response_model=LogicalAnalysis)
def evaluate(payload: EvaluateRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    if not payload.biomarkers:
        raise HTTPException(status_code=400, detail="At least one biomarker value is required")
    values = {item.slug: item.value for item in payload.biomarkers}
    return analyze_values(catalog, values)

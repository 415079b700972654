from logical_brain.models.biomarker import BiomarkerReference, CalculatedMetric
from logical_brain.models.logical_analysis import LogicalAnalysisRecord
from logical_brain.models.protocol import ProtocolRecord

__all__ = [
    "BiomarkerReference",
    "CalculatedMetric",
    "ProtocolRecord",
    "LogicalAnalysisRecord",
]

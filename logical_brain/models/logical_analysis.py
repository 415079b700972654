from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from logical_brain.database import Base


class LogicalAnalysisRecord(Base):
    """Write-once snapshot of a fact base for one user and document set."""

    __tablename__ = "logical_analyses"
    __table_args__ = (UniqueConstraint("user_id", "document_set_key", name="uq_logical_analyses_user_docset"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    document_set_key: Mapped[str] = mapped_column(String(64), nullable=False)
    document_ids: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    fact_base: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

"""
SQLAlchemy Models for Domain Analyzer

Two tables:
- analyses: one immutable row per analysis request
- findings: ordered findings belonging to an analysis

Column types are dialect-neutral (Uuid, JSON) so the same models run on
PostgreSQL in production and SQLite locally and in tests.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# =============================================================================
# CORE TABLES
# =============================================================================

class Analysis(Base):
    """A completed (or failed) domain analysis."""
    __tablename__ = "analyses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    requester_id = Column(String(255), nullable=False)
    domain = Column(String(253), nullable=False)

    # Scores (already scaled to their ceilings)
    technical_score = Column(Integer, nullable=False)
    performance_score = Column(Integer, nullable=False)
    authority_score = Column(Integer, nullable=False)
    total_score = Column(Integer, nullable=False)

    raw_signals = Column(JSON, nullable=False, default=dict)
    report = Column(Text, nullable=True)
    cache_key = Column(String(16), nullable=False)
    status = Column(String(20), nullable=False, default="completed")

    generated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    findings = relationship(
        "FindingRow",
        back_populates="analysis",
        cascade="all, delete-orphan",
        order_by="FindingRow.position",
    )

    __table_args__ = (
        Index("idx_analyses_cache_key", "cache_key"),
        Index("idx_analyses_requester_created", "requester_id", "created_at"),
        Index("idx_analyses_domain_created", "domain", "created_at"),
        CheckConstraint("technical_score BETWEEN 0 AND 40", name="ck_technical_range"),
        CheckConstraint("performance_score BETWEEN 0 AND 30", name="ck_performance_range"),
        CheckConstraint("authority_score BETWEEN 0 AND 30", name="ck_authority_range"),
        CheckConstraint("total_score BETWEEN 0 AND 100", name="ck_total_range"),
    )


class FindingRow(Base):
    """One finding of an analysis, in discovery order."""
    __tablename__ = "findings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    analysis_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("analyses.id", ondelete="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False)

    kind = Column(String(50), nullable=False)
    severity = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    source_url = Column(String(2048), nullable=False)
    deduction = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    analysis = relationship("Analysis", back_populates="findings")

    __table_args__ = (
        Index("idx_findings_analysis_position", "analysis_id", "position"),
    )

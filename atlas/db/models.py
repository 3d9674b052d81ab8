"""
atlas/db/models.py — SQLAlchemy ORM models for the outreach CRM.

Tables:
  - Prospect       → an Instagram account tracked through the outreach pipeline
  - StatusHistory  → one row per outreach stage a Prospect has passed through
"""

import enum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ─────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ────────────────────────────────────────────────────────────────────

class ProspectStatus(str, enum.Enum):
    TO_CONTACT = "To Contact"
    COLD = "Cold"
    WARM = "Warm"
    REPLIED = "Replied"
    INTERESTED = "Interested"
    QUALIFIER_SENT = "Qualifier Sent"
    READY_FOR_AUDIT = "Ready for Audit"
    AUDIT_DELIVERED = "Audit Delivered"
    CLOSED_WON = "Closed - Won"
    CLOSED_LOST = "Closed - Lost"
    NOT_INTERESTED = "Not Interested"


class ProspectSource(str, enum.Enum):
    MANUAL = "manual"
    RAPID = "rapid"          # rapid yes/no checklist, local score
    EVALUATED = "evaluated"  # full evaluator pass


# ── Models ───────────────────────────────────────────────────────────────────

class Prospect(Base):
    __tablename__ = "prospects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    instagram_handle = Column(String(255), nullable=True, unique=True)
    status = Column(Enum(ProspectStatus), default=ProspectStatus.TO_CONTACT, nullable=False)
    source = Column(Enum(ProspectSource), default=ProspectSource.MANUAL, nullable=False)

    # Public metrics (nullable — unavailable is a valid state)
    follower_count = Column(Integer, nullable=True)
    post_count = Column(Integer, nullable=True)
    avg_likes = Column(Float, nullable=True)
    avg_comments = Column(Float, nullable=True)
    biography = Column(Text, nullable=True)

    # Qualification output
    lead_score = Column(Integer, nullable=True)           # evaluator 0–100, or rapid 0–75
    qualification_data = Column(JSON, nullable=True)      # camelCase QualificationData dict
    pain_points = Column(JSON, nullable=True)             # list[str] from PAIN_POINTS
    goals = Column(JSON, nullable=True)                   # list[str] from GOALS
    help_statement = Column(Text, nullable=True)          # evaluator summary

    qualifier_question = Column(Text, nullable=True)
    last_message_snippet = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    status_history = relationship(
        "StatusHistory",
        back_populates="prospect",
        cascade="all, delete-orphan",
        order_by="StatusHistory.id",
    )

    def __repr__(self) -> str:
        return f"<Prospect id={self.id} handle={self.instagram_handle!r} score={self.lead_score}>"


class StatusHistory(Base):
    __tablename__ = "prospect_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(ProspectStatus), nullable=False)
    changed_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Relationships
    prospect = relationship("Prospect", back_populates="status_history")

    def __repr__(self) -> str:
        return f"<StatusHistory prospect_id={self.prospect_id} status={self.status}>"

"""
atlas/db/repository.py — All database read/write operations.

Business logic should never write raw SQL or ORM queries directly —
everything goes through this module. This keeps DB logic centralized
and easy to test/mock.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from atlas.db.models import Prospect, ProspectSource, ProspectStatus, StatusHistory
from atlas.qualification.errors import ProspectNotFound
from atlas.qualification.models import EvaluationResult, ProfileMetrics, QualificationData

logger = logging.getLogger(__name__)


def _metric_columns(metrics: ProfileMetrics) -> dict:
    return {
        "follower_count": metrics.follower_count,
        "post_count": metrics.post_count,
        "avg_likes": metrics.avg_likes,
        "avg_comments": metrics.avg_comments,
        "biography": metrics.biography,
    }


# ── Prospect reads ────────────────────────────────────────────────────────────

def get_prospect(db: Session, prospect_id: int) -> Optional[Prospect]:
    return db.query(Prospect).filter(Prospect.id == prospect_id).first()


def get_prospect_or_raise(db: Session, prospect_id: int) -> Prospect:
    """Like get_prospect, but raises ProspectNotFound instead of returning None."""
    prospect = get_prospect(db, prospect_id)
    if prospect is None:
        raise ProspectNotFound(prospect_id)
    return prospect


def get_prospect_by_handle(db: Session, instagram_handle: str) -> Optional[Prospect]:
    """Dedup check — handles are stored without '@'."""
    return db.query(Prospect).filter(Prospect.instagram_handle == instagram_handle).first()


def list_prospects(
    db: Session,
    status: Optional[ProspectStatus] = None,
    min_score: Optional[int] = None,
    source: Optional[ProspectSource] = None,
    limit: int = 50,
) -> list[Prospect]:
    """
    Prospects, best score first, optionally filtered by status, minimum score
    and source.

    Rapid (0–75) and evaluated (0–100) scores sort together unless `source`
    is given; pass it to rank one scale at a time.
    """
    query = db.query(Prospect)
    if status is not None:
        query = query.filter(Prospect.status == status)
    if source is not None:
        query = query.filter(Prospect.source == source)
    if min_score is not None:
        query = query.filter(Prospect.lead_score >= min_score)
    return (
        query
        .order_by(Prospect.lead_score.desc().nulls_last(), Prospect.created_at.desc())
        .limit(limit)
        .all()
    )


def count_prospects_by_status(db: Session) -> dict[str, int]:
    """Aggregate prospect counts keyed by status value, plus a total."""
    stats = {}
    for status in ProspectStatus:
        stats[status.value] = db.query(Prospect).filter(Prospect.status == status).count()
    stats["total"] = sum(stats.values())
    return stats


# ── Prospect writes ───────────────────────────────────────────────────────────

def create_prospect(
    db: Session,
    name: str,
    instagram_handle: Optional[str] = None,
    metrics: Optional[ProfileMetrics] = None,
    status: ProspectStatus = ProspectStatus.TO_CONTACT,
    source: ProspectSource = ProspectSource.MANUAL,
    lead_score: Optional[int] = None,
    qualification_data: Optional[QualificationData] = None,
    pain_points: Optional[list[str]] = None,
    goals: Optional[list[str]] = None,
    help_statement: Optional[str] = None,
) -> Prospect:
    """Create a Prospect and record its initial status in the history."""
    prospect = Prospect(
        name=name,
        instagram_handle=instagram_handle,
        status=status,
        source=source,
        lead_score=lead_score,
        qualification_data=(
            qualification_data.model_dump(by_alias=True, mode="json")
            if qualification_data is not None else None
        ),
        pain_points=pain_points,
        goals=goals,
        help_statement=help_statement,
        **(_metric_columns(metrics) if metrics is not None else {}),
    )
    prospect.status_history.append(StatusHistory(status=status))
    db.add(prospect)
    db.flush()
    logger.info("Prospect created: %s (@%s, score=%s)", name, instagram_handle, lead_score)
    return prospect


def update_prospect_metrics(db: Session, prospect_id: int, metrics: ProfileMetrics) -> None:
    """Overwrite the stored public metrics for a prospect."""
    updated = db.query(Prospect).filter(Prospect.id == prospect_id).update(_metric_columns(metrics))
    if not updated:
        raise ProspectNotFound(prospect_id)
    logger.debug("Prospect %d metrics updated.", prospect_id)


def update_prospect_qualification(
    db: Session,
    prospect_id: int,
    result: EvaluationResult,
    source: ProspectSource = ProspectSource.EVALUATED,
) -> None:
    """
    Persist one qualification pass: score, snapshot, tags and summary.

    Overwrites any previous qualification for the prospect.
    """
    updated = db.query(Prospect).filter(Prospect.id == prospect_id).update({
        "lead_score": result.lead_score,
        "qualification_data": result.qualification_data.model_dump(by_alias=True, mode="json"),
        "pain_points": result.pain_points,
        "goals": result.goals,
        "help_statement": result.summary,
        "source": source,
    })
    if not updated:
        raise ProspectNotFound(prospect_id)
    logger.info("Prospect %d qualified (score=%d).", prospect_id, result.lead_score)


def update_prospect_status(db: Session, prospect_id: int, status: ProspectStatus) -> Prospect:
    """Move a prospect to a new outreach stage, appending to its history."""
    prospect = get_prospect_or_raise(db, prospect_id)
    if prospect.status != status:
        prospect.status = status
        prospect.status_history.append(StatusHistory(status=status))
        db.flush()
        logger.debug("Prospect %d status → %s", prospect_id, status.value)
    return prospect


def save_qualifier_question(db: Session, prospect_id: int, question: str) -> None:
    updated = db.query(Prospect).filter(Prospect.id == prospect_id).update(
        {"qualifier_question": question}
    )
    if not updated:
        raise ProspectNotFound(prospect_id)

"""
api/endpoints/prospect_routes.py — Prospect routes.

GET    /prospects                          — List prospects (filterable by status / min score / source)
GET    /prospects/stats                    — Aggregate counts by status
GET    /prospects/{id}                     — Get a single prospect with status history
PATCH  /prospects/{id}/status              — Move a prospect to a new outreach stage
POST   /prospects/rapid                    — Create a draft prospect from the rapid checklist
POST   /prospects/{id}/metrics             — Refresh public Instagram metrics
POST   /prospects/{id}/qualify             — Run the evaluator and store the result
POST   /prospects/{id}/qualifier-question  — Generate the pre-audit DM question
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from atlas.db import repository
from atlas.db.models import Prospect, ProspectSource, ProspectStatus
from atlas.db.session import get_db
from atlas.qualification.models import EvaluationResult, ProfileMetrics
from atlas.services import prospect_service
from atlas.services.scoring import score_tier
from api.schemas import (
    ProspectOut,
    ProspectStatusUpdate,
    QualifierQuestionOut,
    QualifyRequest,
    RapidProspectRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_out(prospect: Prospect) -> ProspectOut:
    out = ProspectOut.model_validate(prospect)
    out.score_tier = score_tier(prospect.lead_score)
    return out


@router.get("/", response_model=list[ProspectOut], summary="List prospects")
def list_prospects(
    status_filter: Optional[ProspectStatus] = Query(
        default=None,
        alias="status",
        description="Filter by outreach stage. Omit to return all prospects.",
    ),
    min_score: Optional[int] = Query(default=None, ge=0, le=100, alias="minScore"),
    source: Optional[ProspectSource] = Query(
        default=None,
        description="'rapid' (0–75 checklist scale) or 'evaluated' (0–100). Omit to mix both.",
    ),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """
    Return prospects ordered by lead score (unscored last).

    Each prospect carries its `source`; `scoreTier` uses the 0–100 thresholds,
    so for rapid prospects it is only a rough guide until they are qualified.
    """
    prospects = repository.list_prospects(
        db, status=status_filter, min_score=min_score, source=source, limit=limit,
    )
    return [_to_out(p) for p in prospects]


@router.get("/stats", summary="Prospect counts by status")
def prospect_stats(db: Session = Depends(get_db)):
    """Return aggregate prospect counts grouped by outreach stage."""
    return repository.count_prospects_by_status(db)


@router.get("/{prospect_id}", response_model=ProspectOut, summary="Get prospect by ID")
def get_prospect(prospect_id: int, db: Session = Depends(get_db)):
    return _to_out(repository.get_prospect_or_raise(db, prospect_id))


@router.patch("/{prospect_id}/status", response_model=ProspectOut, summary="Update prospect status")
def patch_prospect_status(
    prospect_id: int,
    payload: ProspectStatusUpdate,
    db: Session = Depends(get_db),
):
    """Manually move a prospect to a new outreach stage; the change is recorded in its history."""
    prospect = repository.update_prospect_status(db, prospect_id, payload.status)
    db.commit()
    db.refresh(prospect)
    logger.info("Prospect %d status updated to %s via API.", prospect_id, payload.status.value)
    return _to_out(prospect)


@router.post(
    "/rapid",
    response_model=ProspectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a prospect from the rapid checklist",
)
def add_rapid_prospect(payload: RapidProspectRequest, db: Session = Depends(get_db)):
    """Score the rapid checklist locally and save a 'To Contact' draft prospect."""
    prospect = prospect_service.add_rapid_prospect(
        db,
        instagram_handle=payload.instagram_handle,
        checklist=payload.checklist,
        follower_count=payload.follower_count,
    )
    db.commit()
    db.refresh(prospect)
    return _to_out(prospect)


@router.post("/{prospect_id}/metrics", response_model=ProfileMetrics, summary="Refresh Instagram metrics")
def refresh_metrics(prospect_id: int, db: Session = Depends(get_db)):
    """Fetch public Instagram metrics for the prospect's handle and store them."""
    metrics = prospect_service.refresh_prospect_metrics(db, prospect_id)
    db.commit()
    return metrics


@router.post("/{prospect_id}/qualify", response_model=EvaluationResult, summary="Qualify a prospect")
def qualify(prospect_id: int, payload: QualifyRequest, db: Session = Depends(get_db)):
    """
    Evaluate the prospect's stored metrics with the human assessment and store
    the score, qualification data, tags and summary. A failed evaluation
    leaves the prospect unchanged.
    """
    result = prospect_service.qualify_prospect(
        db, prospect_id, payload.assessment, backend=payload.backend,
    )
    db.commit()
    return result


@router.post(
    "/{prospect_id}/qualifier-question",
    response_model=QualifierQuestionOut,
    summary="Generate the qualifier question",
)
def qualifier_question(prospect_id: int, db: Session = Depends(get_db)):
    question = prospect_service.create_qualifier_question(db, prospect_id)
    db.commit()
    return QualifierQuestionOut(prospect_id=prospect_id, question=question)

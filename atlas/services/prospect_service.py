"""
atlas/services/prospect_service.py — Business logic orchestrating the
metrics → qualification → DB persistence pipeline.

This is the "glue" layer that coordinates:
  - Refreshing a prospect's public metrics
  - Running the configured evaluator on a stored prospect
  - Persisting qualification results (the evaluators themselves never write)
  - Creating draft prospects from the rapid yes/no checklist
  - Generating the pre-audit qualifier question
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from atlas.ai_engine.processor import evaluate_prospect, generate_qualifier_question
from atlas.config import settings
from atlas.db import repository
from atlas.db.models import Prospect, ProspectSource
from atlas.ingestion.metrics import fetch_instagram_metrics, normalize_handle
from atlas.qualification.errors import ValidationError
from atlas.qualification.heuristics import evaluate_prospect_locally
from atlas.qualification.models import (
    EvaluationResult,
    HumanAssessment,
    ProfileMetrics,
    RapidChecklist,
)
from atlas.qualification.taxonomy import derive_tags
from atlas.services.scoring import score_rapid_checklist

logger = logging.getLogger(__name__)

Evaluator = Callable[[ProfileMetrics, HumanAssessment], EvaluationResult]

EVALUATORS: dict[str, Evaluator] = {
    "llm": evaluate_prospect,
    "rules": evaluate_prospect_locally,
}


def get_evaluator(backend: Optional[str] = None) -> Evaluator:
    """Resolve an evaluator backend name; defaults to settings.evaluator_backend."""
    name = backend or settings.evaluator_backend
    try:
        return EVALUATORS[name]
    except KeyError:
        raise ValueError(f"Unknown evaluator backend {name!r}; expected one of {sorted(EVALUATORS)}") from None


def prospect_metrics(prospect: Prospect) -> ProfileMetrics:
    """Build evaluator input from the metrics stored on a prospect."""
    return ProfileMetrics(
        instagram_handle=prospect.instagram_handle or prospect.name,
        follower_count=prospect.follower_count,
        post_count=prospect.post_count,
        avg_likes=prospect.avg_likes,
        avg_comments=prospect.avg_comments,
        biography=prospect.biography,
    )


def qualify_prospect(
    db: Session,
    prospect_id: int,
    assessment: HumanAssessment,
    backend: Optional[str] = None,
) -> EvaluationResult:
    """
    Evaluate a stored prospect and persist the result.

    Any evaluator error propagates and the prospect row is left unmodified.

    Raises:
        ProspectNotFound, ValidationError, GenerationFailure
    """
    evaluator = get_evaluator(backend)
    prospect = repository.get_prospect_or_raise(db, prospect_id)

    result = evaluator(prospect_metrics(prospect), assessment)

    repository.update_prospect_qualification(db, prospect_id, result)
    return result


def refresh_prospect_metrics(db: Session, prospect_id: int) -> ProfileMetrics:
    """
    Fetch fresh public metrics for a prospect and store them.

    Raises:
        ProspectNotFound, MetricsUnavailable
    """
    prospect = repository.get_prospect_or_raise(db, prospect_id)
    metrics = fetch_instagram_metrics(prospect.instagram_handle or "")
    repository.update_prospect_metrics(db, prospect_id, metrics)
    return metrics


def add_rapid_prospect(
    db: Session,
    instagram_handle: str,
    checklist: RapidChecklist,
    follower_count: Optional[int] = None,
) -> Prospect:
    """
    Create a draft "To Contact" prospect from the rapid yes/no checklist.

    The score comes from the rapid model (no text-generation call); tags come
    from the shared rule table.

    Raises:
        ValidationError: If the handle is empty or already tracked.
    """
    handle = normalize_handle(instagram_handle)
    if not handle:
        raise ValidationError("An Instagram handle is required.")
    if repository.get_prospect_by_handle(db, handle) is not None:
        raise ValidationError(f"@{handle} is already being tracked.")

    lead_score = score_rapid_checklist(checklist, follower_count)
    data = checklist.to_qualification_data()
    pain_points, goals = derive_tags(data)

    logger.info("Rapid prospect @%s scored %d.", handle, lead_score)
    return repository.create_prospect(
        db,
        name=handle,
        instagram_handle=handle,
        metrics=ProfileMetrics(instagram_handle=handle, follower_count=follower_count),
        source=ProspectSource.RAPID,
        lead_score=lead_score,
        qualification_data=data,
        pain_points=pain_points,
        goals=goals,
    )


def create_qualifier_question(db: Session, prospect_id: int) -> str:
    """
    Generate and store the pre-audit qualifier question for a prospect.

    Raises:
        ProspectNotFound, GenerationFailure
    """
    prospect = repository.get_prospect_or_raise(db, prospect_id)
    question = generate_qualifier_question(
        prospect_name=prospect.name,
        instagram_handle=prospect.instagram_handle,
        pain_points=prospect.pain_points,
        goals=prospect.goals,
        last_message=prospect.last_message_snippet,
    )
    repository.save_qualifier_question(db, prospect_id, question)
    return question

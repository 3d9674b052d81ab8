"""
api/endpoints/qualification_routes.py — Stateless scoring routes.

POST /qualification/evaluate    — Qualify metrics + human assessment (nothing is stored)
POST /qualification/rapid-score — Score the rapid yes/no checklist (nothing is stored)
"""

from fastapi import APIRouter

from atlas.qualification.models import EvaluationResult
from atlas.qualification.taxonomy import derive_tags
from atlas.services.prospect_service import get_evaluator
from atlas.services.scoring import score_rapid_checklist
from api.schemas import EvaluateRequest, RapidScoreRequest, RapidScoreResult

router = APIRouter()


@router.post("/evaluate", response_model=EvaluationResult, summary="Evaluate a prospect")
def evaluate(payload: EvaluateRequest):
    """
    Run the evaluator on the given metrics and assessment and return the
    qualification, lead score, tags and summary without persisting anything.
    """
    evaluator = get_evaluator(payload.backend)
    return evaluator(payload.metrics, payload.assessment)


@router.post("/rapid-score", response_model=RapidScoreResult, summary="Score the rapid checklist")
def rapid_score(payload: RapidScoreRequest):
    """Score the rapid yes/no checklist locally. The result is on the 0–75 rapid scale."""
    pain_points, goals = derive_tags(payload.checklist.to_qualification_data())
    return RapidScoreResult(
        lead_score=score_rapid_checklist(payload.checklist, payload.follower_count),
        pain_points=pain_points,
        goals=goals,
    )

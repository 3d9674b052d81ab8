"""
atlas/services/scoring.py — The two lead-scoring models and score tiers.

Two independent additive models live here:
  - compute_lead_score()      — the evaluator model (base 10, clamped to 0–100)
  - score_rapid_checklist()   — the rapid-entry model (base 0, unclamped)

Their scales differ and callers must not mix scores from one with the other.
"""

import logging

from atlas.config import settings
from atlas.qualification.models import QualificationData, RapidChecklist
from atlas.qualification.taxonomy import (
    ContentPillarClarity,
    ProfitabilityPotential,
    SalesFunnelStrength,
    TriState,
    ValueProposition,
)

logger = logging.getLogger(__name__)


# ── Evaluator model ───────────────────────────────────────────────────────────

EVALUATOR_BASE_SCORE = 10

PROFITABILITY_POINTS = {
    ProfitabilityPotential.HIGH: 20,
    ProfitabilityPotential.MEDIUM: 10,
    ProfitabilityPotential.LOW: -15,
}

SALES_FUNNEL_POINTS = {
    SalesFunnelStrength.STRONG: 10,
    SalesFunnelStrength.WEAK: 5,
}

# (exclusive lower bound, points) — highest matching tier only
FOLLOWER_TIERS = ((10_000, 10), (1_000, 5))


def _follower_points(follower_count: int | None) -> int:
    if follower_count is None:
        return 0
    for floor, points in FOLLOWER_TIERS:
        if follower_count > floor:
            return points
    return 0


def raw_lead_score(data: QualificationData, follower_count: int | None) -> int:
    """Unclamped evaluator sum. Can fall below 0 for low-profitability accounts."""
    score = EVALUATOR_BASE_SCORE
    if data.is_business == TriState.YES:
        score += 15
    score += PROFITABILITY_POINTS.get(data.profitability_potential, 0)
    score += SALES_FUNNEL_POINTS.get(data.sales_funnel_strength, 0)
    score += _follower_points(follower_count)
    if data.content_pillar_clarity == ContentPillarClarity.UNCLEAR:
        score += 10
    if data.has_low_engagement == TriState.YES:
        score += 10
    if data.has_inconsistent_grid == TriState.YES:
        score += 10
    if data.has_no_clear_cta == TriState.YES:
        score += 5
    return score


def compute_lead_score(data: QualificationData, follower_count: int | None) -> int:
    """
    Score a qualification snapshot with the evaluator model.

    Args:
        data:           The full qualification snapshot.
        follower_count: Follower count, or None if unavailable (adds nothing).

    Returns:
        Lead score clamped to [0, 100].
    """
    raw = raw_lead_score(data, follower_count)
    score = max(0, min(100, raw))
    if score != raw:
        logger.debug("Lead score %d clamped to %d.", raw, score)
    return score


# ── Rapid-entry model ─────────────────────────────────────────────────────────

RAPID_FOLLOWER_FLOOR = 500


def score_rapid_checklist(checklist: RapidChecklist, follower_count: int | None) -> int:
    """
    Score the rapid yes/no checklist. Pure; no base offset and no clamping.

    The maximum reachable score is 75, so this scale never reaches the
    evaluator's 100.
    """
    score = 0
    if checklist.is_business == TriState.YES:
        score += 20
    if checklist.has_inconsistent_grid == TriState.YES:
        score += 15
    if checklist.has_low_engagement == TriState.YES:
        score += 15
    if checklist.has_no_clear_cta == TriState.YES:
        score += 10
    if checklist.value_proposition != ValueProposition.UNKNOWN:
        score += 5
    if follower_count is not None and follower_count > RAPID_FOLLOWER_FLOOR:
        score += 10
    return score


# ── Tiers & next action ───────────────────────────────────────────────────────

NEXT_ACTIONS = {
    "hot": "Send a personalised cold outreach DM",
    "warm": "Start the warm-up sequence before reaching out",
    "cold": "Nurture or skip; low expected value",
    "unscored": "Qualify this prospect first",
}


def score_tier(score: int | None) -> str:
    """Bucket a lead score into hot / warm / cold (or unscored)."""
    if score is None:
        return "unscored"
    if score >= settings.hot_lead_threshold:
        return "hot"
    if score >= settings.warm_lead_threshold:
        return "warm"
    return "cold"


def recommend_next_action(score: int | None) -> str:
    return NEXT_ACTIONS[score_tier(score)]

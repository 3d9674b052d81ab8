"""
atlas/ai_engine/processor.py — LangChain chain implementations for the AI engine.

Two public functions:
  evaluate_prospect(metrics, assessment)     → EvaluationResult
  generate_qualifier_question(...)           → str

Both raise GenerationFailure instead of inventing a fallback when the model
call fails or its output doesn't match the expected structure.
"""

import logging

from pydantic import ValidationError as SchemaError

from atlas.ai_engine.prompt_templates import (
    PROSPECT_QUALIFICATION_PROMPT,
    QUALIFIER_QUESTION_PROMPT,
)
from atlas.ai_engine.utils import (
    build_openrouter_llm,
    format_optional,
    parse_json_object,
    truncate_for_context,
)
from atlas.qualification.errors import GenerationFailure
from atlas.qualification.models import (
    EvaluationResult,
    GeneratedQualification,
    HumanAssessment,
    ProfileMetrics,
    QualificationData,
)
from atlas.qualification.taxonomy import GOALS, PAIN_POINTS, derive_tags, filter_vocabulary
from atlas.services.scoring import compute_lead_score, recommend_next_action

logger = logging.getLogger(__name__)


def _invoke(chain, variables: dict, what: str) -> str:
    """Run a chain once and return the raw text, wrapping any client error."""
    try:
        response = chain.invoke(variables)
    except Exception as exc:
        logger.error("%s generation call failed: %s", what, exc)
        raise GenerationFailure(f"{what} generation call failed: {exc}") from exc
    return response.content if hasattr(response, "content") else str(response)


# ── 1. Prospect Qualification ─────────────────────────────────────────────────

def evaluate_prospect(
    metrics: ProfileMetrics,
    assessment: HumanAssessment,
) -> EvaluationResult:
    """
    Use the LLM to qualify an Instagram prospect.

    The model classifies the signals and proposes tags; the lead score is then
    recomputed locally with the additive scoring model so it never depends on
    the model's arithmetic.

    Args:
        metrics:    Public profile metrics; any field may be None.
        assessment: The three human assessment answers (all required).

    Returns:
        EvaluationResult with all eight qualification fields populated.

    Raises:
        ValidationError:   If any assessment answer is empty (no call is made).
        GenerationFailure: If the call fails or returns an incomplete structure.
    """
    assessment.require_complete()

    llm = build_openrouter_llm(temperature=0.1)  # low temp for consistent classification
    chain = PROSPECT_QUALIFICATION_PROMPT | llm

    logger.info("Qualifying prospect @%s", metrics.instagram_handle)

    raw_text = _invoke(chain, {
        "instagram_handle": metrics.instagram_handle,
        "biography": truncate_for_context(metrics.biography, max_chars=500) or "Not available",
        "follower_count": format_optional(metrics.follower_count),
        "post_count": format_optional(metrics.post_count),
        "avg_likes": format_optional(metrics.avg_likes),
        "avg_comments": format_optional(metrics.avg_comments),
        "profitability": assessment.profitability,
        "visuals": assessment.visuals,
        "strategy": assessment.strategy,
        "pain_points": ", ".join(f'"{p}"' for p in PAIN_POINTS),
        "goals": ", ".join(f'"{g}"' for g in GOALS),
    }, what="Qualification")

    parsed = parse_json_object(raw_text)
    if parsed is None:
        logger.error("Qualification returned non-dict for @%s: %s", metrics.instagram_handle, raw_text[:200])
        raise GenerationFailure("Qualification returned no structured output.")

    try:
        generated = GeneratedQualification.model_validate(parsed)
    except SchemaError as exc:
        logger.error("Qualification output for @%s failed validation: %s", metrics.instagram_handle, exc)
        raise GenerationFailure(f"Qualification output is incomplete: {exc}") from exc

    if not generated.summary.strip():
        raise GenerationFailure("Qualification output has an empty summary.")

    data = QualificationData.model_validate(generated.qualification_data.model_dump())
    lead_score = compute_lead_score(data, metrics.follower_count)
    if lead_score != generated.lead_score:
        logger.warning(
            "Model reported leadScore=%d for @%s; scoring model gives %d — using %d.",
            generated.lead_score, metrics.instagram_handle, lead_score, lead_score,
        )

    # The model may add tags but never drop one the rule table implies
    rule_pain_points, rule_goals = derive_tags(data)
    pain_points = filter_vocabulary(generated.pain_points + rule_pain_points, PAIN_POINTS)
    goals = filter_vocabulary(generated.goals + rule_goals, GOALS)

    result = EvaluationResult(
        qualification_data=data,
        lead_score=lead_score,
        pain_points=pain_points,
        goals=goals,
        summary=generated.summary.strip(),
        next_action=recommend_next_action(lead_score),
    )

    logger.info(
        "Qualification result for @%s: score=%d profitability=%s",
        metrics.instagram_handle, result.lead_score, data.profitability_potential.value,
    )
    return result


# ── 2. Qualifier Question ─────────────────────────────────────────────────────

def generate_qualifier_question(
    prospect_name: str,
    instagram_handle: str | None,
    pain_points: list[str] | None = None,
    goals: list[str] | None = None,
    last_message: str | None = None,
) -> str:
    """
    Generate the single pre-audit qualifier question to DM a prospect.

    Args:
        prospect_name:    Display name of the prospect.
        instagram_handle: Their handle, without '@'.
        pain_points:      Tags from qualification, if any.
        goals:            Tags from qualification, if any.
        last_message:     The last message they sent us, if known.

    Returns:
        The question text.

    Raises:
        GenerationFailure: If the call fails or returns no question.
    """
    llm = build_openrouter_llm(temperature=0.8)  # conversational copy
    chain = QUALIFIER_QUESTION_PROMPT | llm

    logger.info("Generating qualifier question for %s", prospect_name)

    raw_text = _invoke(chain, {
        "prospect_name": prospect_name,
        "instagram_handle": instagram_handle or "unknown",
        "last_message": truncate_for_context(last_message, max_chars=500) or "None",
        "pain_points": ", ".join(pain_points) if pain_points else "Not specified",
        "goals": ", ".join(goals) if goals else "Not specified",
    }, what="Qualifier question")

    parsed = parse_json_object(raw_text)
    question = parsed.get("question") if parsed is not None else None
    if not isinstance(question, str) or not question.strip():
        logger.error("Qualifier question returned invalid structure for %s: %s", prospect_name, raw_text[:200])
        raise GenerationFailure("Qualifier question generation returned no question.")

    return question.strip()

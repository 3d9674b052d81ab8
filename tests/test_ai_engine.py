"""
tests/test_ai_engine.py — Unit tests for the AI engine layer.

Tests helpers and output parsing WITHOUT making real LLM API calls.
The processor functions (evaluate_prospect, generate_qualifier_question) are
tested with mocked LLM responses to keep tests fast and free.
"""

import json
import pytest
from unittest.mock import MagicMock, patch

from atlas.ai_engine.utils import format_optional, parse_json_object, truncate_for_context
from atlas.ai_engine.processor import evaluate_prospect, generate_qualifier_question
from atlas.qualification.errors import GenerationFailure, ValidationError
from atlas.qualification.models import HumanAssessment, ProfileMetrics
from atlas.qualification.taxonomy import ProfitabilityPotential, TriState
from atlas.services.scoring import NEXT_ACTIONS


# ── Sample data ───────────────────────────────────────────────────────────────

METRICS = ProfileMetrics(
    instagram_handle="glow.by.amina",
    follower_count=15_000,
    post_count=312,
    avg_likes=95.3,
    avg_comments=4.0,
    biography="Skin clinic in Leeds ✨ Facials & peels",
)

ASSESSMENT = HumanAssessment(
    profitability="High (Clear offer, high-ticket)",
    visuals="Inconsistent / Messy",
    strategy="Getting Leads / Sales",
)

VALID_OUTPUT = {
    "qualificationData": {
        "isBusiness": "yes",
        "hasInconsistentGrid": "yes",
        "hasLowEngagement": "yes",
        "hasNoClearCTA": "yes",
        "valueProposition": "leads",
        "profitabilityPotential": "high",
        "contentPillarClarity": "unclear",
        "salesFunnelStrength": "weak",
    },
    "leadScore": 95,
    "painPoints": ["Not converting followers to clients", "Low engagement", "Inconsistent grid"],
    "goals": ["Sell more / monetize IG", "Attract ideal clients"],
    "summary": "A profitable clinic whose grid and missing CTA are costing them bookings.",
}


# Every tag the rule table implies for VALID_OUTPUT's qualificationData
EXPECTED_PAIN_POINTS = [
    "Low engagement",
    "Inconsistent grid",
    "No clear CTA / no DMs",
    "Weak branding or visuals",
    "Posting with no result",
    "Not converting followers to clients",
]
EXPECTED_GOALS = [
    "Attract ideal clients",
    "Boost engagement",
    "Clean up design / grid",
    "Build credibility",
    "Sell more / monetize IG",
]


def _mock_llm_response(content: str):
    """Build a mock LangChain response object."""
    mock = MagicMock()
    mock.content = content
    return mock


def _chain_returning(content: str):
    mock_chain = MagicMock()
    mock_chain.invoke.return_value = _mock_llm_response(content)
    return mock_chain


# ── parse_json_object ─────────────────────────────────────────────────────────

class TestParseJsonObject:
    def test_parses_clean_json_object(self):
        assert parse_json_object('{"leadScore": 85}') == {"leadScore": 85}

    def test_strips_markdown_code_fence(self):
        assert parse_json_object('```json\n{"key": "value"}\n```') == {"key": "value"}

    def test_extracts_json_from_surrounding_text(self):
        text = 'Here is the evaluation:\n{"leadScore": 75}\nHope this helps.'
        assert parse_json_object(text) == {"leadScore": 75}

    def test_returns_none_for_invalid_json(self):
        assert parse_json_object("I can't evaluate this profile.") is None

    def test_array_is_not_an_object(self):
        assert parse_json_object('["Low engagement"]') is None

    def test_returns_none_for_empty_string(self):
        assert parse_json_object("") is None

    def test_returns_none_for_none(self):
        assert parse_json_object(None) is None


# ── truncate_for_context / format_optional ────────────────────────────────────

class TestPromptHelpers:
    def test_long_bio_truncated(self):
        result = truncate_for_context("a" * 600, max_chars=500)
        assert len(result) == 503
        assert result.endswith("...")

    def test_none_bio_returns_empty(self):
        assert truncate_for_context(None, max_chars=500) == ""

    def test_format_optional_keeps_zero(self):
        assert format_optional(0) == "0"
        assert format_optional(12.5) == "12.5"

    def test_format_optional_missing_is_na(self):
        assert format_optional(None) == "N/A"
        assert format_optional("") == "N/A"


# ── evaluate_prospect (mocked LLM) ────────────────────────────────────────────

class TestEvaluateProspect:
    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_valid_response(self, mock_build_llm):
        """LLM returns well-formed JSON → EvaluationResult populated correctly."""
        mock_chain = _chain_returning(json.dumps(VALID_OUTPUT))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = evaluate_prospect(METRICS, ASSESSMENT)

        assert result.lead_score == 95
        assert result.qualification_data.is_business == TriState.YES
        assert result.qualification_data.profitability_potential == ProfitabilityPotential.HIGH
        # Model tags plus rule-table tags, in vocabulary order
        assert result.pain_points == EXPECTED_PAIN_POINTS
        assert result.goals == EXPECTED_GOALS
        assert result.summary.startswith("A profitable clinic")
        assert result.next_action == NEXT_ACTIONS["hot"]

        variables = mock_chain.invoke.call_args[0][0]
        assert variables["instagram_handle"] == "glow.by.amina"
        assert variables["follower_count"] == "15000"

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_model_score_is_replaced_by_local_score(self, mock_build_llm):
        output = dict(VALID_OUTPUT, leadScore=40)
        mock_chain = _chain_returning(json.dumps(output))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = evaluate_prospect(METRICS, ASSESSMENT)

        assert result.lead_score == 95

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_rule_implied_tags_added_when_model_omits_them(self, mock_build_llm):
        output = dict(VALID_OUTPUT, painPoints=[], goals=[])
        mock_chain = _chain_returning(json.dumps(output))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = evaluate_prospect(METRICS, ASSESSMENT)

        assert result.pain_points == EXPECTED_PAIN_POINTS
        assert result.goals == EXPECTED_GOALS

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_model_can_add_tags_beyond_the_rule_table(self, mock_build_llm):
        output = dict(VALID_OUTPUT, painPoints=["Outdated profile or bio"], goals=["Grow followers"])
        mock_chain = _chain_returning(json.dumps(output))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = evaluate_prospect(METRICS, ASSESSMENT)

        assert "Outdated profile or bio" in result.pain_points
        assert "Inconsistent grid" in result.pain_points
        assert result.goals[0] == "Grow followers"
        assert "Attract ideal clients" in result.goals

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_missing_field_raises_generation_failure(self, mock_build_llm):
        output = json.loads(json.dumps(VALID_OUTPUT))
        del output["qualificationData"]["salesFunnelStrength"]
        mock_chain = _chain_returning(json.dumps(output))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(GenerationFailure):
                evaluate_prospect(METRICS, ASSESSMENT)

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_unknown_tag_raises_generation_failure(self, mock_build_llm):
        output = dict(VALID_OUTPUT, painPoints=["Bad vibes"])
        mock_chain = _chain_returning(json.dumps(output))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(GenerationFailure):
                evaluate_prospect(METRICS, ASSESSMENT)

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_non_json_output_raises_generation_failure(self, mock_build_llm):
        mock_chain = _chain_returning("Sorry, I can't help with that.")
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(GenerationFailure, match="no structured output"):
                evaluate_prospect(METRICS, ASSESSMENT)

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_chain_exception_raises_generation_failure(self, mock_build_llm):
        mock_chain = MagicMock()
        mock_chain.invoke.side_effect = TimeoutError("Request timed out")
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.PROSPECT_QUALIFICATION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(GenerationFailure) as exc_info:
                evaluate_prospect(METRICS, ASSESSMENT)

        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_empty_assessment_fails_before_any_call(self, mock_build_llm):
        assessment = HumanAssessment(profitability="", visuals="Outdated", strategy="Leads")

        with pytest.raises(ValidationError):
            evaluate_prospect(METRICS, assessment)

        mock_build_llm.assert_not_called()


# ── generate_qualifier_question (mocked LLM) ──────────────────────────────────

class TestGenerateQualifierQuestion:
    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_valid_question(self, mock_build_llm):
        question = "Quick one, are most of your bookings coming from Instagram right now?"
        mock_chain = _chain_returning(json.dumps({"question": question}))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.QUALIFIER_QUESTION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            result = generate_qualifier_question(
                prospect_name="Amina",
                instagram_handle="glow.by.amina",
                pain_points=["No clear CTA / no DMs"],
                goals=["Attract ideal clients"],
            )

        assert result == question
        variables = mock_chain.invoke.call_args[0][0]
        assert variables["pain_points"] == "No clear CTA / no DMs"
        assert variables["last_message"] == "None"

    @patch("atlas.ai_engine.processor.build_openrouter_llm")
    def test_missing_question_raises_generation_failure(self, mock_build_llm):
        mock_chain = _chain_returning(json.dumps({"reply": "hi"}))
        mock_build_llm.return_value = MagicMock()

        with patch("atlas.ai_engine.processor.QUALIFIER_QUESTION_PROMPT") as mock_prompt:
            mock_prompt.__or__ = MagicMock(return_value=mock_chain)
            with pytest.raises(GenerationFailure):
                generate_qualifier_question(prospect_name="Amina", instagram_handle=None)

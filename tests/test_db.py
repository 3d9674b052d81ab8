"""
tests/test_db.py — Unit tests for the repository and prospect service.

Uses the in-memory SQLite `db` fixture from conftest.py, so no real
database connection is required. Tests run fast and fully in isolation.
"""

import pytest
from unittest.mock import MagicMock, patch

from atlas.db.models import ProspectSource, ProspectStatus
from atlas.db.repository import (
    count_prospects_by_status,
    create_prospect,
    get_prospect,
    get_prospect_by_handle,
    get_prospect_or_raise,
    list_prospects,
    update_prospect_metrics,
    update_prospect_qualification,
    update_prospect_status,
)
from atlas.qualification.errors import GenerationFailure, ProspectNotFound, ValidationError
from atlas.qualification.models import (
    EvaluationResult,
    HumanAssessment,
    ProfileMetrics,
    QualificationData,
    RapidChecklist,
)
from atlas.qualification.taxonomy import ProfitabilityPotential, TriState, ValueProposition
from atlas.services import prospect_service


# ── Helpers ───────────────────────────────────────────────────────────────────

ASSESSMENT = HumanAssessment(
    profitability="Medium (Selling products or services)",
    visuals="Inconsistent / Messy",
    strategy="Building Community / Engagement",
)


def make_metrics(handle="bloom.bakery", followers=3_200) -> ProfileMetrics:
    return ProfileMetrics(
        instagram_handle=handle,
        follower_count=followers,
        post_count=140,
        avg_likes=20.0,
        avg_comments=2.0,
        biography="Sourdough & pastries in Bristol. Order via link 👇 bloom.co",
    )


def make_result(score=55) -> EvaluationResult:
    return EvaluationResult(
        qualification_data=QualificationData(
            is_business=TriState.YES,
            profitability_potential=ProfitabilityPotential.MEDIUM,
        ),
        lead_score=score,
        pain_points=["Low engagement"],
        goals=["Boost engagement"],
        summary="Local bakery with room to grow engagement.",
        next_action="Start the warm-up sequence before reaching out",
    )


# ── Prospect reads & writes ───────────────────────────────────────────────────

class TestCreateProspect:
    def test_create_records_initial_status(self, db):
        prospect = create_prospect(db, name="Bloom Bakery", instagram_handle="bloom.bakery", metrics=make_metrics())
        db.commit()

        assert prospect.id is not None
        assert prospect.status == ProspectStatus.TO_CONTACT
        assert prospect.source == ProspectSource.MANUAL
        assert prospect.follower_count == 3_200
        assert [h.status for h in prospect.status_history] == [ProspectStatus.TO_CONTACT]

    def test_qualification_data_stored_with_camel_case_keys(self, db):
        prospect = create_prospect(
            db,
            name="Bloom Bakery",
            qualification_data=QualificationData(has_no_clear_cta=TriState.YES),
        )
        db.commit()

        assert prospect.qualification_data["hasNoClearCTA"] == "yes"
        assert prospect.qualification_data["isBusiness"] == "unknown"

    def test_get_by_handle(self, db):
        create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        db.commit()

        assert get_prospect_by_handle(db, "bloom.bakery") is not None
        assert get_prospect_by_handle(db, "someone.else") is None

    def test_get_or_raise_unknown_id(self, db):
        with pytest.raises(ProspectNotFound, match="42"):
            get_prospect_or_raise(db, 42)


class TestListProspects:
    def test_ordered_by_score_with_unscored_last(self, db):
        create_prospect(db, name="unscored", instagram_handle="a")
        create_prospect(db, name="warm", instagram_handle="b", lead_score=40)
        create_prospect(db, name="hot", instagram_handle="c", lead_score=80)
        db.commit()

        assert [p.name for p in list_prospects(db)] == ["hot", "warm", "unscored"]

    def test_min_score_filter(self, db):
        create_prospect(db, name="warm", instagram_handle="b", lead_score=40)
        create_prospect(db, name="hot", instagram_handle="c", lead_score=80)
        db.commit()

        assert [p.name for p in list_prospects(db, min_score=60)] == ["hot"]

    def test_source_filter_keeps_score_scales_apart(self, db):
        create_prospect(db, name="rapid", instagram_handle="r", source=ProspectSource.RAPID, lead_score=70)
        create_prospect(db, name="evaluated", instagram_handle="e", source=ProspectSource.EVALUATED, lead_score=65)
        db.commit()

        assert [p.name for p in list_prospects(db)] == ["rapid", "evaluated"]
        assert [p.name for p in list_prospects(db, source=ProspectSource.EVALUATED)] == ["evaluated"]
        assert [p.name for p in list_prospects(db, source=ProspectSource.RAPID)] == ["rapid"]

    def test_status_filter_and_counts(self, db):
        first = create_prospect(db, name="one", instagram_handle="one")
        create_prospect(db, name="two", instagram_handle="two")
        update_prospect_status(db, first.id, ProspectStatus.REPLIED)
        db.commit()

        assert [p.name for p in list_prospects(db, status=ProspectStatus.REPLIED)] == ["one"]
        stats = count_prospects_by_status(db)
        assert stats["Replied"] == 1
        assert stats["To Contact"] == 1
        assert stats["total"] == 2


class TestUpdateProspect:
    def test_status_change_appends_history(self, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        update_prospect_status(db, prospect.id, ProspectStatus.WARM)
        update_prospect_status(db, prospect.id, ProspectStatus.WARM)
        update_prospect_status(db, prospect.id, ProspectStatus.REPLIED)
        db.commit()

        assert prospect.status == ProspectStatus.REPLIED
        assert [h.status for h in prospect.status_history] == [
            ProspectStatus.TO_CONTACT, ProspectStatus.WARM, ProspectStatus.REPLIED,
        ]

    def test_status_change_unknown_prospect(self, db):
        with pytest.raises(ProspectNotFound):
            update_prospect_status(db, 999, ProspectStatus.COLD)

    def test_qualification_update_writes_score_data_and_tags(self, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        db.commit()

        update_prospect_qualification(db, prospect.id, make_result(score=55))
        db.commit()

        stored = get_prospect(db, prospect.id)
        assert stored.lead_score == 55
        assert stored.source == ProspectSource.EVALUATED
        assert stored.qualification_data["profitabilityPotential"] == "medium"
        assert stored.pain_points == ["Low engagement"]
        assert stored.goals == ["Boost engagement"]
        assert stored.help_statement.startswith("Local bakery")

    def test_qualification_update_unknown_prospect(self, db):
        with pytest.raises(ProspectNotFound):
            update_prospect_qualification(db, 999, make_result())

    def test_metrics_update(self, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        db.commit()

        update_prospect_metrics(db, prospect.id, make_metrics(followers=5_000))
        db.commit()

        assert get_prospect(db, prospect.id).follower_count == 5_000


# ── Prospect service ──────────────────────────────────────────────────────────

class TestQualifyProspect:
    def test_rules_backend_persists_result(self, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery", metrics=make_metrics())
        db.commit()

        result = prospect_service.qualify_prospect(db, prospect.id, ASSESSMENT, backend="rules")
        db.commit()

        stored = get_prospect(db, prospect.id)
        assert stored.lead_score == result.lead_score
        assert stored.pain_points == result.pain_points
        assert stored.qualification_data["valueProposition"] == "engagement"
        assert stored.source == ProspectSource.EVALUATED

    def test_failed_evaluation_leaves_prospect_unchanged(self, db):
        prospect = create_prospect(
            db, name="Bloom", instagram_handle="bloom.bakery", metrics=make_metrics(), lead_score=33,
        )
        db.commit()

        failing = MagicMock(side_effect=GenerationFailure("timeout"))
        with patch.dict(prospect_service.EVALUATORS, {"llm": failing}):
            with pytest.raises(GenerationFailure):
                prospect_service.qualify_prospect(db, prospect.id, ASSESSMENT, backend="llm")
        db.commit()

        stored = get_prospect(db, prospect.id)
        assert stored.lead_score == 33
        assert stored.qualification_data is None
        assert stored.source == ProspectSource.MANUAL

    def test_incomplete_assessment_leaves_prospect_unchanged(self, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        db.commit()

        with pytest.raises(ValidationError):
            prospect_service.qualify_prospect(db, prospect.id, HumanAssessment(), backend="rules")

        assert get_prospect(db, prospect.id).lead_score is None

    def test_unknown_prospect(self, db):
        with pytest.raises(ProspectNotFound):
            prospect_service.qualify_prospect(db, 7, ASSESSMENT, backend="rules")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown evaluator backend"):
            prospect_service.get_evaluator("magic")


class TestAddRapidProspect:
    def test_creates_scored_draft(self, db):
        checklist = RapidChecklist(
            is_business=TriState.YES,
            has_inconsistent_grid=TriState.YES,
            has_low_engagement=TriState.NO,
            has_no_clear_cta=TriState.YES,
            value_proposition=ValueProposition.LEADS,
        )
        prospect = prospect_service.add_rapid_prospect(db, "@Bloom.Bakery", checklist, follower_count=1_200)
        db.commit()

        assert prospect.instagram_handle == "Bloom.Bakery"
        assert prospect.lead_score == 60
        assert prospect.status == ProspectStatus.TO_CONTACT
        assert prospect.source == ProspectSource.RAPID
        assert "Inconsistent grid" in prospect.pain_points
        assert prospect.goals == ["Attract ideal clients", "Clean up design / grid", "Sell more / monetize IG"]

    def test_duplicate_handle_rejected(self, db):
        prospect_service.add_rapid_prospect(db, "bloom.bakery", RapidChecklist())
        db.commit()

        with pytest.raises(ValidationError, match="already"):
            prospect_service.add_rapid_prospect(db, "@bloom.bakery", RapidChecklist())

    def test_empty_handle_rejected(self, db):
        with pytest.raises(ValidationError):
            prospect_service.add_rapid_prospect(db, "  @ ", RapidChecklist())


class TestServiceCollaborators:
    @patch("atlas.services.prospect_service.fetch_instagram_metrics")
    def test_refresh_metrics_stores_fetched_values(self, mock_fetch, db):
        prospect = create_prospect(db, name="Bloom", instagram_handle="bloom.bakery")
        db.commit()
        mock_fetch.return_value = make_metrics(followers=9_100)

        prospect_service.refresh_prospect_metrics(db, prospect.id)
        db.commit()

        mock_fetch.assert_called_once_with("bloom.bakery")
        assert get_prospect(db, prospect.id).follower_count == 9_100

    @patch("atlas.services.prospect_service.generate_qualifier_question")
    def test_qualifier_question_saved(self, mock_generate, db):
        prospect = create_prospect(
            db, name="Bloom", instagram_handle="bloom.bakery", pain_points=["Low engagement"],
        )
        db.commit()
        mock_generate.return_value = "Are most of your orders coming from Instagram?"

        question = prospect_service.create_qualifier_question(db, prospect.id)
        db.commit()

        assert get_prospect(db, prospect.id).qualifier_question == question
        assert mock_generate.call_args.kwargs["pain_points"] == ["Low engagement"]
        assert get_prospect(db, prospect.id).status == ProspectStatus.TO_CONTACT


# ── Schema setup ──────────────────────────────────────────────────────────────

class TestSchemaSetup:
    def test_create_tables_on_configured_engine(self):
        from atlas.db.session import check_connection, create_tables

        check_connection()
        assert {"prospects", "prospect_status_history"} <= set(create_tables())

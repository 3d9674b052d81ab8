"""
api/schemas.py — Pydantic request/response models for all API endpoints.

These are the API contract — separate from DB ORM models so we can
control exactly what data is exposed over HTTP. Payloads use camelCase
keys, matching the qualification contract.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from atlas.db.models import ProspectSource, ProspectStatus
from atlas.qualification.models import (
    HumanAssessment,
    ProfileMetrics,
    RapidChecklist,
)


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ── Qualification ─────────────────────────────────────────────────────────────

class EvaluateRequest(_ApiModel):
    metrics: ProfileMetrics
    assessment: HumanAssessment
    backend: Optional[Literal["llm", "rules"]] = Field(default=None, description="Defaults to EVALUATOR_BACKEND")


class RapidScoreRequest(_ApiModel):
    checklist: RapidChecklist
    follower_count: Optional[int] = Field(default=None, ge=0)


class RapidScoreResult(_ApiModel):
    lead_score: int
    pain_points: list[str]
    goals: list[str]


# ── Prospect ──────────────────────────────────────────────────────────────────

class RapidProspectRequest(RapidScoreRequest):
    instagram_handle: str


class QualifyRequest(_ApiModel):
    assessment: HumanAssessment
    backend: Optional[Literal["llm", "rules"]] = None


class ProspectStatusUpdate(_ApiModel):
    status: ProspectStatus = Field(..., description="New outreach stage")


class StatusHistoryOut(_ApiModel):
    status: ProspectStatus
    changed_at: Optional[datetime] = None


class ProspectOut(_ApiModel):
    id: int
    name: str
    instagram_handle: Optional[str] = None
    status: ProspectStatus
    source: ProspectSource
    follower_count: Optional[int] = None
    post_count: Optional[int] = None
    avg_likes: Optional[float] = None
    avg_comments: Optional[float] = None
    biography: Optional[str] = None
    lead_score: Optional[int] = None
    score_tier: Optional[str] = None
    qualification_data: Optional[dict[str, Any]] = None
    pain_points: Optional[list[str]] = None
    goals: Optional[list[str]] = None
    help_statement: Optional[str] = None
    qualifier_question: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status_history: list[StatusHistoryOut] = Field(default_factory=list)


class QualifierQuestionOut(_ApiModel):
    prospect_id: int
    question: str

"""
atlas/qualification/models.py — Typed inputs and outputs of the qualification core.

Python attributes are snake_case; the wire format (API payloads and the LLM
JSON contract) uses the camelCase aliases, e.g. `isBusiness`, `leadScore`.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from atlas.qualification.errors import ValidationError
from atlas.qualification.taxonomy import (
    GOALS,
    PAIN_POINTS,
    ContentPillarClarity,
    ProfitabilityPotential,
    SalesFunnelStrength,
    TriState,
    ValueProposition,
    filter_vocabulary,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Qualification snapshot ───────────────────────────────────────────────────

class QualificationData(_CamelModel):
    """Structured yes/no/enum signals derived from metrics and human judgment."""

    is_business: TriState = TriState.UNKNOWN
    has_inconsistent_grid: TriState = TriState.UNKNOWN
    has_low_engagement: TriState = TriState.UNKNOWN
    has_no_clear_cta: TriState = Field(default=TriState.UNKNOWN, alias="hasNoClearCTA")
    value_proposition: ValueProposition = ValueProposition.UNKNOWN
    profitability_potential: ProfitabilityPotential = ProfitabilityPotential.UNKNOWN
    content_pillar_clarity: ContentPillarClarity = ContentPillarClarity.UNKNOWN
    sales_funnel_strength: SalesFunnelStrength = SalesFunnelStrength.UNKNOWN


# ── Inputs ───────────────────────────────────────────────────────────────────

class ProfileMetrics(_CamelModel):
    """Public profile numbers. None means the value was unavailable."""

    instagram_handle: str
    follower_count: int | None = None
    post_count: int | None = None
    avg_likes: float | None = None
    avg_comments: float | None = None
    biography: str | None = None


class HumanAssessment(_CamelModel):
    """Free-text answers to the three manual assessment questions."""

    profitability: str = ""     # how does the account make money?
    visuals: str = ""           # first impression of the visual branding
    strategy: str = ""          # single biggest strategic opportunity

    def require_complete(self) -> None:
        """
        Raise ValidationError if any answer is empty.

        Called before any generation request is made.
        """
        missing = [
            name for name in ("profitability", "visuals", "strategy")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValidationError(
                f"Human assessment is incomplete; missing: {', '.join(missing)}"
            )


class RapidChecklist(_CamelModel):
    """The short yes/no checklist answered in the rapid-entry flow."""

    is_business: TriState = TriState.UNKNOWN
    has_inconsistent_grid: TriState = TriState.UNKNOWN
    has_low_engagement: TriState = TriState.UNKNOWN
    has_no_clear_cta: TriState = Field(default=TriState.UNKNOWN, alias="hasNoClearCTA")
    value_proposition: ValueProposition = ValueProposition.UNKNOWN

    def to_qualification_data(self) -> QualificationData:
        """Expand to a full snapshot; signals the checklist doesn't ask about stay unknown."""
        return QualificationData(
            is_business=self.is_business,
            has_inconsistent_grid=self.has_inconsistent_grid,
            has_low_engagement=self.has_low_engagement,
            has_no_clear_cta=self.has_no_clear_cta,
            value_proposition=self.value_proposition,
        )


# ── Outputs ──────────────────────────────────────────────────────────────────

class StrictQualificationData(QualificationData):
    """QualificationData with no defaults, used to validate generated output."""

    is_business: TriState
    has_inconsistent_grid: TriState
    has_low_engagement: TriState
    has_no_clear_cta: TriState = Field(alias="hasNoClearCTA")
    value_proposition: ValueProposition
    profitability_potential: ProfitabilityPotential
    content_pillar_clarity: ContentPillarClarity
    sales_funnel_strength: SalesFunnelStrength


class GeneratedQualification(_CamelModel):
    """
    The exact structure the text-generation call must return.

    Every field is required; a missing key fails validation.
    """

    qualification_data: StrictQualificationData
    lead_score: int
    pain_points: list[str]
    goals: list[str]
    summary: str

    @field_validator("pain_points")
    @classmethod
    def _known_pain_points(cls, value: list[str]) -> list[str]:
        unknown = set(value) - set(PAIN_POINTS)
        if unknown:
            raise ValueError(f"Unknown pain points: {sorted(unknown)}")
        return filter_vocabulary(value, PAIN_POINTS)

    @field_validator("goals")
    @classmethod
    def _known_goals(cls, value: list[str]) -> list[str]:
        unknown = set(value) - set(GOALS)
        if unknown:
            raise ValueError(f"Unknown goals: {sorted(unknown)}")
        return filter_vocabulary(value, GOALS)


class EvaluationResult(_CamelModel):
    """What the evaluator hands back to callers and to the prospect update."""

    qualification_data: QualificationData
    lead_score: int = Field(ge=0, le=100)
    pain_points: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    summary: str
    next_action: str

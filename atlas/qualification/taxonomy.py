"""
atlas/qualification/taxonomy.py — Shared enumerations and the tag vocabulary.

Holds the closed pain-point / goal vocabularies and the single rule table that
maps qualification signals to tags. The LLM evaluator, the rule evaluator and
the rapid-entry flow all read tags from here so they agree on tag semantics.
"""

import enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from atlas.qualification.models import QualificationData


# ── Signal enums ─────────────────────────────────────────────────────────────

class TriState(str, enum.Enum):
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


class ValueProposition(str, enum.Enum):
    VISUALS = "visuals"
    LEADS = "leads"
    ENGAGEMENT = "engagement"
    UNKNOWN = "unknown"


class ProfitabilityPotential(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class ContentPillarClarity(str, enum.Enum):
    UNCLEAR = "unclear"
    SOMEWHAT_CLEAR = "somewhat-clear"
    VERY_CLEAR = "very-clear"
    UNKNOWN = "unknown"


class SalesFunnelStrength(str, enum.Enum):
    NONE = "none"
    WEAK = "weak"
    STRONG = "strong"
    UNKNOWN = "unknown"


# ── Tag vocabularies ─────────────────────────────────────────────────────────
# Tuple order is canonical: derived tag lists are always returned in this order.

PAIN_POINTS = (
    "Low engagement",
    "Inconsistent grid",
    "No clear CTA / no DMs",
    "Weak branding or visuals",
    "Outdated profile or bio",
    "Posting with no result",
    "Not converting followers to clients",
    "New account / just starting",
)

GOALS = (
    "Grow followers",
    "Attract ideal clients",
    "Boost engagement",
    "Clean up design / grid",
    "Build credibility",
    "Sell more / monetize IG",
)


# ── Tag rule table ───────────────────────────────────────────────────────────

class TagRule(NamedTuple):
    field: str          # QualificationData attribute name
    value: enum.Enum    # signal value that fires the rule
    pain_points: tuple[str, ...]
    goals: tuple[str, ...]


TAG_RULES: tuple[TagRule, ...] = (
    TagRule("has_inconsistent_grid", TriState.YES,
            ("Inconsistent grid", "Weak branding or visuals"), ("Clean up design / grid",)),
    TagRule("has_low_engagement", TriState.YES,
            ("Low engagement",), ("Boost engagement",)),
    TagRule("has_no_clear_cta", TriState.YES,
            ("No clear CTA / no DMs",), ("Attract ideal clients",)),
    TagRule("value_proposition", ValueProposition.VISUALS,
            ("Weak branding or visuals",), ("Clean up design / grid", "Build credibility")),
    TagRule("value_proposition", ValueProposition.LEADS,
            ("Not converting followers to clients",), ("Attract ideal clients", "Sell more / monetize IG")),
    TagRule("value_proposition", ValueProposition.ENGAGEMENT,
            ("Posting with no result",), ("Boost engagement", "Grow followers")),
    TagRule("content_pillar_clarity", ContentPillarClarity.UNCLEAR,
            ("Posting with no result",), ("Build credibility",)),
    TagRule("sales_funnel_strength", SalesFunnelStrength.NONE,
            ("Not converting followers to clients",), ("Sell more / monetize IG",)),
    TagRule("is_business", TriState.NO,
            (), ("Grow followers",)),
)


def _canonical(tags: set[str], vocabulary: tuple[str, ...]) -> list[str]:
    return [tag for tag in vocabulary if tag in tags]


def derive_tags(data: "QualificationData") -> tuple[list[str], list[str]]:
    """
    Map a qualification snapshot to its pain-point and goal tags.

    Every rule whose field matches its value contributes its tags; the union is
    returned in vocabulary order, so equal snapshots always give equal lists.

    Returns:
        (pain_points, goals)
    """
    pain_points: set[str] = set()
    goals: set[str] = set()
    for rule in TAG_RULES:
        if getattr(data, rule.field) == rule.value:
            pain_points.update(rule.pain_points)
            goals.update(rule.goals)
    return _canonical(pain_points, PAIN_POINTS), _canonical(goals, GOALS)


def filter_vocabulary(tags: list[str], vocabulary: tuple[str, ...]) -> list[str]:
    """Return the members of `tags` found in `vocabulary`, in canonical order."""
    return _canonical(set(tags), vocabulary)

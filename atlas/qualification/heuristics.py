"""
atlas/qualification/heuristics.py — Local, rule-based qualification evaluator.

Same contract as the LLM evaluator in atlas.ai_engine.processor, but every
judgement comes from the keyword and threshold tables below instead of a
text-generation call. Signals the rules cannot decide fall back to "unknown".
"""

import logging
import re

from atlas.qualification.models import (
    EvaluationResult,
    HumanAssessment,
    ProfileMetrics,
    QualificationData,
)
from atlas.qualification.taxonomy import (
    ContentPillarClarity,
    ProfitabilityPotential,
    SalesFunnelStrength,
    TriState,
    ValueProposition,
    derive_tags,
)
from atlas.services.scoring import compute_lead_score, recommend_next_action, score_tier

logger = logging.getLogger(__name__)


# ── Keyword tables ────────────────────────────────────────────────────────────
# Tables are checked top to bottom; the first row with a matching keyword wins.
# Keywords match whole words only, so plural and -ing forms are listed explicitly.

PROFITABILITY_KEYWORDS: tuple[tuple[ProfitabilityPotential, tuple[str, ...]], ...] = (
    (ProfitabilityPotential.LOW, (
        "hobby", "personal account", "personal blog", "affiliate", "sponsorship",
        "brand deal", "brand deals", "pre-revenue", "unclear", "template",
        "templates", "e-book", "ebook", "e-books", "ebooks",
    )),
    (ProfitabilityPotential.HIGH, (
        "high-ticket", "high ticket", "coach", "coaching", "consulting",
        "consultant", "consultancy", "agency", "retreat", "retreats", "1-on-1",
        "one-on-one", "custom domain",
    )),
    (ProfitabilityPotential.MEDIUM, (
        "product", "products", "e-commerce", "ecommerce", "ecom", "shop", "shops",
        "store", "stores", "etsy", "physical goods", "local service",
        "local services", "salon", "restaurant", "in-person", "course", "courses",
    )),
)

VISUALS_KEYWORDS: tuple[tuple[TriState, tuple[str, ...]], ...] = (
    (TriState.UNKNOWN, ("too new", "not enough content")),
    (TriState.YES, (
        "messy", "inconsistent", "outdated", "unprofessional", "amateur",
        "poor quality", "unfocused", "no clear visual", "branding is unclear",
        "not very visually appealing",
    )),
    (TriState.NO, (
        "polished", "professional", "consistent", "cohesive", "on-brand",
        "clean", "expensive", "great branding",
    )),
)

STRATEGY_KEYWORDS: tuple[tuple[ValueProposition, tuple[str, ...]], ...] = (
    (ValueProposition.LEADS, (
        "conversion", "conversions", "convert", "converting", "lead", "leads",
        "paying", "customer", "customers", "client", "clients", "sales", "sell",
        "selling",
    )),
    (ValueProposition.ENGAGEMENT, (
        "engagement", "community", "interaction", "interactions", "trust", "growth",
    )),
    (ValueProposition.VISUALS, (
        "awareness", "brand identity", "branding", "visual", "visuals",
        "reach new", "aesthetic",
    )),
)

BUSINESS_KEYWORDS = (
    "coach", "coaching", "shop", "founder", "ceo", "e-commerce", "ecommerce",
    "service", "services", "book a call", "studio", "agency", "consulting",
    "consultant", "consultancy", "store", "order", "orders", "brand", "clinic",
    "salon", "boutique", "bookings", "business", "llc",
)

STRONG_CTA_KEYWORDS = (
    "book a call", "book now", "book your", "dm me", "dm for", "dm to",
    "shop now", "order now", "apply now", "apply here", "apply below",
    "schedule a call", "enquire", "enquiries", "inquire", "inquiries",
    "free guide", "download", "join the", "sign up", "email me",
)

# Scheme, www. or a bare domain such as bloom.co / linktr.ee
LINK_PATTERN = re.compile(
    r"(https?://|\bwww\.|\b[a-z0-9-]+\.(?:com|co|io|net|org|me|ee|uk|shop|store|studio|link|app)\b"
    r"|\blink in bio\b|\blink below\b|👇|⬇)",
    re.IGNORECASE,
)

NICHE_PATTERN = re.compile(r"\b(i help|helping|for (women|men|moms|busy|small|coaches|founders|brands))\b", re.IGNORECASE)

# Average engagement (likes + comments) / followers below this is "low"
LOW_ENGAGEMENT_RATE = 0.01

SHORT_BIO_CHARS = 20


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE)


def _compile_table(table):
    return tuple((value, _keyword_pattern(keywords)) for value, keywords in table)


_PROFITABILITY_PATTERNS = _compile_table(PROFITABILITY_KEYWORDS)
_VISUALS_PATTERNS = _compile_table(VISUALS_KEYWORDS)
_STRATEGY_PATTERNS = _compile_table(STRATEGY_KEYWORDS)
_BUSINESS_PATTERN = _keyword_pattern(BUSINESS_KEYWORDS)
_STRONG_CTA_PATTERN = _keyword_pattern(STRONG_CTA_KEYWORDS)


# ── Free-text classifiers ─────────────────────────────────────────────────────

def _match_table(text: str, patterns, default):
    for value, pattern in patterns:
        if pattern.search(text or ""):
            return value
    return default


def classify_profitability(answer: str) -> ProfitabilityPotential:
    """'High-ticket coaching' → high, 'selling products' → medium, 'hobby' → low."""
    return _match_table(answer, _PROFITABILITY_PATTERNS, ProfitabilityPotential.UNKNOWN)


def classify_visuals(answer: str) -> TriState:
    """Map a visual-branding impression to hasInconsistentGrid."""
    return _match_table(answer, _VISUALS_PATTERNS, TriState.UNKNOWN)


def classify_strategy(answer: str) -> ValueProposition:
    """Map the biggest strategic opportunity to a value proposition."""
    return _match_table(answer, _STRATEGY_PATTERNS, ValueProposition.UNKNOWN)


# ── Metric / bio inference ────────────────────────────────────────────────────

def infer_is_business(biography: str | None) -> TriState:
    if not biography:
        return TriState.UNKNOWN
    if _BUSINESS_PATTERN.search(biography):
        return TriState.YES
    return TriState.NO


def infer_has_no_clear_cta(biography: str | None) -> TriState:
    if not biography:
        return TriState.UNKNOWN
    if _STRONG_CTA_PATTERN.search(biography):
        return TriState.NO
    return TriState.YES


def infer_has_low_engagement(metrics: ProfileMetrics) -> TriState:
    """Engagement rate = (avg likes + avg comments) / followers; below 1% is low."""
    if not metrics.follower_count or metrics.avg_likes is None:
        return TriState.UNKNOWN
    interactions = metrics.avg_likes + (metrics.avg_comments or 0)
    rate = interactions / metrics.follower_count
    return TriState.YES if rate < LOW_ENGAGEMENT_RATE else TriState.NO


def infer_content_pillar_clarity(biography: str | None) -> ContentPillarClarity:
    if not biography:
        return ContentPillarClarity.UNKNOWN
    if NICHE_PATTERN.search(biography):
        return ContentPillarClarity.VERY_CLEAR
    if len(biography.strip()) < SHORT_BIO_CHARS:
        return ContentPillarClarity.UNCLEAR
    return ContentPillarClarity.SOMEWHAT_CLEAR


def infer_sales_funnel_strength(biography: str | None) -> SalesFunnelStrength:
    if not biography:
        return SalesFunnelStrength.UNKNOWN
    has_link = bool(LINK_PATTERN.search(biography))
    has_cta = infer_has_no_clear_cta(biography) == TriState.NO
    if has_link and has_cta:
        return SalesFunnelStrength.STRONG
    if has_link or has_cta:
        return SalesFunnelStrength.WEAK
    return SalesFunnelStrength.NONE


# ── Summary ───────────────────────────────────────────────────────────────────

_OPPORTUNITY_PHRASES = {
    ValueProposition.VISUALS: "tightening their visual branding",
    ValueProposition.LEADS: "turning their audience into paying clients",
    ValueProposition.ENGAGEMENT: "building engagement and community",
    ValueProposition.UNKNOWN: "clarifying their content strategy",
}


def _summarize(data: QualificationData, lead_score: int) -> str:
    account = "business account" if data.is_business == TriState.YES else "account"
    if data.profitability_potential == ProfitabilityPotential.UNKNOWN:
        viability = "with unclear profitability"
    else:
        viability = f"with {data.profitability_potential.value} profitability potential"
    return (
        f"This is a {account} {viability}. "
        f"The main opportunity is {_OPPORTUNITY_PHRASES[data.value_proposition]}, "
        f"making them a {score_tier(lead_score)} lead ({lead_score}/100)."
    )


# ── Evaluator ─────────────────────────────────────────────────────────────────

def evaluate_prospect_locally(
    metrics: ProfileMetrics,
    assessment: HumanAssessment,
) -> EvaluationResult:
    """
    Qualify a prospect with the local rule tables.

    Args:
        metrics:    Public profile metrics; any field may be None.
        assessment: The three human assessment answers (all required).

    Returns:
        EvaluationResult with all eight qualification fields populated.

    Raises:
        ValidationError: If any assessment answer is empty.
    """
    assessment.require_complete()

    data = QualificationData(
        is_business=infer_is_business(metrics.biography),
        has_inconsistent_grid=classify_visuals(assessment.visuals),
        has_low_engagement=infer_has_low_engagement(metrics),
        has_no_clear_cta=infer_has_no_clear_cta(metrics.biography),
        value_proposition=classify_strategy(assessment.strategy),
        profitability_potential=classify_profitability(assessment.profitability),
        content_pillar_clarity=infer_content_pillar_clarity(metrics.biography),
        sales_funnel_strength=infer_sales_funnel_strength(metrics.biography),
    )
    lead_score = compute_lead_score(data, metrics.follower_count)
    pain_points, goals = derive_tags(data)

    logger.info(
        "Rule evaluation for @%s: score=%d profitability=%s",
        metrics.instagram_handle, lead_score, data.profitability_potential.value,
    )
    return EvaluationResult(
        qualification_data=data,
        lead_score=lead_score,
        pain_points=pain_points,
        goals=goals,
        summary=_summarize(data, lead_score),
        next_action=recommend_next_action(lead_score),
    )

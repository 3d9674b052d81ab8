"""
atlas/ai_engine/prompt_templates.py — All LangChain prompt templates for the AI engine.

Two prompt chains:
  1. PROSPECT_QUALIFICATION — metrics + human assessment → structured qualification JSON
  2. QUALIFIER_QUESTION     — prospect context → one pre-audit DM question
"""

from langchain_core.prompts import ChatPromptTemplate


# ── 1. Prospect Qualification ─────────────────────────────────────────────────

PROSPECT_QUALIFICATION_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        (
            "You are an expert Instagram growth strategist and business analyst. "
            "You qualify prospects for a social-media marketing agency, with a strong "
            "focus on their ability and likelihood to invest in marketing services. "
            "Be analytical and concise, and follow the scoring model exactly."
        ),
    ),
    (
        "human",
        """Qualify this Instagram prospect.

PROSPECT DATA:
Handle: @{instagram_handle}
Bio: "{biography}"
Followers: {follower_count}
Posts: {post_count}
Avg. Likes: {avg_likes}
Avg. Comments: {avg_comments}

HUMAN ASSESSMENT (ground truth, do not second-guess it):
How the account makes money: {profitability}
Visual branding impression: {visuals}
Biggest strategic opportunity: {strategy}

INSTRUCTIONS:
1. From the bio and metrics, set isBusiness (commercial keywords like coach, shop,
   founder, service, "book a call"), hasLowEngagement (average engagement is 1-3%
   of followers; well below that is low), hasNoClearCTA, contentPillarClarity and
   salesFunnelStrength.
2. From "how the account makes money" set profitabilityPotential:
   high = high-ticket services, coaching, consulting, agencies;
   medium = physical products, e-commerce, local services;
   low = hobby, personal, affiliate or low-cost digital items.
3. From the visual impression set hasInconsistentGrid: messy, inconsistent,
   outdated or amateur → "yes"; polished, clean, consistent → "no".
4. From the strategic opportunity set valueProposition: brand awareness/visuals →
   "visuals", lead conversion/sales → "leads", community/engagement → "engagement".
5. Use "unknown" for any signal you cannot determine.
6. Calculate leadScore with this additive model:
   - Base: 10
   - isBusiness = "yes": +15
   - profitabilityPotential: "high" +20, "medium" +10, "low" -15
   - salesFunnelStrength: "strong" +10, "weak" +5
   - followerCount > 10000: +10, otherwise followerCount > 1000: +5 (never both)
   - contentPillarClarity = "unclear": +10
   - hasLowEngagement = "yes": +10
   - hasInconsistentGrid = "yes": +10
   - hasNoClearCTA = "yes": +5
   Clamp the result to 0-100.
7. Select painPoints ONLY from: {pain_points}
8. Select goals ONLY from: {goals}
9. Write a 1-2 sentence summary: the business type, the single biggest opportunity
   or risk, and their viability as a lead.

Return ONLY a valid JSON object with exactly these fields:
{{
  "qualificationData": {{
    "isBusiness": "yes" | "no" | "unknown",
    "hasInconsistentGrid": "yes" | "no" | "unknown",
    "hasLowEngagement": "yes" | "no" | "unknown",
    "hasNoClearCTA": "yes" | "no" | "unknown",
    "valueProposition": "visuals" | "leads" | "engagement" | "unknown",
    "profitabilityPotential": "low" | "medium" | "high" | "unknown",
    "contentPillarClarity": "unclear" | "somewhat-clear" | "very-clear" | "unknown",
    "salesFunnelStrength": "none" | "weak" | "strong" | "unknown"
  }},
  "leadScore": <integer 0-100>,
  "painPoints": ["<pain point>", ...],
  "goals": ["<goal>", ...],
  "summary": "<1-2 sentence summary>"
}}
""",
    ),
])


# ── 2. Qualifier Question ─────────────────────────────────────────────────────

QUALIFIER_QUESTION_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        (
            "You are an expert Instagram strategist. A prospect has just agreed to a "
            "free audit. You write ONE short follow-up DM question that gathers the "
            "last piece of information needed to make the audit hyper-relevant. "
            "Write like a real person sending a DM, not a marketing bot."
        ),
    ),
    (
        "human",
        """Write the qualifier question for this prospect.

PROSPECT CONTEXT:
Name: {prospect_name}
IG Handle: @{instagram_handle}
Their Last Message: "{last_message}"
Their Potential Pain Points: {pain_points}
Their Potential Goals: {goals}

REQUIREMENTS:
- Start with a brief positive acknowledgement (e.g. "Awesome, looking forward to it!")
- Briefly frame why you are asking (e.g. "So I can make this super targeted...")
- Ask ONE strategic question: a business outcome, a choice between two focus
  areas, or a specific likely pain point
- Keep it short, friendly and jargon-free

Return ONLY a valid JSON object with exactly this field:
{{
  "question": "<the DM question>"
}}
""",
    ),
])

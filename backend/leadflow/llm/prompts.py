from __future__ import annotations

from typing import Any, Dict, Mapping


# -------------------------------------------------------------------
# Titan scaling roadmap
# -------------------------------------------------------------------

TITAN_SYSTEM_PROMPT = (
    "You are the Titan Protocol Diagnostic Engine, a senior business systems strategist "
    "for health and wellness practices. You diagnose the single growth bottleneck and "
    "prescribe the order in which systems must be built. Output only valid JSON."
)

TITAN_PHASES = (
    "Phase 1: The Audit",
    "Phase 2: Growth Architecture",
    "Phase 3: Profit Flywheel Engine",
    "Phase 4: The High-Leverage CEO",
)


def _get(answers: Mapping[str, Any], key: str, default: str = "Not provided") -> str:
    value = answers.get(key)
    if value is None or str(value).strip() == "":
        return default
    return str(value).strip()


def build_titan_roadmap_prompt(answers: Mapping[str, Any]) -> str:
    """Render the quiz into the roadmap request. Output shape is fixed by titan_roadmap.schema.json."""
    phases = "\n".join(f"- {p}" for p in TITAN_PHASES)
    return f"""BUSINESS PROFILE
First Name: {_get(answers, "firstName")}
Business Name: {_get(answers, "businessName")}
Business Type: {_get(answers, "businessType")}
Main Offer: {_get(answers, "mainOffer")}
Current Revenue: {_get(answers, "monthlyRevenue")}
90-Day Goal: {_get(answers, "ninetyDayGoal")}
Biggest Frustration: {_get(answers, "biggestFrustration")}

SYSTEMS DIAGNOSTIC
CRM Usage: {_get(answers, "crmUsage")}
Lead Response Speed: {_get(answers, "leadResponseSpeed")}
Chat Agents/Automation: {_get(answers, "chatAgents")}
Estimated Missed Leads: {_get(answers, "missedLeads")}
Content Frequency: {_get(answers, "contentFrequency")}
Audience Size: {_get(answers, "audienceSize")}
Monthly Ad Budget: {_get(answers, "monthlyAdBudget")}

TASK
Build a personalized Titan Scaling Roadmap:
1. Name the ONE primary constraint holding this business back (diagnosis.primaryConstraint).
2. Pick the Titan phase to fix first from:
{phases}
3. Give the primary system to build with a week-by-week plan and a 72-hour blitz.
4. Include real industry benchmarks and success signals.
5. Warn against working on the wrong things.

RULES
- Specific and actionable, never motivational filler.
- Use the business data above to personalize every section.
- Return ONLY the JSON object, no markdown and no code fences."""


# -------------------------------------------------------------------
# Bonus playbooks (offer, facebook, instagram, leadgen)
# -------------------------------------------------------------------

_PLAYBOOK_OUTPUT_RULES = """
OUTPUT FORMAT: a single JSON object with these sections:
- "snapshot": {{"diagnosis": str, "pattern": str}}
- "benchmarks": {{"title": str, "metrics": [{{"label": str, "value": str, "context": str}}]}}
- "weeklyPlan": [{{"week": int, "title": str, "days": [{{"dayRange": str, "title": str, "tasks": [str]}}]}}]
- "successMetrics": [{{"metric": str, "target": str}}]
- "warnings": [{{"title": str, "reason": str}}]
- "milestone": {{"timeframe": str, "goal": str, "successSignals": [str], "nextStep": str}}

Task ids are derived from weeks, days and task order, so keep each week's days in execution order.
Return ONLY the JSON object. No markdown, no code fences, no explanations."""

_PLAYBOOK_HEADER = """
INPUT DATA:
Business: {business_name}
Revenue: {revenue_range}
Frustration: {primary_frustration}
"""

PLAYBOOK_SYSTEM_PROMPTS: Dict[str, str] = {
    "offer": (
        "You are creating an offer optimization playbook for a health practice owner. "
        "Help them define one signature offer, price it without discounting and validate it "
        "in real sales conversations before building anything else."
        + _PLAYBOOK_HEADER + _PLAYBOOK_OUTPUT_RULES
    ),
    "facebook": (
        "You are creating a Facebook and Instagram paid ads launch playbook for a health practice owner. "
        "Cover campaign structure, creative testing, budget pacing and the lead-to-booking handoff, "
        "with Meta benchmarks for health and wellness."
        + _PLAYBOOK_HEADER + _PLAYBOOK_OUTPUT_RULES
    ),
    "instagram": (
        "You are creating an organic Instagram growth playbook for a health practice owner. "
        "Cover content pillars, a posting cadence they can sustain, profile conversion and "
        "turning DMs into booked calls."
        + _PLAYBOOK_HEADER + _PLAYBOOK_OUTPUT_RULES
    ),
    "leadgen": (
        "You are creating a lead generation system playbook for a health practice owner. "
        "Cover lead capture, speed-to-lead response, automated follow-up and plugging the "
        "leaks where inquiries go unanswered."
        + _PLAYBOOK_HEADER + _PLAYBOOK_OUTPUT_RULES
    ),
}


def build_playbook_system_prompt(playbook: str, answers: Mapping[str, Any]) -> str:
    return PLAYBOOK_SYSTEM_PROMPTS[playbook].format(
        business_name=_get(answers, "businessName"),
        revenue_range=_get(answers, "monthlyRevenue"),
        primary_frustration=_get(answers, "biggestFrustration"),
    )


def build_playbook_user_prompt(playbook: str, answers: Mapping[str, Any]) -> str:
    """Business context for one playbook; each playbook sees the answers relevant to it."""
    lines = [
        f"Business Name: {_get(answers, 'businessName')}",
        f"Business Type: {_get(answers, 'businessType')}",
        f"Website: {_get(answers, 'website')}",
        "Target audience: Inferred from business type and main offer",
        f"Main offer and price: {_get(answers, 'mainOffer')}",
        f"Result they help clients get: {_get(answers, 'ninetyDayGoal')}",
        f"What feels hardest right now: {_get(answers, 'biggestFrustration')}",
    ]

    if playbook == "facebook":
        ran_ads = "No" if "$0" in _get(answers, "monthlyRevenue", "") else "Yes, with mixed results"
        lines += [
            f"Monthly ad budget: {_get(answers, 'monthlyAdBudget')}",
            f"Have you run ads before? {ran_ads}",
        ]
    elif playbook == "instagram":
        lines += [
            f"Instagram handle: {_get(answers, 'instagramHandle', 'Not created yet')}",
            f"Posting frequency: {_get(answers, 'contentFrequency')}",
            f"Audience size: {_get(answers, 'audienceSize')}",
        ]
    elif playbook == "leadgen":
        lines += [
            f"Lead response speed: {_get(answers, 'leadResponseSpeed')}",
            f"Chat agents: {_get(answers, 'chatAgents')}",
            f"Estimated missed leads: {_get(answers, 'missedLeads')}",
            f"CRM usage: {_get(answers, 'crmUsage')}",
        ]

    return "\n".join(lines)

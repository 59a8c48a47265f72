"""
Point tables for the business health score.

Each rule reads one quiz field, walks an ordered tuple of (predicate, points)
tiers and awards the first tier whose predicate holds, else its default.
Rules are plain data so the scoring policy can be checked without the engine.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from leadflow.scoring.answers import (
    AdBudget,
    AudienceSize,
    ChatAgents,
    ContentFrequency,
    CrmUsage,
    LeadResponseSpeed,
    MissedLeads,
    OfferConfidence,
    QuizAnswers,
    RevenueBand,
    answer_text,
    parse_option,
)


class HealthCategory(str, Enum):
    LEAD_GENERATION = "Lead Generation"
    OFFER_CLARITY = "Offer Clarity"
    SOCIAL_PRESENCE = "Social Presence"
    CONVERSION_PROCESS = "Conversion Process"


# Fixed order used for reporting and tie-breaking
CATEGORY_ORDER: Tuple[HealthCategory, ...] = tuple(HealthCategory)

Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class PointRule:
    """Score one quiz field against ordered tiers."""
    name: str
    field: str
    tiers: Tuple[Tuple[Predicate, int], ...]
    default: int = 0
    parse: Optional[Callable[[QuizAnswers, str], Any]] = None

    @property
    def max_points(self) -> int:
        return max([points for _, points in self.tiers] + [self.default])

    def value(self, answers: QuizAnswers) -> Any:
        if self.parse is not None:
            return self.parse(answers, self.field)
        return answer_text(answers, self.field)

    def score(self, answers: QuizAnswers) -> int:
        value = self.value(answers)
        for predicate, points in self.tiers:
            if predicate(value):
                return points
        return self.default


def is_member(*members: Enum) -> Predicate:
    return lambda value: value in members


def text_length(text: str) -> int:
    """Length in UTF-16 code units, as the quiz front end measures it."""
    return len(text.encode("utf-16-le")) // 2


def longer_than(length: int) -> Predicate:
    return lambda text: text_length(text) > length


def longer_than_containing(length: int, *needles: str) -> Predicate:
    return lambda text: text_length(text) > length and any(n in text for n in needles)


LEAD_GENERATION_RULES: Tuple[PointRule, ...] = (
    PointRule(
        "crm_usage",
        "crmUsage",
        tiers=(
            (is_member(CrmUsage.DAILY), 30),
            (is_member(CrmUsage.BARELY_USED), 15),
            (is_member(CrmUsage.MANUAL), 10),
        ),
        parse=parse_option,
    ),
    PointRule(
        "lead_response_speed",
        "leadResponseSpeed",
        tiers=(
            (is_member(LeadResponseSpeed.FIVE_MINUTES), 35),
            (is_member(LeadResponseSpeed.ONE_HOUR), 25),
            (is_member(LeadResponseSpeed.ONE_DAY), 10),
        ),
        parse=parse_option,
    ),
    PointRule(
        "missed_leads",
        "missedLeads",
        tiers=(
            (is_member(MissedLeads.UNDER_10), 20),
            (is_member(MissedLeads.UNDER_25), 15),
            (is_member(MissedLeads.UNDER_50), 5),
        ),
        parse=parse_option,
    ),
    PointRule(
        "chat_agents",
        "chatAgents",
        tiers=(
            (is_member(ChatAgents.WEBSITE_AND_SOCIAL), 15),
            (is_member(ChatAgents.WEBSITE_ONLY), 10),
            (is_member(ChatAgents.MANUAL), 5),
        ),
        parse=parse_option,
    ),
)

OFFER_CLARITY_RULES: Tuple[PointRule, ...] = (
    PointRule(
        "offer_confidence",
        "offerConfidence",
        tiers=(
            (is_member(OfferConfidence.VERY), 50),
            (is_member(OfferConfidence.SOMEWHAT), 30),
        ),
        default=10,
        parse=parse_option,
    ),
    PointRule(
        "main_offer",
        "mainOffer",
        tiers=(
            (longer_than_containing(50, "$"), 30),
            (longer_than(30), 20),
            (longer_than(10), 10),
        ),
    ),
    PointRule(
        "revenue_bonus",
        "monthlyRevenue",
        tiers=(
            (is_member(RevenueBand.OVER_100K), 20),
            (is_member(RevenueBand.FROM_50K), 15),
            (is_member(RevenueBand.FROM_20K), 10),
            (is_member(RevenueBand.FROM_5K), 5),
        ),
        parse=parse_option,
    ),
)

SOCIAL_PRESENCE_RULES: Tuple[PointRule, ...] = (
    PointRule(
        "content_frequency",
        "contentFrequency",
        tiers=(
            (is_member(ContentFrequency.DAILY), 40),
            (is_member(ContentFrequency.THREE_TO_FIVE), 35),
            (is_member(ContentFrequency.ONE_TO_TWO), 20),
            (is_member(ContentFrequency.RARELY), 5),
        ),
        parse=parse_option,
    ),
    PointRule(
        "audience_size",
        "audienceSize",
        tiers=(
            (is_member(AudienceSize.OVER_25K), 40),
            (is_member(AudienceSize.FROM_10K), 35),
            (is_member(AudienceSize.FROM_5K), 25),
            (is_member(AudienceSize.FROM_2K), 15),
            (is_member(AudienceSize.FROM_500), 10),
        ),
        default=5,
        parse=parse_option,
    ),
    PointRule(
        "instagram_handle",
        "instagramHandle",
        tiers=((longer_than(3), 20),),
    ),
)

CONVERSION_PROCESS_RULES: Tuple[PointRule, ...] = (
    PointRule(
        "ad_budget",
        "monthlyAdBudget",
        tiers=(
            (is_member(AdBudget.OVER_5K), 50),
            (is_member(AdBudget.FROM_3K), 40),
            (is_member(AdBudget.FROM_1K), 30),
            (is_member(AdBudget.FROM_500), 15),
        ),
        parse=parse_option,
    ),
    PointRule(
        "ninety_day_goal",
        "ninetyDayGoal",
        tiers=(
            (longer_than_containing(20, "$", "K"), 30),
            (longer_than(10), 15),
        ),
    ),
    PointRule(
        "website",
        "website",
        tiers=((longer_than(5), 20),),
    ),
)

CATEGORY_RULES: Dict[HealthCategory, Tuple[PointRule, ...]] = {
    HealthCategory.LEAD_GENERATION: LEAD_GENERATION_RULES,
    HealthCategory.OFFER_CLARITY: OFFER_CLARITY_RULES,
    HealthCategory.SOCIAL_PRESENCE: SOCIAL_PRESENCE_RULES,
    HealthCategory.CONVERSION_PROCESS: CONVERSION_PROCESS_RULES,
}


def score_category(category: HealthCategory, answers: QuizAnswers) -> int:
    return sum(rule.score(answers) for rule in CATEGORY_RULES[category])


def category_max(category: HealthCategory) -> int:
    return sum(rule.max_points for rule in CATEGORY_RULES[category])

"""
Quiz answer vocabulary.

Every button-style quiz question is a closed Enum whose values are the exact
option labels the quiz renders. Raw answers are parsed into members by
substring containment against an ordered phrase table (first match wins), so
free text and legacy labels still resolve the same way they always have.
Unrecognized or missing answers parse to None.
"""
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

QuizAnswers = Mapping[str, Any]


class CrmUsage(str, Enum):
    DAILY = "Yes (use it daily)"
    BARELY_USED = "Yes (barely touch it)"
    MANUAL = "No (manual tracking)"
    NOTHING_TRACKED = "No (nothing tracked)"


class LeadResponseSpeed(str, Enum):
    FIVE_MINUTES = "Within 5 minutes"
    ONE_HOUR = "Within 1 hour"
    ONE_DAY = "Within 24 hours"
    WHENEVER = "Whenever I can"


class MissedLeads(str, Enum):
    UNDER_10 = "0-10%"
    UNDER_25 = "10-25%"
    UNDER_50 = "25-50%"
    OVER_50 = "50%+"
    UNKNOWN = "I don't know"


class ChatAgents(str, Enum):
    WEBSITE_AND_SOCIAL = "Yes (website + social)"
    WEBSITE_ONLY = "Yes (website only)"
    MANUAL = "No (manual responses)"
    NONE = "No (no chat at all)"


class OfferConfidence(str, Enum):
    VERY = "Very confident"
    SOMEWHAT = "Somewhat confident"
    NOT = "Not confident"


class RevenueBand(str, Enum):
    OVER_100K = "$100K+"
    FROM_50K = "$50K-$100K"
    FROM_20K = "$20K-$50K"
    FROM_5K = "$5K-$20K"
    UNDER_5K = "$0-$5K"


class ContentFrequency(str, Enum):
    DAILY = "Daily"
    THREE_TO_FIVE = "3-5x/week"
    ONE_TO_TWO = "1-2x/week"
    RARELY = "Rarely"
    NEVER = "Never"


class AudienceSize(str, Enum):
    OVER_25K = "25K+"
    FROM_10K = "10K-25K"
    FROM_5K = "5K-10K"
    FROM_2K = "2K-5K"
    FROM_500 = "500-2K"
    UNDER_500 = "0-500"


class AdBudget(str, Enum):
    OVER_5K = "$5K+"
    FROM_3K = "$3K-$5K"
    FROM_1K = "$1K-$3K"
    FROM_500 = "$500-$1K"
    ORGANIC = "$0 (organic only)"


# (phrase, member) in match priority order
PhraseTable = Tuple[Tuple[str, Enum], ...]

CRM_USAGE_PHRASES: PhraseTable = (
    ("use it daily", CrmUsage.DAILY),
    ("barely touch it", CrmUsage.BARELY_USED),
    ("manual tracking", CrmUsage.MANUAL),
    ("nothing tracked", CrmUsage.NOTHING_TRACKED),
)

LEAD_RESPONSE_SPEED_PHRASES: PhraseTable = (
    ("5 minutes", LeadResponseSpeed.FIVE_MINUTES),
    ("1 hour", LeadResponseSpeed.ONE_HOUR),
    ("24 hours", LeadResponseSpeed.ONE_DAY),
    ("Whenever", LeadResponseSpeed.WHENEVER),
)

MISSED_LEADS_PHRASES: PhraseTable = (
    ("0-10%", MissedLeads.UNDER_10),
    ("10-25%", MissedLeads.UNDER_25),
    ("25-50%", MissedLeads.UNDER_50),
    ("50%+", MissedLeads.OVER_50),
    ("don't know", MissedLeads.UNKNOWN),
)

CHAT_AGENTS_PHRASES: PhraseTable = (
    ("website + social", ChatAgents.WEBSITE_AND_SOCIAL),
    ("website only", ChatAgents.WEBSITE_ONLY),
    ("manual responses", ChatAgents.MANUAL),
    ("no chat", ChatAgents.NONE),
)

OFFER_CONFIDENCE_PHRASES: PhraseTable = (
    ("Very confident", OfferConfidence.VERY),
    ("100%", OfferConfidence.VERY),
    ("Somewhat confident", OfferConfidence.SOMEWHAT),
    ("Not confident", OfferConfidence.NOT),
)

# "$100K+" is checked before "$50K-$100K" so free text naming both resolves to the top band
REVENUE_BAND_PHRASES: PhraseTable = (
    ("$100K+", RevenueBand.OVER_100K),
    ("$50K-$100K", RevenueBand.FROM_50K),
    ("$20K-$50K", RevenueBand.FROM_20K),
    ("$5K-$20K", RevenueBand.FROM_5K),
    ("$0-$5K", RevenueBand.UNDER_5K),
)

CONTENT_FREQUENCY_PHRASES: PhraseTable = (
    ("Daily", ContentFrequency.DAILY),
    ("3-5x/week", ContentFrequency.THREE_TO_FIVE),
    ("1-2x/week", ContentFrequency.ONE_TO_TWO),
    ("Rarely", ContentFrequency.RARELY),
    ("Never", ContentFrequency.NEVER),
)

AUDIENCE_SIZE_PHRASES: PhraseTable = (
    ("25K+", AudienceSize.OVER_25K),
    ("10K-25K", AudienceSize.FROM_10K),
    ("5K-10K", AudienceSize.FROM_5K),
    ("2K-5K", AudienceSize.FROM_2K),
    ("500-2K", AudienceSize.FROM_500),
    ("0-500", AudienceSize.UNDER_500),
)

AD_BUDGET_PHRASES: PhraseTable = (
    ("$5K+", AdBudget.OVER_5K),
    ("$3K-$5K", AdBudget.FROM_3K),
    ("$1K-$3K", AdBudget.FROM_1K),
    ("$500-$1K", AdBudget.FROM_500),
    ("organic only", AdBudget.ORGANIC),
)

# quiz field -> (enum, phrase table)
OPTION_FIELDS = {
    "crmUsage": (CrmUsage, CRM_USAGE_PHRASES),
    "leadResponseSpeed": (LeadResponseSpeed, LEAD_RESPONSE_SPEED_PHRASES),
    "missedLeads": (MissedLeads, MISSED_LEADS_PHRASES),
    "chatAgents": (ChatAgents, CHAT_AGENTS_PHRASES),
    "offerConfidence": (OfferConfidence, OFFER_CONFIDENCE_PHRASES),
    "monthlyRevenue": (RevenueBand, REVENUE_BAND_PHRASES),
    "contentFrequency": (ContentFrequency, CONTENT_FREQUENCY_PHRASES),
    "audienceSize": (AudienceSize, AUDIENCE_SIZE_PHRASES),
    "monthlyAdBudget": (AdBudget, AD_BUDGET_PHRASES),
}


def answer_text(answers: Optional[QuizAnswers], field: str) -> str:
    """Raw answer for a field; missing keys and None read as ""."""
    if not answers:
        return ""
    value = answers.get(field)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def match_phrase(raw: str, phrases: PhraseTable) -> Optional[Enum]:
    """First member whose phrase is contained in `raw`, else None."""
    for phrase, member in phrases:
        if phrase in raw:
            return member
    return None


def parse_option(answers: Optional[QuizAnswers], field: str) -> Optional[Enum]:
    """Parse an enumerated quiz field into its Enum member."""
    if field not in OPTION_FIELDS:
        raise KeyError(f"{field} is not an enumerated quiz field")
    _, phrases = OPTION_FIELDS[field]
    return match_phrase(answer_text(answers, field), phrases)

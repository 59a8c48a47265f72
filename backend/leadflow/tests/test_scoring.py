"""Tests for the business health score, benchmarks and gap analysis."""
import pytest

from leadflow.scoring.answers import (
    AudienceSize,
    MissedLeads,
    OfferConfidence,
    RevenueBand,
    answer_text,
    parse_option,
)
from leadflow.scoring.benchmarks import get_benchmark_data
from leadflow.scoring.gap_analysis import REVENUE_PROJECTIONS, get_gap_analysis, revenue_bucket
from leadflow.scoring.health import BusinessHealthScore, calculate_business_health_score, round_half_up
from leadflow.scoring.rules import CATEGORY_ORDER, CATEGORY_RULES, HealthCategory, category_max, text_length

MAXIMAL_ANSWERS = {
    "crmUsage": "Yes (use it daily)",
    "leadResponseSpeed": "Within 5 minutes",
    "missedLeads": "0-10%",
    "chatAgents": "Yes (website + social)",
    "offerConfidence": "Very confident",
    "mainOffer": "Full smile makeover package with whitening and aligners for $4,500",
    "monthlyRevenue": "$100K+",
    "contentFrequency": "Daily",
    "audienceSize": "25K+",
    "instagramHandle": "@smiledental",
    "monthlyAdBudget": "$5K+",
    "ninetyDayGoal": "Grow from $100K to $150K per month",
    "website": "https://smiledental.com",
}

MIDDLING_ANSWERS = {
    "crmUsage": "Yes (barely touch it)",
    "leadResponseSpeed": "Within 1 hour",
    "missedLeads": "10-25%",
    "chatAgents": "No (manual responses)",
    "offerConfidence": "Somewhat confident",
    "mainOffer": "Invisalign consultations",
    "monthlyRevenue": "$20K-$50K",
    "contentFrequency": "1-2x/week",
    "audienceSize": "2K-5K",
    "instagramHandle": "@smiledental",
    "monthlyAdBudget": "$1K-$3K",
    "ninetyDayGoal": "Hit $50K months",
    "website": "",
}


def test_every_category_maxes_at_100():
    """Point tables for each category sum to exactly 100."""
    for category in CATEGORY_ORDER:
        assert category_max(category) == 100


def test_empty_answers():
    """Missing answers only earn the category defaults."""
    score = calculate_business_health_score({})

    assert score.lead_generation == 0
    assert score.offer_clarity == 10
    assert score.social_presence == 5
    assert score.conversion_process == 0
    assert score.overall == 4
    assert score.top_strength == "Offer Clarity"
    assert score.biggest_gap == "Conversion Process"


def test_none_answers_match_empty():
    """None and missing keys behave like empty strings."""
    assert calculate_business_health_score(None) == calculate_business_health_score({})
    assert calculate_business_health_score({"crmUsage": None}) == calculate_business_health_score({})


def test_maximal_answers_score_100():
    """Best option in every question maxes every category."""
    score = calculate_business_health_score(MAXIMAL_ANSWERS)

    assert score.lead_generation == 100
    assert score.offer_clarity == 100
    assert score.social_presence == 100
    assert score.conversion_process == 100
    assert score.overall == 100
    # All tied: first in category order is the strength, last is the gap
    assert score.top_strength == "Lead Generation"
    assert score.biggest_gap == "Conversion Process"


def test_middling_answers():
    """A typical submission, overall rounded half up from 52.5."""
    score = calculate_business_health_score(MIDDLING_ANSWERS)

    assert score.lead_generation == 60
    assert score.offer_clarity == 50
    assert score.social_presence == 55
    assert score.conversion_process == 45
    assert score.overall == 53
    assert score.top_strength == "Lead Generation"
    assert score.biggest_gap == "Conversion Process"


def test_scores_stay_in_range():
    """Every category and the overall are within 0..100."""
    for answers in ({}, MIDDLING_ANSWERS, MAXIMAL_ANSWERS, {"mainOffer": "x" * 500}):
        score = calculate_business_health_score(answers)
        for _, value in score.category_scores():
            assert 0 <= value <= 100
        assert 0 <= score.overall <= 100


def test_scoring_is_deterministic():
    """Same answers, same score."""
    first = calculate_business_health_score(MIDDLING_ANSWERS)
    second = calculate_business_health_score(dict(MIDDLING_ANSWERS))
    assert first == second


def test_better_option_never_lowers_score():
    """Upgrading one answer to a better tier cannot reduce its category."""
    upgraded = dict(MIDDLING_ANSWERS, leadResponseSpeed="Within 5 minutes")
    before = calculate_business_health_score(MIDDLING_ANSWERS)
    after = calculate_business_health_score(upgraded)

    assert after.lead_generation == before.lead_generation + 10
    assert after.overall >= before.overall


def test_slowest_to_fastest_response():
    """Moving from "Whenever I can" (0 points) to "Within 5 minutes" adds the full 35."""
    slow = calculate_business_health_score(dict(MIDDLING_ANSWERS, leadResponseSpeed="Whenever I can"))
    fast = calculate_business_health_score(dict(MIDDLING_ANSWERS, leadResponseSpeed="Within 5 minutes"))

    assert fast.lead_generation == slow.lead_generation + 35
    assert fast.overall >= slow.overall


def test_main_offer_richness_tiers():
    """Offer description points depend on length and a price."""
    def offer_points(text):
        return calculate_business_health_score({"mainOffer": text}).offer_clarity - 10

    assert offer_points("Short") == 0
    assert offer_points("Teeth whitening") == 10
    assert offer_points("Teeth whitening and Invisalign packages") == 20
    assert offer_points("Teeth whitening and Invisalign packages for families, $499") == 30


def test_text_length_counts_utf16_units():
    """Characters outside the BMP count twice, as in the browser."""
    assert text_length("Botox") == 5
    assert text_length("Botox \U0001F489\U0001F489\U0001F489") == 12
    assert calculate_business_health_score({"mainOffer": "Botox \U0001F489\U0001F489\U0001F489"}).offer_clarity == 20


def test_hundred_percent_counts_as_very_confident():
    """Legacy "100%" confidence answers earn full points."""
    assert parse_option({"offerConfidence": "100% sure"}, "offerConfidence") is OfferConfidence.VERY
    assert calculate_business_health_score({"offerConfidence": "100%"}).offer_clarity == 50


def test_parse_option_first_match_wins():
    """Phrase tables are checked in order; unrecognized text is None."""
    assert parse_option({"missedLeads": "I don't know"}, "missedLeads") is MissedLeads.UNKNOWN
    assert parse_option({"audienceSize": "500-2K"}, "audienceSize") is AudienceSize.FROM_500
    assert parse_option({"monthlyRevenue": "$100K+ (was $50K-$100K)"}, "monthlyRevenue") is RevenueBand.OVER_100K
    assert parse_option({"crmUsage": "Spreadsheets"}, "crmUsage") is None


def test_parse_option_rejects_free_text_fields():
    with pytest.raises(KeyError):
        parse_option({}, "mainOffer")


def test_answer_text_joins_lists():
    assert answer_text({"website": ["a", "b"]}, "website") == "a,b"
    assert answer_text(None, "website") == ""


def test_round_half_up():
    """Halves round up, unlike built-in round()."""
    assert round_half_up(52.5) == 53
    assert round_half_up(2.5) == 3
    assert round_half_up(3.75) == 4
    assert round_half_up(3.25) == 3


def test_rules_are_plain_data():
    """Every rule exposes its field and tiers for inspection."""
    fields = {rule.field for rules in CATEGORY_RULES.values() for rule in rules}
    assert "crmUsage" in fields
    assert "website" in fields
    assert len(CATEGORY_RULES) == 4


def test_benchmark_rows():
    """Four rows in category order with the fixed reference points."""
    score = calculate_business_health_score(MIDDLING_ANSWERS)
    rows = get_benchmark_data(score)

    assert [row.category for row in rows] == [c.value for c in HealthCategory]
    assert [row.your_score for row in rows] == [60, 50, 55, 45]
    assert [(row.industry_average, row.top_performers) for row in rows] == [
        (55, 85), (60, 90), (45, 80), (50, 85),
    ]


def test_gap_analysis_middling():
    score = calculate_business_health_score(MIDDLING_ANSWERS)
    gap = get_gap_analysis(MIDDLING_ANSWERS, score)

    assert gap.current_revenue == "$20K-$50K"
    assert gap.potential_revenue == "$60K-$100K"
    assert gap.current_leads == 20
    assert gap.potential_multiplier == 2.0
    assert gap.potential_leads == 40.0
    assert gap.current_close_rate == 18
    assert gap.potential_close_rate == 33


def test_gap_analysis_caps_close_rate():
    """Potential close rate never exceeds 40."""
    score = calculate_business_health_score(MAXIMAL_ANSWERS)
    gap = get_gap_analysis(MAXIMAL_ANSWERS, score)

    assert gap.current_close_rate == 35
    assert gap.potential_close_rate == 40
    assert gap.potential_multiplier == 2.5
    assert gap.potential_leads == 125.0


def test_gap_analysis_unknown_revenue():
    """Unrecognized revenue falls into the lowest bucket."""
    score = calculate_business_health_score({})
    gap = get_gap_analysis({"monthlyRevenue": "prefer not to say"}, score)

    assert gap.current_revenue == "$0-$5K"
    assert gap.current_leads == 5
    assert gap.potential_revenue == "$10K-$20K"
    assert gap.current_close_rate == 12
    assert gap.potential_multiplier == 1.5
    assert gap.potential_leads == 7.5


def test_revenue_bucket_priority():
    assert revenue_bucket({"monthlyRevenue": "$50K-$100K"}) is RevenueBand.FROM_50K
    assert revenue_bucket({}) is RevenueBand.UNDER_5K


def test_every_bucket_has_a_projection():
    assert set(REVENUE_PROJECTIONS) == set(RevenueBand)


def _range_midpoint(label):
    """Midpoint of a "$20K-$50K" style range; an open "$100K+" is its lower bound."""
    bounds = [float(part.strip("$K+")) for part in label.split("-")]
    return sum(bounds) / len(bounds)


def _flat_score(value):
    return BusinessHealthScore(
        overall=value,
        lead_generation=value,
        offer_clarity=value,
        social_presence=value,
        conversion_process=value,
        top_strength="Lead Generation",
        biggest_gap="Conversion Process",
    )


@pytest.mark.parametrize("band", list(RevenueBand))
@pytest.mark.parametrize("overall", [0, 50, 70])
def test_potential_always_beats_current(band, overall):
    """Every bucket and multiplier tier projects upward."""
    gap = get_gap_analysis({"monthlyRevenue": band.value}, _flat_score(overall))

    assert gap.current_revenue == band.value
    assert _range_midpoint(gap.potential_revenue) > _range_midpoint(gap.current_revenue)
    assert gap.potential_leads >= gap.current_leads
    assert gap.potential_close_rate >= gap.current_close_rate

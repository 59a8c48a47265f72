"""Tests for lead scoring."""
from leadflow.scoring.lead_score import calculate_lead_score, frustration_points, lead_temperature


def test_top_lead_scores_100():
    score = calculate_lead_score("$100K+", "Not enough leads coming in", ["{}", "{}", "{}", "{}"])
    assert score == 100


def test_half_playbook_points_round_up():
    """25 + 15 + 7.5 = 47.5 rounds to 48."""
    assert calculate_lead_score("$20K-$50K", "No time to create content", ["{}", None]) == 48


def test_missing_inputs_score_zero():
    assert calculate_lead_score(None, None) == 0
    assert calculate_lead_score("", "", ["", None]) == 0


def test_revenue_label_must_match_exactly():
    assert calculate_lead_score("$100K+ per month", None) == 0
    assert calculate_lead_score("$5K-$20K", None) == 15


def test_frustration_matches_both_ways():
    """The answer may contain the phrase or be contained by it."""
    assert frustration_points("Honestly: Doing everything myself!!") == 12
    assert frustration_points("Not enough leads") == 30
    assert frustration_points("Too many no-shows/cancellations") == 25
    assert frustration_points("Something else entirely") == 0


def test_lead_temperature_thresholds():
    assert lead_temperature(100) == "hot"
    assert lead_temperature(70) == "hot"
    assert lead_temperature(69) == "warm"
    assert lead_temperature(40) == "warm"
    assert lead_temperature(39) == "cold"
    assert lead_temperature(0) == "cold"

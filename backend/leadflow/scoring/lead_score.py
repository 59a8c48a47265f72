"""
Lead score: 0-100 purchase-likelihood estimate used to rank leads in the
admin dashboard and to tag them in the CRM.
"""
from typing import Iterable, Optional, Tuple

from leadflow.scoring.health import round_half_up

REVENUE_POINTS = {
    "$0-$5K": 5,
    "$5K-$20K": 15,
    "$20K-$50K": 25,
    "$50K-$100K": 35,
    "$100K+": 40,
}

# Ordered by urgency; first match wins
FRUSTRATION_POINTS: Tuple[Tuple[str, int], ...] = (
    ("Not enough leads coming in", 30),
    ("Leads aren't converting to appointments", 28),
    ("Too many no-shows/cancellations", 25),
    ("Can't scale past current revenue", 22),
    ("Spending on ads with no ROI", 20),
    ("Don't know what marketing actually works", 18),
    ("No time to create content", 15),
    ("Doing everything myself", 12),
)

POINTS_PER_PLAYBOOK = 7.5

HOT_THRESHOLD = 70
WARM_THRESHOLD = 40


def frustration_points(biggest_frustration: Optional[str]) -> int:
    """Free-text match in either direction against the urgency table."""
    if not biggest_frustration:
        return 0
    for phrase, points in FRUSTRATION_POINTS:
        if phrase in biggest_frustration or biggest_frustration in phrase:
            return points
    return 0


def calculate_lead_score(
    monthly_revenue: Optional[str],
    biggest_frustration: Optional[str],
    playbooks: Iterable[Optional[str]] = (),
) -> int:
    """
    Revenue points (exact label) + frustration urgency + 7.5 per generated
    playbook. Empty or None playbooks do not count.
    """
    score = REVENUE_POINTS.get(monthly_revenue or "", 0)
    score += frustration_points(biggest_frustration)
    score += sum(1 for p in playbooks if p) * POINTS_PER_PLAYBOOK
    return round_half_up(score)


def lead_temperature(lead_score: int) -> str:
    if lead_score >= HOT_THRESHOLD:
        return "hot"
    if lead_score >= WARM_THRESHOLD:
        return "warm"
    return "cold"

"""Current-vs-potential projection shown under the health score."""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from leadflow.scoring.answers import REVENUE_BAND_PHRASES, QuizAnswers, RevenueBand, answer_text, match_phrase
from leadflow.scoring.health import BusinessHealthScore


@dataclass(frozen=True)
class GapAnalysis:
    current_revenue: str
    potential_revenue: str
    current_leads: int
    potential_leads: float
    current_close_rate: int
    potential_close_rate: int
    potential_multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# bucket -> (monthly leads, potential revenue range)
REVENUE_PROJECTIONS: Dict[RevenueBand, tuple] = {
    RevenueBand.OVER_100K: (50, "$200K-$300K"),
    RevenueBand.FROM_50K: (35, "$125K-$200K"),
    RevenueBand.FROM_20K: (20, "$60K-$100K"),
    RevenueBand.FROM_5K: (10, "$30K-$50K"),
    RevenueBand.UNDER_5K: (5, "$10K-$20K"),
}

MAX_CLOSE_RATE = 40
CLOSE_RATE_LIFT = 15


def revenue_bucket(answers: Optional[QuizAnswers]) -> RevenueBand:
    """Revenue band by substring priority; anything unrecognized is the lowest band."""
    return match_phrase(answer_text(answers, "monthlyRevenue"), REVENUE_BAND_PHRASES) or RevenueBand.UNDER_5K


def close_rate_for(conversion_score: int) -> int:
    if conversion_score >= 70:
        return 35
    if conversion_score >= 50:
        return 25
    if conversion_score >= 30:
        return 18
    return 12


def multiplier_for(overall: int) -> float:
    if overall >= 70:
        return 2.5
    if overall >= 50:
        return 2.0
    return 1.5


def get_gap_analysis(answers: Optional[QuizAnswers], score: BusinessHealthScore) -> GapAnalysis:
    bucket = revenue_bucket(answers)
    current_leads, potential_revenue = REVENUE_PROJECTIONS[bucket]
    current_close_rate = close_rate_for(score.conversion_process)
    multiplier = multiplier_for(score.overall)

    return GapAnalysis(
        current_revenue=bucket.value,
        potential_revenue=potential_revenue,
        current_leads=current_leads,
        potential_leads=current_leads * multiplier,
        current_close_rate=current_close_rate,
        potential_close_rate=min(current_close_rate + CLOSE_RATE_LIFT, MAX_CLOSE_RATE),
        potential_multiplier=multiplier,
    )

"""
Business health score: four 0-100 category scores derived from quiz answers,
an overall mean and the strongest / weakest category.
"""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from leadflow.scoring.answers import QuizAnswers
from leadflow.scoring.rules import CATEGORY_ORDER, HealthCategory, score_category


@dataclass(frozen=True)
class BusinessHealthScore:
    overall: int
    lead_generation: int
    offer_clarity: int
    social_presence: int
    conversion_process: int
    top_strength: str
    biggest_gap: str

    def category_scores(self) -> List[Tuple[HealthCategory, int]]:
        """(category, score) pairs in the fixed reporting order."""
        return [
            (HealthCategory.LEAD_GENERATION, self.lead_generation),
            (HealthCategory.OFFER_CLARITY, self.offer_clarity),
            (HealthCategory.SOCIAL_PRESENCE, self.social_presence),
            (HealthCategory.CONVERSION_PROCESS, self.conversion_process),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (built-in round() is banker's)."""
    return int(math.floor(value + 0.5))


def rank_categories(scores: Dict[HealthCategory, int]) -> List[Tuple[HealthCategory, int]]:
    """
    Categories by descending score. The sort is stable over CATEGORY_ORDER, so
    among equal scores the earlier category stays ahead.
    """
    pairs = [(category, scores[category]) for category in CATEGORY_ORDER]
    return sorted(pairs, key=lambda pair: pair[1], reverse=True)


def calculate_business_health_score(answers: Optional[QuizAnswers]) -> BusinessHealthScore:
    """
    Score quiz answers. Pure and deterministic; missing fields count as empty.

    top_strength is the first entry of the ranking and biggest_gap the last,
    so on a tie at the bottom the later category is reported as the gap.
    """
    answers = answers or {}
    scores = {category: score_category(category, answers) for category in CATEGORY_ORDER}
    ranked = rank_categories(scores)

    overall = round_half_up(sum(scores.values()) / len(scores))

    return BusinessHealthScore(
        overall=overall,
        lead_generation=scores[HealthCategory.LEAD_GENERATION],
        offer_clarity=scores[HealthCategory.OFFER_CLARITY],
        social_presence=scores[HealthCategory.SOCIAL_PRESENCE],
        conversion_process=scores[HealthCategory.CONVERSION_PROCESS],
        top_strength=ranked[0][0].value,
        biggest_gap=ranked[-1][0].value,
    )

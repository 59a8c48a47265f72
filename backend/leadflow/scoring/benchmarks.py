"""
Industry benchmarks for health-practice businesses.

Figures are the fixed reference values shown next to each category score.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from leadflow.scoring.health import BusinessHealthScore
from leadflow.scoring.rules import HealthCategory


@dataclass(frozen=True)
class BenchmarkData:
    """One category's score next to the industry reference points."""
    category: str
    your_score: int
    industry_average: int
    top_performers: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# category -> (industry average, top performers)
CATEGORY_BENCHMARKS: Dict[HealthCategory, tuple] = {
    HealthCategory.LEAD_GENERATION: (55, 85),
    HealthCategory.OFFER_CLARITY: (60, 90),
    HealthCategory.SOCIAL_PRESENCE: (45, 80),
    HealthCategory.CONVERSION_PROCESS: (50, 85),
}

# Overall reference points stored with every roadmap
INDUSTRY_AVERAGE_OVERALL = 65
TOP_PERFORMER_OVERALL = 88


def get_benchmark_data(score: BusinessHealthScore) -> List[BenchmarkData]:
    """Exactly four rows, in category order."""
    rows = []
    for category, value in score.category_scores():
        average, top = CATEGORY_BENCHMARKS[category]
        rows.append(BenchmarkData(
            category=category.value,
            your_score=value,
            industry_average=average,
            top_performers=top,
        ))
    return rows

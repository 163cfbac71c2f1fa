from typing import Iterable, List, Tuple
from app.schemas.analytics import DistributionBucket, PerformanceDistribution, WeeklyScore
from app.utils.rounding import round_half_up

# (lower bound inclusive, grade), checked top-down
GRADE_THRESHOLDS: List[Tuple[float, str]] = [
    (95, "A+"),
    (90, "A"),
    (85, "B+"),
    (80, "B"),
]

# Used for distribution charts only; not the same cut-offs as the letter grade
SEVERITY_THRESHOLDS: List[Tuple[float, str]] = [
    (95, "excellent"),
    (85, "good"),
    (75, "fair"),
]

SEVERITY_LABELS = {
    "excellent": "Excellent (95-100%)",
    "good": "Good (85-94%)",
    "fair": "Fair (75-84%)",
    "poor": "Poor (<75%)",
}


def grade_of(percentage: float) -> str:
    for bound, grade in GRADE_THRESHOLDS:
        if percentage >= bound:
            return grade
    return "C"


def severity_of(percentage: float) -> str:
    for bound, tier in SEVERITY_THRESHOLDS:
        if percentage >= bound:
            return tier
    return "poor"


def performance_distribution(weeks: Iterable[WeeklyScore]) -> PerformanceDistribution:
    """Share of weeks per severity tier, as whole percents."""
    counts = {tier: 0 for tier in SEVERITY_LABELS}
    for week in weeks:
        counts[severity_of(week.percentage)] += 1

    total = sum(counts.values())
    buckets = [
        DistributionBucket(
            tier=tier,
            label=SEVERITY_LABELS[tier],
            count=count,
            share=round_half_up(count / total * 100) if total else 0,
        )
        for tier, count in counts.items()
    ]
    return PerformanceDistribution(total_weeks=total, buckets=buckets)

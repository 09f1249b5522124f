"""Comparison statistics for two branch forecasts"""

from typing import Optional

from cashflow_insights.domain.models import (
    BranchSelection,
    ComparisonContext,
    ForecastSeries,
    SeriesStats,
)


def compute_series_stats(code: str, series: ForecastSeries) -> SeriesStats:
    """
    Growth, average and swing of one forecast.

    Zero-denominator policy: growth is 0 when the first projection is 0 and
    swing is 0 when the average is 0. An empty series falls back to its
    starting balance for start/final and has zero average and swing.
    """
    projections = [p.projected for p in series.points]

    start = projections[0] if projections else series.starting_balance
    final = projections[-1] if projections else series.starting_balance
    growth = (final - start) / abs(start) if start != 0 else 0.0

    average = sum(projections) / len(projections) if projections else 0.0
    spread = max(projections) - min(projections) if projections else 0.0
    swing = spread / abs(average) if average != 0 else 0.0

    return SeriesStats(
        code=code,
        start=start,
        final=final,
        growth=growth,
        average=average,
        swing=swing,
    )


def analyze_comparison(
    primary: Optional[ForecastSeries],
    secondary: Optional[ForecastSeries],
    selection: BranchSelection,
) -> Optional[ComparisonContext]:
    """
    Build the comparison context for a branch pair.

    Returns None while either series is missing or has no points; that
    means "not ready yet", not an error. The branch with the larger final
    projection leads, ties go to the primary branch.
    """
    if primary is None or secondary is None or not primary.points or not secondary.points:
        return None

    primary_stats = compute_series_stats(selection.primary_code, primary)
    secondary_stats = compute_series_stats(selection.secondary_code, secondary)

    if primary_stats.final >= secondary_stats.final:
        leading, lagging = primary_stats, secondary_stats
    else:
        leading, lagging = secondary_stats, primary_stats

    return ComparisonContext(
        selection=selection,
        primary=primary_stats,
        secondary=secondary_stats,
        leading=leading,
        lagging=lagging,
        projected_gap=abs(primary_stats.final - secondary_stats.final),
    )

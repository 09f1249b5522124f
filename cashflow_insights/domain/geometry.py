"""Chart geometry for forecast series

Paths are SVG path strings in a 0-100 coordinate space, where x runs along
the point index and y is inverted (largest value at y=0). Empty input
always yields an empty path rather than an error.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from cashflow_insights.domain.models import BalanceShare, ForecastPoint, ForecastSeries

Bounds = Tuple[float, float]
Coordinate = Tuple[float, float]

CHART_SIZE = 100.0


def _projected(point: ForecastPoint) -> float:
    return point.projected


def normalize_x(index: int, length: int) -> float:
    if length <= 1:
        return 0.0
    return index / (length - 1) * CHART_SIZE


def normalize_y(value: float, bounds: Bounds) -> float:
    """
    Map a value onto the inverted y axis.

    The denominator is floored at 1 so a flat series (max == min) lands on
    the bottom edge instead of dividing by zero.
    """
    low, high = bounds
    span = max(high - low, 1.0)
    return (1 - (value - low) / span) * CHART_SIZE


def value_bounds(values: Sequence[float]) -> Bounds:
    return (min(values), max(values))


def normalize_points(values: Sequence[float], bounds: Optional[Bounds] = None) -> List[Coordinate]:
    """Normalized (x, y) pairs for an ordered sequence of values"""
    if not values:
        return []
    bounds = bounds or value_bounds(values)
    return [(normalize_x(i, len(values)), normalize_y(v, bounds)) for i, v in enumerate(values)]


def _format_command(command: str, coordinate: Coordinate) -> str:
    x, y = coordinate
    return f"{command} {x:.2f} {y:.2f}"


def build_line_path(
    points: Sequence[ForecastPoint],
    value_selector: Callable[[ForecastPoint], float] = _projected,
    bounds: Optional[Bounds] = None,
) -> str:
    """
    Build a polyline through the selected value of each point.

    Args:
        points: Points in display order
        value_selector: Picks the plotted value (projected balance by default)
        bounds: Explicit (min, max) scale, so several lines can share one axis

    Returns:
        "M x y L x y ..." or "" for no points
    """
    coordinates = normalize_points([value_selector(p) for p in points], bounds)
    return " ".join(
        _format_command("M" if i == 0 else "L", coordinate)
        for i, coordinate in enumerate(coordinates)
    )


def build_band_path(points: Sequence[ForecastPoint]) -> str:
    """
    Build the closed confidence band between the high and low series.

    The top edge runs forward along `high`, the bottom edge runs back along
    `low`, and the path closes on its starting point. Both edges share the
    combined min/max of low and high.
    """
    if not points:
        return ""

    combined = [p.low for p in points] + [p.high for p in points]
    bounds = value_bounds(combined)
    top = normalize_points([p.high for p in points], bounds)
    bottom = list(reversed(normalize_points([p.low for p in points], bounds)))

    commands = [_format_command("M", top[0])]
    commands.extend(_format_command("L", c) for c in top[1:])
    commands.extend(_format_command("L", c) for c in bottom)
    commands.append("Z")
    return " ".join(commands)


def build_comparison_paths(
    primary: Optional[ForecastSeries],
    secondary: Optional[ForecastSeries],
) -> Optional[Tuple[str, str]]:
    """Projected lines for two branches on one shared scale, or None if either is empty"""
    if primary is None or secondary is None or not primary.points or not secondary.points:
        return None

    bounds = value_bounds([p.projected for p in primary.points + secondary.points])
    return (
        build_line_path(primary.points, bounds=bounds),
        build_line_path(secondary.points, bounds=bounds),
    )


def build_balance_share(items: Sequence[Tuple[str, float]]) -> List[BalanceShare]:
    """
    Split of starting balances as pie slices.

    Negative balances count as zero; a zero total is treated as 1 so every
    slice degrades to 0%.
    """
    total = sum(max(0.0, value) for _, value in items) or 1.0
    cursor = 0.0
    slices = []
    for label, value in items:
        fraction = max(0.0, value) / total
        start = cursor * 360
        cursor += fraction
        slices.append(
            BalanceShare(
                label=label,
                value=value,
                percentage=round(fraction * 100, 1),
                start_degrees=start,
                end_degrees=start + fraction * 360,
            )
        )
    return slices

"""
Display formatting for level metrics.
"""
import math
from numbers import Real


def format_kb(value: Real) -> str:
    return f"{float(value):.2f}"


def format_ratio(value: Real) -> str:
    if math.isinf(value):
        return "∞"
    return f"{float(value):.2f}"


def format_percentage(value: Real) -> str:
    return f"{float(value):.1f}"


def pluralize(count: int, singular: str = "", plural: str = "s") -> str:
    """Pick a suffix for ``count`` items."""
    return singular if count == 1 else plural


def describe_level(num_components: int, size_kb: Real, percentage: Real, ratio: Real) -> str:
    """One-line summary of a level, e.g. ``10 components, 12.50 KB (4.2%, 23.81x)``."""
    return (
        f"{num_components} component{pluralize(num_components)}, "
        f"{format_kb(size_kb)} KB ({format_percentage(percentage)}%, {format_ratio(ratio)}x)"
    )

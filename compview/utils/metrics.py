"""
Derived metrics for component levels.

All values are computed on demand from a result and a level index and are
exact fractions. Rounding belongs to the presentation layer (see
``compview.utils.formatting``).
"""
import math
from fractions import Fraction
from typing import Dict, Union

from compview.models.result import ComponentLevel, CompressionResult

Ratio = Union[Fraction, float]


def _level(result: CompressionResult, index: int) -> ComponentLevel:
    if not 0 <= index < len(result.component_levels):
        raise IndexError(f"Level index {index} is out of range for {len(result.component_levels)} levels")
    return result.component_levels[index]


def size_percentage(result: CompressionResult, index: int) -> Fraction:
    """Level size as a percentage of the original image size."""
    level = _level(result, index)
    return Fraction(level.data_size, result.original_size) * 100


def compression_ratio(result: CompressionResult, index: int) -> Ratio:
    """Original size divided by level size, or ``math.inf`` for an empty level."""
    level = _level(result, index)
    if level.data_size == 0:
        return math.inf
    return Fraction(result.original_size, level.data_size)


def size_per_component_kb(result: CompressionResult, index: int) -> Fraction:
    """Level size in KiB divided by its component count."""
    level = _level(result, index)
    return Fraction(level.data_size, level.num_components * 1024)


def size_kb(result: CompressionResult, index: int) -> Fraction:
    """Level size in KiB."""
    level = _level(result, index)
    return Fraction(level.data_size, 1024)


def level_metrics(result: CompressionResult, index: int) -> Dict[str, Ratio]:
    """
    Compute every derived metric for one level.

    Returns:
        Dictionary with size_kb, size_percentage, compression_ratio and
        size_per_component_kb
    """
    return {
        "size_kb": size_kb(result, index),
        "size_percentage": size_percentage(result, index),
        "compression_ratio": compression_ratio(result, index),
        "size_per_component_kb": size_per_component_kb(result, index),
    }

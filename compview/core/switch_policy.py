"""
Component count adjustment when the user switches compression methods.
"""
from typing import Union

from compview.core.methods import get_method_config
from compview.models.base import CompressionMethod

# A carried-over count below new_max / SWITCH_RESET_DIVISOR is reset to the
# new method's default.
SWITCH_RESET_DIVISOR = 3


def resolve_components(
    old_method: Union[str, CompressionMethod],
    new_method: Union[str, CompressionMethod],
    current: int,
    reset_divisor: float = SWITCH_RESET_DIVISOR
) -> int:
    """
    Decide the component count to use after switching methods.

    Args:
        old_method: Method the current count was chosen under
        new_method: Method being switched to
        current: Component count chosen under the old method
        reset_divisor: Proportionality threshold divisor for the new range

    Returns:
        The new method's default if ``current`` no longer fits the new range
        or is disproportionately small for it, otherwise ``current``
    """
    old_max = get_method_config(old_method).max_components
    new_config = get_method_config(new_method)

    if current > new_config.max_components:
        return new_config.default_components

    if current <= old_max and current < new_config.max_components / reset_divisor:
        return new_config.default_components

    return current

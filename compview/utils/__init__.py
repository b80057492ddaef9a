"""
Utility functions for the compression browser.
"""
from compview.utils.metrics import (
    size_kb,
    size_percentage,
    compression_ratio,
    size_per_component_kb,
    level_metrics
)

from compview.utils.formatting import (
    format_kb,
    format_ratio,
    format_percentage,
    pluralize,
    describe_level
)

from compview.utils.file_handling import (
    new_session_id,
    is_valid_session_id,
    get_session_dir,
    remove_session_dir,
    storage_status
)

__all__ = [
    # Metrics utilities
    'size_kb',
    'size_percentage',
    'compression_ratio',
    'size_per_component_kb',
    'level_metrics',

    # Formatting utilities
    'format_kb',
    'format_ratio',
    'format_percentage',
    'pluralize',
    'describe_level',

    # Session file handling
    'new_session_id',
    'is_valid_session_id',
    'get_session_dir',
    'remove_session_dir',
    'storage_status'
]

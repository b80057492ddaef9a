"""
Data models for the compression browser.

This module provides Pydantic models for compression results, method
constraints and the request/response bodies of the session API.
"""
from compview.models.base import (
    CompressionMethod,
    MethodConfig
)

from compview.models.result import (
    ComponentLevel,
    CompressionResult,
    ResultValidationError,
    ValidationReason,
    validate_result,
    validate_result_json
)

from compview.models.session import (
    MethodInfo,
    MethodSwitchRequest,
    MethodSwitchResponse,
    SelectionRequest,
    LevelSummary,
    ErrorInfo,
    BrowsingStateResponse
)

__all__ = [
    # Base models
    'CompressionMethod',
    'MethodConfig',

    # Result model
    'ComponentLevel',
    'CompressionResult',
    'ResultValidationError',
    'ValidationReason',
    'validate_result',
    'validate_result_json',

    # Session API models
    'MethodInfo',
    'MethodSwitchRequest',
    'MethodSwitchResponse',
    'SelectionRequest',
    'LevelSummary',
    'ErrorInfo',
    'BrowsingStateResponse'
]

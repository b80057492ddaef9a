"""
Exception hierarchy for the compression browser.

Input problems are raised before any state changes, service and payload
problems move the browsing controller back to idle, and selection problems
leave the current state untouched.
"""
from typing import Optional


class CompviewError(Exception):
    """Base class for all compression browser errors"""


class InputValidationError(CompviewError):
    """Raised when a compression request is rejected before it is issued"""


class CompressionServiceError(CompviewError):
    """Raised when the compression service cannot be reached or reports an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidStateError(CompviewError):
    """Raised when an operation does not apply to the current browsing state"""


class LevelSelectionError(CompviewError):
    """Raised when a component level index is outside the current result"""


class SupersededRequestError(CompviewError):
    """Raised when a compression response arrives after a newer request or a clear"""

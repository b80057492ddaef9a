"""
Core browsing logic for the compression browser.

This package contains:
- The method registry and the method switch policy
- Request validation and the compression service client
- Session persistence and the browsing state machine
"""
from compview.core.methods import (
    METHOD_CONFIGS,
    get_method_config,
    parse_method
)

from compview.core.switch_policy import (
    SWITCH_RESET_DIVISOR,
    resolve_components
)

from compview.core.validation import (
    ALLOWED_IMAGE_TYPES,
    is_valid_image_type,
    validate_compress_request
)

from compview.core.storage import (
    StorageMedium,
    MemoryStorage,
    DirectoryStorage,
    SessionPersistenceStore
)

from compview.core.controller import (
    BrowsingController,
    BrowsingState,
    BrowsingStatus,
    RequestError,
    ErrorKind
)

from compview.core.remote import CompressionServiceClient

from compview.core.sessions import SessionRegistry

__all__ = [
    # Methods
    'METHOD_CONFIGS',
    'get_method_config',
    'parse_method',
    'SWITCH_RESET_DIVISOR',
    'resolve_components',

    # Validation
    'ALLOWED_IMAGE_TYPES',
    'is_valid_image_type',
    'validate_compress_request',

    # Persistence
    'StorageMedium',
    'MemoryStorage',
    'DirectoryStorage',
    'SessionPersistenceStore',

    # Browsing
    'BrowsingController',
    'BrowsingState',
    'BrowsingStatus',
    'RequestError',
    'ErrorKind',
    'CompressionServiceClient',
    'SessionRegistry'
]

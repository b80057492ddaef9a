"""
Validation of compression requests before they are sent to the service.
"""
from typing import Optional, Tuple, Union

from compview.core.methods import get_method_config, parse_method
from compview.errors import InputValidationError
from compview.models.base import CompressionMethod

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png")


def is_valid_image_type(content_type: Optional[str]) -> bool:
    """Check whether an upload's MIME type is one the service accepts."""
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() in ALLOWED_IMAGE_TYPES


def validate_compress_request(
    image: Optional[bytes],
    content_type: Optional[str],
    method: Union[str, CompressionMethod],
    num_components: int
) -> Tuple[CompressionMethod, int]:
    """
    Validate the parts of a compression request.

    Args:
        image: Raw bytes of the uploaded image
        content_type: MIME type reported for the upload
        method: Requested compression method
        num_components: Requested component count

    Returns:
        Tuple of (parsed method, component count)

    Raises:
        InputValidationError: If no image was given, the type is not JPEG/PNG,
            the method is unknown or the count is outside the method's range
    """
    if not image:
        raise InputValidationError("Please select an image first")

    if not is_valid_image_type(content_type):
        raise InputValidationError("Please select a JPG or PNG image")

    parsed = parse_method(method)
    max_components = get_method_config(parsed).max_components
    if isinstance(num_components, bool) or not isinstance(num_components, int):
        raise InputValidationError("Number of components must be an integer")
    if not 1 <= num_components <= max_components:
        raise InputValidationError(
            f"Number of components for {parsed.value} must be between 1 and {max_components}"
        )
    return parsed, num_components

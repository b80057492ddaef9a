"""
Registry of compression methods and their parameter constraints.

This table is the single source of truth for the component ranges used by
input validation, the method switch policy and the API.
"""
from typing import Dict, Union

from compview.errors import InputValidationError
from compview.models.base import CompressionMethod, MethodConfig

METHOD_CONFIGS: Dict[CompressionMethod, MethodConfig] = {
    CompressionMethod.DCT: MethodConfig(
        label="DCT (Discrete Cosine Transform)",
        max_components=20,
        default_components=10,
        description="DCT: Block-based compression, very efficient per component (1-20)",
    ),
    CompressionMethod.SVD: MethodConfig(
        label="SVD (Singular Value Decomposition)",
        max_components=256,
        default_components=64,
        description="SVD: Matrix decomposition, requires more components (1-256)",
    ),
}


def parse_method(value: Union[str, CompressionMethod]) -> CompressionMethod:
    """
    Convert an externally supplied method identifier into a CompressionMethod.

    Raises:
        InputValidationError: If the identifier is not DCT or SVD
    """
    try:
        return CompressionMethod(value)
    except ValueError:
        raise InputValidationError(f"Invalid method '{value}'. Use DCT or SVD")


def get_method_config(method: Union[str, CompressionMethod]) -> MethodConfig:
    """Look up the constraints for a compression method."""
    return METHOD_CONFIGS[CompressionMethod(method)]

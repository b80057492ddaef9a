"""
Compression result model.

A result is the family of reconstructions the compression service produced for
one uploaded image, ordered from fewest to most components. Payloads arriving
from the service and text read back from session storage both go through
``validate_result``/``validate_result_json`` so that callers get a
``ResultValidationError`` with a specific reason instead of a generic failure.
"""
import base64
from enum import Enum
from typing import Any, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_core import PydanticCustomError

from compview.errors import CompviewError
from compview.models.base import CompressionMethod


class ValidationReason(str, Enum):
    """Why a compression result was rejected"""
    EMPTY_LEVELS = "empty_levels"
    NON_MONOTONIC = "non_monotonic_components"
    NON_POSITIVE_ORIGINAL_SIZE = "non_positive_original_size"
    NEGATIVE_COMPONENT_SIZE = "negative_component_size"
    MALFORMED = "malformed"


class ResultValidationError(CompviewError):
    """Raised when a compression result violates the result invariants"""

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ResultValidationError":
        """Map the first pydantic error onto a validation reason."""
        errors = exc.errors()
        if not errors:
            return cls(ValidationReason.MALFORMED, str(exc))

        first = errors[0]
        try:
            reason = ValidationReason(first["type"])
        except ValueError:
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = first.get("msg", "invalid value")
            if location:
                message = f"{location}: {message}"
            return cls(ValidationReason.MALFORMED, message)
        return cls(reason, first.get("msg", reason.value))


class ComponentLevel(BaseModel):
    """One reconstruction of the original image at a given component count"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    num_components: int = Field(
        ..., ge=1, strict=True, alias="numComponents",
        description="Component count used for this reconstruction"
    )
    data_size: int = Field(
        ..., strict=True, alias="dataSize",
        description="Size of the retained component data in bytes"
    )
    image_data: str = Field(
        ..., alias="imageData",
        description="Base64 encoded PNG of the reconstruction"
    )

    def image_bytes(self) -> bytes:
        """Decode the reconstruction payload into raw PNG bytes."""
        return base64.b64decode(self.image_data, validate=True)


class CompressionResult(BaseModel):
    """Family of reconstructions for one image and one compression method"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: CompressionMethod = Field(..., description="Method that produced the levels")
    original_size: int = Field(
        ..., strict=True, alias="originalSize",
        description="Size of the uploaded image in bytes"
    )
    component_levels: Tuple[ComponentLevel, ...] = Field(
        ..., alias="componentLevels",
        description="Reconstructions ordered by increasing component count"
    )

    @model_validator(mode="after")
    def check_invariants(self) -> "CompressionResult":
        if not self.component_levels:
            raise PydanticCustomError(
                ValidationReason.EMPTY_LEVELS.value,
                "Result must contain at least one component level",
            )

        for previous, current in zip(self.component_levels, self.component_levels[1:]):
            if current.num_components <= previous.num_components:
                raise PydanticCustomError(
                    ValidationReason.NON_MONOTONIC.value,
                    "Component counts must be strictly increasing "
                    "({previous} followed by {current})",
                    {"previous": previous.num_components, "current": current.num_components},
                )

        if self.original_size <= 0:
            raise PydanticCustomError(
                ValidationReason.NON_POSITIVE_ORIGINAL_SIZE.value,
                "Original size must be positive, got {size}",
                {"size": self.original_size},
            )

        for level in self.component_levels:
            if level.data_size < 0:
                raise PydanticCustomError(
                    ValidationReason.NEGATIVE_COMPONENT_SIZE.value,
                    "Level with {count} components has negative size {size}",
                    {"count": level.num_components, "size": level.data_size},
                )
        return self

    @property
    def last_index(self) -> int:
        """Index of the highest fidelity level"""
        return len(self.component_levels) - 1

    def to_json(self) -> str:
        """Serialize using the camelCase wire keys."""
        return self.model_dump_json(by_alias=True)


def validate_result(raw: Any) -> CompressionResult:
    """
    Validate a decoded compression service payload.

    Args:
        raw: Decoded JSON payload (normally a dict)

    Returns:
        The validated CompressionResult

    Raises:
        ResultValidationError: If the payload is malformed or breaks an invariant
    """
    if isinstance(raw, CompressionResult):
        return raw
    try:
        return CompressionResult.model_validate(raw)
    except ValidationError as e:
        raise ResultValidationError.from_pydantic(e) from e


def validate_result_json(text: Union[str, bytes]) -> CompressionResult:
    """
    Validate a serialized compression result, such as one read from storage.

    Args:
        text: JSON document using the camelCase wire keys

    Returns:
        The validated CompressionResult

    Raises:
        ResultValidationError: If the text is not valid JSON or not a valid result
    """
    try:
        return CompressionResult.model_validate_json(text)
    except ValidationError as e:
        raise ResultValidationError.from_pydantic(e) from e

"""
Base models for the compression browser.

The compression method enum and the per-method constraint record are shared by
the method registry, the result model and the API layer.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CompressionMethod(str, Enum):
    """Compression transform families offered by the compression service"""
    DCT = "DCT"
    SVD = "SVD"


class MethodConfig(BaseModel):
    """Parameter constraints for a single compression method"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., description="Human readable method name")
    max_components: int = Field(
        ..., ge=1, alias="maxComponents",
        description="Largest component count the method accepts"
    )
    default_components: int = Field(
        ..., ge=1, alias="defaultComponents",
        description="Component count used when the method is first chosen"
    )
    description: str = Field(..., description="Short explanation of the method's range")

    @model_validator(mode="after")
    def check_default_within_range(self) -> "MethodConfig":
        if self.default_components > self.max_components:
            raise ValueError(
                f"default_components ({self.default_components}) exceeds "
                f"max_components ({self.max_components})"
            )
        return self

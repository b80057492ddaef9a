"""
Request and response models for the browsing session API.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from compview.models.base import CompressionMethod


class MethodInfo(BaseModel):
    """Response model describing one compression method"""
    model_config = ConfigDict(populate_by_name=True)

    method: CompressionMethod
    label: str
    max_components: int = Field(..., alias="maxComponents")
    default_components: int = Field(..., alias="defaultComponents")
    description: str


class MethodSwitchRequest(BaseModel):
    """Request model for carrying a component count over to another method"""
    model_config = ConfigDict(populate_by_name=True)

    from_method: CompressionMethod = Field(..., alias="fromMethod", description="Currently selected method")
    to_method: CompressionMethod = Field(..., alias="toMethod", description="Method being switched to")
    num_components: int = Field(
        ..., ge=1, alias="numComponents",
        description="Component count chosen under the current method"
    )


class MethodSwitchResponse(BaseModel):
    """Response model with the component count to use after a switch"""
    model_config = ConfigDict(populate_by_name=True)

    method: CompressionMethod
    num_components: int = Field(..., alias="numComponents")


class SelectionRequest(BaseModel):
    """Request model for selecting a component level"""
    index: int = Field(..., description="Index into the result's component levels")


class LevelSummary(BaseModel):
    """Response model for one component level and its derived metrics"""
    model_config = ConfigDict(populate_by_name=True)

    index: int
    num_components: int = Field(..., alias="numComponents")
    data_size: int = Field(..., alias="dataSize", description="Level size in bytes")
    size_kb: float = Field(..., alias="sizeKb")
    size_percentage: float = Field(..., alias="sizePercentage", description="Level size as % of the original")
    compression_ratio: Optional[float] = Field(
        None, alias="compressionRatio",
        description="Original size / level size, null when the level is empty"
    )
    size_per_component_kb: float = Field(..., alias="sizePerComponentKb")
    summary: str = Field(..., description="Formatted one-line description")


class ErrorInfo(BaseModel):
    """Response model for the last failed compression request"""
    kind: str
    message: str
    reason: Optional[str] = None


class BrowsingStateResponse(BaseModel):
    """Response model for the current browsing state of a session"""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="idle, loading or ready")
    method: Optional[CompressionMethod] = None
    original_size: Optional[int] = Field(None, alias="originalSize")
    selected_index: Optional[int] = Field(None, alias="selectedIndex")
    levels: List[LevelSummary] = Field(default_factory=list)
    error: Optional[ErrorInfo] = None

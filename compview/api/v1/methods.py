"""
API v1 - compression method endpoints.
"""
from typing import List

from fastapi import APIRouter, HTTPException

from compview.core.methods import METHOD_CONFIGS, get_method_config
from compview.core.switch_policy import resolve_components
from compview.models.base import CompressionMethod
from compview.models.session import MethodInfo, MethodSwitchRequest, MethodSwitchResponse

router = APIRouter(prefix="/v1/methods", tags=["Compression Methods v1"])


def _method_info(method: CompressionMethod) -> MethodInfo:
    config = get_method_config(method)
    return MethodInfo(
        method=method,
        label=config.label,
        max_components=config.max_components,
        default_components=config.default_components,
        description=config.description
    )


@router.get("", response_model=List[MethodInfo])
async def list_methods():
    """List the available compression methods and their component ranges."""
    return [_method_info(method) for method in METHOD_CONFIGS]


@router.get("/{method}", response_model=MethodInfo)
async def get_method(method: str):
    """Get the component range of one compression method."""
    try:
        parsed = CompressionMethod(method)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown compression method: {method}")
    return _method_info(parsed)


@router.post("/switch", response_model=MethodSwitchResponse)
async def switch_method(request: MethodSwitchRequest):
    """
    Resolve the component count to show after the user changes method.

    - **fromMethod**: method the count was chosen under
    - **toMethod**: method being switched to
    - **numComponents**: the current count
    """
    num_components = resolve_components(request.from_method, request.to_method, request.num_components)
    return MethodSwitchResponse(method=request.to_method, num_components=num_components)

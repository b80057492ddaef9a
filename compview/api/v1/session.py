"""
API v1 - browsing session endpoints.

A session is identified by a browser-session cookie. Its browsing state lives
in a BrowsingController and is mirrored to the session's storage directory, so
a page reload (or a server restart) finds the same result and selected level.
"""
import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile

from compview.core.controller import BrowsingController, BrowsingState, BrowsingStatus
from compview.core.remote import CompressionServiceClient
from compview.core.sessions import SessionRegistry
from compview.models.session import (
    BrowsingStateResponse,
    ErrorInfo,
    LevelSummary,
    SelectionRequest
)
from compview.utils.file_handling import is_valid_session_id, new_session_id
from compview.utils.formatting import describe_level
from compview.utils.metrics import level_metrics

# Set up logging
logger = logging.getLogger(__name__)

SESSION_COOKIE = "compview_session"

router = APIRouter(prefix="/v1/session", tags=["Browsing Session v1"])


def get_session_id(request: Request, response: Response) -> str:
    """Read the session cookie, starting a new session if it is missing or malformed."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if not is_valid_session_id(session_id):
        session_id = new_session_id()
        # No max-age: the cookie ends with the browser session
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return session_id


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_client(request: Request) -> CompressionServiceClient:
    return request.app.state.client


def get_controller(
    session_id: str = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_registry)
) -> BrowsingController:
    return registry.get(session_id)


def build_state_response(state: BrowsingState) -> BrowsingStateResponse:
    """Convert a controller snapshot into the API response with per-level metrics."""
    response = BrowsingStateResponse(status=state.status.value, selected_index=state.selected_index)

    if state.error is not None:
        response.error = ErrorInfo(
            kind=state.error.kind.value,
            message=state.error.message,
            reason=state.error.reason.value if state.error.reason else None
        )

    result = state.result
    if result is None:
        return response

    response.method = result.method
    response.original_size = result.original_size
    for index, level in enumerate(result.component_levels):
        metrics = level_metrics(result, index)
        ratio = metrics["compression_ratio"]
        response.levels.append(LevelSummary(
            index=index,
            num_components=level.num_components,
            data_size=level.data_size,
            size_kb=float(metrics["size_kb"]),
            size_percentage=float(metrics["size_percentage"]),
            compression_ratio=None if math.isinf(ratio) else float(ratio),
            size_per_component_kb=float(metrics["size_per_component_kb"]),
            summary=describe_level(
                level.num_components, metrics["size_kb"], metrics["size_percentage"], ratio
            )
        ))
    return response


@router.get("", response_model=BrowsingStateResponse)
async def get_state(controller: BrowsingController = Depends(get_controller)):
    """Get the current browsing state of this session."""
    return build_state_response(controller.state)


@router.post("/compress", response_model=BrowsingStateResponse)
async def compress_image(
    image: Optional[UploadFile] = File(None),
    method: str = Form(...),
    num_components: int = Form(..., alias="numComponents"),
    controller: BrowsingController = Depends(get_controller),
    client: CompressionServiceClient = Depends(get_client)
):
    """
    Compress an image and make its component levels browsable.

    - **image**: JPG or PNG file
    - **method**: DCT or SVD
    - **numComponents**: largest component count to compute

    Any previous result of this session is discarded. The highest fidelity
    level is selected once the result arrives. A request overtaken by a newer
    one (or by a clear) answers 409.
    """
    content = await image.read() if image is not None else b""
    filename = (image.filename if image is not None else None) or "upload"
    content_type = image.content_type if image is not None else None

    state = await controller.run_request(client, content, filename, content_type, method, num_components)

    if state.error is not None:
        raise HTTPException(status_code=502, detail=state.error.message)
    return build_state_response(state)


@router.put("/selection", response_model=BrowsingStateResponse)
async def select_level(
    selection: SelectionRequest,
    controller: BrowsingController = Depends(get_controller)
):
    """Select the component level to display."""
    controller.select_level(selection.index)
    return build_state_response(controller.state)


@router.get("/levels/{index}/image")
async def get_level_image(index: int, controller: BrowsingController = Depends(get_controller)):
    """Return the reconstruction of one component level as a PNG."""
    result = controller.result
    if controller.status != BrowsingStatus.READY or result is None:
        raise HTTPException(status_code=409, detail="No compression result to browse")
    if not 0 <= index <= result.last_index:
        raise HTTPException(status_code=404, detail=f"Level index {index} is out of range")

    try:
        data = result.component_levels[index].image_bytes()
    except ValueError as e:
        logger.error(f"Level {index} image data is not valid base64: {e}")
        raise HTTPException(status_code=500, detail="Level image data is corrupt")
    return Response(content=data, media_type="image/png")


@router.delete("", response_model=BrowsingStateResponse)
async def clear_state(controller: BrowsingController = Depends(get_controller)):
    """Clear the current result and its persisted copy."""
    controller.clear()
    return build_state_response(controller.state)


@router.post("/end", status_code=204)
async def end_session(
    request: Request,
    registry: SessionRegistry = Depends(get_registry)
):
    """End this session and delete everything stored for it."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if is_valid_session_id(session_id):
        registry.end(session_id)
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE)
    return response

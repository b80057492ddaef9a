"""
API module for the compression browser application.
"""
import logging
import shutil
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from compview import (
    SESSION_DIR,
    SESSION_DIR_IS_TEMP,
    COMPRESSION_SERVICE_URL,
    COMPRESSION_TIMEOUT,
    MAX_ACTIVE_SESSIONS
)
from compview.api.v1 import router as v1_router
from compview.core.remote import CompressionServiceClient
from compview.core.sessions import SessionRegistry
from compview.errors import (
    InputValidationError,
    InvalidStateError,
    LevelSelectionError,
    SupersededRequestError
)

# Set up logging
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release session workers and remove a temporary storage root on shutdown."""
    yield
    app.state.registry.close()
    if SESSION_DIR_IS_TEMP:
        logger.info(f"Cleaning up temporary session directory: {SESSION_DIR}")
        try:
            shutil.rmtree(SESSION_DIR, ignore_errors=True)
        except Exception as e:
            logger.error(f"Error cleaning up temporary session directory: {str(e)}")


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Compression Browser API",
    description="""
    API for browsing lossy image compression results:
    - DCT (Discrete Cosine Transform) block quantization
    - SVD (Singular Value Decomposition) rank truncation

    Uploads are compressed by an external service; every returned component
    level can then be browsed without another request. Browsing state is kept
    per browser session and survives a page reload.
    """,
    version="1.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.registry = SessionRegistry(SESSION_DIR, max_sessions=MAX_ACTIVE_SESSIONS)
app.state.client = CompressionServiceClient(COMPRESSION_SERVICE_URL, timeout=COMPRESSION_TIMEOUT)

# Include routers
app.include_router(v1_router, prefix="/api")


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    """Rejected requests never reach the compression service."""
    logger.info(f"Rejected request to {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(LevelSelectionError)
async def level_selection_handler(request: Request, exc: LevelSelectionError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidStateError)
async def invalid_state_handler(request: Request, exc: InvalidStateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SupersededRequestError)
async def superseded_request_handler(request: Request, exc: SupersededRequestError):
    """The session state belongs to the newer request, so none is returned."""
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "error": str(exc)}
    )


# Health check endpoints
@app.get("/health")
async def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/health/detailed")
async def detailed_health_check(request: Request):
    """
    Provides detailed health information including system metrics, session
    storage status and compression service reachability.
    """
    import platform
    import psutil
    from compview.utils.file_handling import storage_status

    system_info = {
        "cpu_usage": psutil.cpu_percent(interval=0.1),
        "memory_usage": psutil.virtual_memory().percent,
        "disk_usage": psutil.disk_usage(SESSION_DIR).percent,
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    return {
        "status": "healthy",
        "version": "1.0.0",
        "system": system_info,
        "compression_service": await request.app.state.client.check_health(),
        "session_storage": storage_status(SESSION_DIR),
        "active_sessions": len(request.app.state.registry),
        "timestamp": time.time()
    }

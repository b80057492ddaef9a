"""
Compression Browser API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the compview package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import os
import logging
import sys

# Configure logging based on environment variables
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure root logger
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

# Check that required dependencies are installed
try:
    import fastapi
    import pydantic
    import httpx
    import psutil
    logger.info("All required dependencies are available")
except ImportError as e:
    logger.critical(f"Missing required dependency: {str(e)}")
    logger.critical("Please install all dependencies: pip install -e .")
    sys.exit(1)

from compview import app, COMPRESSION_SERVICE_URL, SESSION_DIR

# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    # Get configuration from environment variables
    port = int(os.environ.get("PORT", 8000))
    workers = int(os.environ.get("WORKERS", 1))
    debug = os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")

    logger.info(f"Starting Compression Browser API on port {port} with {workers} workers")
    logger.info(f"Compression service: {COMPRESSION_SERVICE_URL}")
    logger.info(f"Session storage: {SESSION_DIR}")

    # Browsing controllers live in process memory; run several workers only behind sticky sessions
    uvicorn.run(
        "compview:app",
        host="0.0.0.0",
        port=port,
        workers=workers,
        reload=debug
    )

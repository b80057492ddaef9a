"""
Compression Browser Application

This package implements a FastAPI application for browsing lossy image
compression results:
- DCT (block quantization) and SVD (rank truncation) method constraints
- Method switch heuristic for the component count
- Validation of the reconstruction family returned by the compression service
- Per-session browsing state that survives a page reload

The transforms themselves run in an external compression service.
"""
import os
import tempfile

# Session storage root; a temporary root is removed again at shutdown
SESSION_DIR = os.environ.get("SESSION_STORAGE_DIR") or tempfile.mkdtemp(prefix="compview-")
SESSION_DIR_IS_TEMP = not os.environ.get("SESSION_STORAGE_DIR")
os.makedirs(SESSION_DIR, exist_ok=True)

COMPRESSION_SERVICE_URL = os.environ.get("COMPRESSION_SERVICE_URL", "http://localhost:8080")
COMPRESSION_TIMEOUT = float(os.environ.get("COMPRESSION_TIMEOUT", 120))

# Browsing controllers kept in memory; older idle sessions rehydrate from disk on their next request
MAX_ACTIVE_SESSIONS = int(os.environ.get("MAX_ACTIVE_SESSIONS", 1000))

# Export the app instance
from compview.api import app

__all__ = ['app', 'SESSION_DIR', 'COMPRESSION_SERVICE_URL', 'COMPRESSION_TIMEOUT', 'MAX_ACTIVE_SESSIONS']

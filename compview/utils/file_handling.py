"""
Utilities for per-session storage directories.
"""
import os
import re
import shutil
import uuid
import logging
from typing import Any, Dict, Optional

from compview import SESSION_DIR

# Set up logging
logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_session_id() -> str:
    """Generate a fresh session identifier."""
    return uuid.uuid4().hex


def is_valid_session_id(session_id: Optional[str]) -> bool:
    """Session ids are used as directory names, so only uuid hex is accepted."""
    return bool(session_id) and SESSION_ID_PATTERN.match(session_id) is not None


def get_session_dir(session_id: str, root: Optional[str] = None) -> str:
    """
    Get the storage directory for a session.

    Args:
        session_id: Validated session identifier
        root: Storage root (defaults to SESSION_DIR)

    Returns:
        Absolute path of the session's directory (not created here)
    """
    if not is_valid_session_id(session_id):
        raise ValueError(f"Invalid session id: {session_id!r}")
    return os.path.join(root or SESSION_DIR, session_id)


def remove_session_dir(session_id: str, root: Optional[str] = None) -> None:
    """Delete a session's storage directory and everything in it."""
    path = get_session_dir(session_id, root)
    try:
        shutil.rmtree(path)
        logger.debug(f"Removed session directory: {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Failed to remove session directory {path}: {e}")


def storage_status(root: Optional[str] = None) -> Dict[str, Any]:
    """
    Report whether the storage root exists, is writable and how much space is left.
    """
    root = root or SESSION_DIR
    status: Dict[str, Any] = {"path": root, "exists": os.path.isdir(root)}
    if not status["exists"]:
        return status

    test_file = os.path.join(root, "test_write.tmp")
    try:
        with open(test_file, "w") as f:
            f.write("test")
        os.remove(test_file)
        status["writable"] = True
    except OSError as e:
        status["writable"] = False
        status["write_error"] = str(e)

    try:
        status["free_space_mb"] = shutil.disk_usage(root).free / (1024 * 1024)
    except OSError as e:
        status["space_error"] = str(e)
    return status

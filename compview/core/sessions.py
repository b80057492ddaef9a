"""
Registry of live browsing controllers, one per browser session.
"""
import logging
from collections import OrderedDict
from typing import Optional

from compview.core.controller import BrowsingController, BrowsingStatus
from compview.core.storage import DirectoryStorage, SessionPersistenceStore
from compview.utils.file_handling import get_session_dir, remove_session_dir

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000


class SessionRegistry:
    """
    Creates controllers on first use and keeps the most recently used ones.

    A controller created for a session id that already has a storage directory
    (for example after a server restart or an eviction) rehydrates from it.
    At most ``max_sessions`` controllers are kept; the least recently used
    controller that is not waiting for a response is closed to make room.
    """

    def __init__(self, root: Optional[str] = None, max_sessions: int = DEFAULT_MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.root = root
        self.max_sessions = max_sessions
        self._controllers: "OrderedDict[str, BrowsingController]" = OrderedDict()

    def get(self, session_id: str) -> BrowsingController:
        controller = self._controllers.get(session_id)
        if controller is not None:
            self._controllers.move_to_end(session_id)
            return controller

        medium = DirectoryStorage(get_session_dir(session_id, self.root))
        controller = BrowsingController(SessionPersistenceStore(medium))
        self._controllers[session_id] = controller
        logger.info(f"Opened browsing session {session_id} ({controller.status.value})")
        self._evict(keep=session_id)
        return controller

    def _evict(self, keep: str) -> None:
        # Loading controllers still have a response to deliver
        idle = [
            session_id for session_id, controller in self._controllers.items()
            if session_id != keep and controller.status != BrowsingStatus.LOADING
        ]
        excess = len(self._controllers) - self.max_sessions
        for session_id in idle[:max(excess, 0)]:
            controller = self._controllers.pop(session_id)
            # Waits for pending writes, so a later get rehydrates the latest state
            controller.close()
            logger.info(f"Evicted browsing session {session_id}")

    def end(self, session_id: str) -> None:
        """Forget a session and delete its persisted state."""
        controller = self._controllers.pop(session_id, None)
        if controller is not None:
            # Invalidates any in-flight request so its response cannot persist again
            controller.clear()
            controller.close()
        remove_session_dir(session_id, self.root)
        logger.info(f"Ended browsing session {session_id}")

    def close(self) -> None:
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

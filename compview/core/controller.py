"""
Browsing state machine for one session.

The controller owns the live browsing state (idle, loading or ready with a
result and a selected level) and mirrors every state-owning change into a
SessionPersistenceStore. In-memory state is updated first; persistence writes
are handed to a single worker thread when an event loop is running, so callers
observe a transition before its write settles.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Set, Union

from compview.core.storage import SessionPersistenceStore
from compview.core.validation import validate_compress_request
from compview.errors import (
    CompressionServiceError,
    InvalidStateError,
    LevelSelectionError,
    SupersededRequestError
)
from compview.models.base import CompressionMethod
from compview.models.result import (
    ComponentLevel,
    CompressionResult,
    ResultValidationError,
    ValidationReason,
    validate_result
)

# Set up logging
logger = logging.getLogger(__name__)


class BrowsingStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    PAYLOAD = "payload"


@dataclass(frozen=True)
class RequestError:
    """Last failed compression request, kept for the UI to report"""
    kind: ErrorKind
    message: str
    reason: Optional[ValidationReason] = None


@dataclass(frozen=True)
class BrowsingState:
    """Immutable snapshot of a controller"""
    status: BrowsingStatus
    result: Optional[CompressionResult] = None
    selected_index: Optional[int] = None
    error: Optional[RequestError] = None
    generation: int = 0


class BrowsingController:
    """
    Drives the idle -> loading -> ready cycle for one browsing session.

    Each ``start_request`` returns a generation token. Responses are delivered
    with that token and are ignored once a newer request (or a clear) has
    superseded it.
    """

    def __init__(self, store: SessionPersistenceStore):
        self.store = store
        self._generation = 0
        self._status = BrowsingStatus.IDLE
        self._result: Optional[CompressionResult] = None
        self._selected_index: Optional[int] = None
        self._error: Optional[RequestError] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Set[asyncio.Future] = set()

        saved = store.load()
        if saved is not None:
            self._result, self._selected_index = saved
            self._status = BrowsingStatus.READY
            logger.info(
                f"Rehydrated {self._result.method.value} result with "
                f"{len(self._result.component_levels)} levels (selected {self._selected_index})"
            )

    @property
    def status(self) -> BrowsingStatus:
        return self._status

    @property
    def result(self) -> Optional[CompressionResult]:
        return self._result

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected_index

    @property
    def error(self) -> Optional[RequestError]:
        return self._error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def selected_level(self) -> Optional[ComponentLevel]:
        if self._result is None or self._selected_index is None:
            return None
        return self._result.component_levels[self._selected_index]

    @property
    def state(self) -> BrowsingState:
        return BrowsingState(
            status=self._status,
            result=self._result,
            selected_index=self._selected_index,
            error=self._error,
            generation=self._generation,
        )

    def start_request(self) -> int:
        """
        Enter loading for a new compression request.

        Any current result is discarded and persisted state is cleared.

        Returns:
            The generation token the response must be delivered with
        """
        self._generation += 1
        self._status = BrowsingStatus.LOADING
        self._result = None
        self._selected_index = None
        self._error = None
        logger.info(f"Compression request {self._generation} started")
        self._persist(self.store.clear)
        return self._generation

    def _is_current(self, token: int) -> bool:
        if token != self._generation or self._status != BrowsingStatus.LOADING:
            logger.info(f"Ignoring response for superseded request {token} (current {self._generation})")
            return False
        return True

    def complete_request(self, token: int, payload: Any) -> bool:
        """
        Deliver a successful service response.

        A payload that fails validation is handled like a failed request.

        Args:
            token: Generation token returned by start_request
            payload: Decoded JSON body of the response

        Returns:
            False if the response was stale and ignored, True otherwise
        """
        if not self._is_current(token):
            return False

        try:
            result = validate_result(payload)
        except ResultValidationError as e:
            logger.error(f"Compression request {token} returned an invalid result ({e.reason.value}): {e}")
            self._status = BrowsingStatus.IDLE
            self._error = RequestError(ErrorKind.PAYLOAD, e.message, e.reason)
            return True

        self._result = result
        self._selected_index = result.last_index
        self._status = BrowsingStatus.READY
        logger.info(
            f"Compression request {token} completed: {result.method.value} with "
            f"{len(result.component_levels)} levels"
        )
        self._persist(self.store.save, result, result.last_index)
        return True

    def fail_request(self, token: int, message: str) -> bool:
        """
        Deliver a failed service response.

        Returns:
            False if the response was stale and ignored, True otherwise
        """
        if not self._is_current(token):
            return False

        logger.error(f"Compression request {token} failed: {message}")
        self._status = BrowsingStatus.IDLE
        self._error = RequestError(ErrorKind.TRANSPORT, message)
        return True

    def select_level(self, index: int) -> None:
        """
        Display a different component level of the current result.

        Raises:
            InvalidStateError: If there is no result to browse
            LevelSelectionError: If the index is outside the result's levels
        """
        if self._status != BrowsingStatus.READY or self._result is None:
            raise InvalidStateError(f"Cannot select a level while {self._status.value}")

        if not 0 <= index <= self._result.last_index:
            raise LevelSelectionError(
                f"Level index {index} is out of range (0-{self._result.last_index})"
            )

        self._selected_index = index
        self._persist(self.store.save_selection, index)

    def clear(self) -> None:
        """Drop the current result and wipe persisted state."""
        self._generation += 1
        self._status = BrowsingStatus.IDLE
        self._result = None
        self._selected_index = None
        self._error = None
        logger.info("Browsing state cleared")
        self._persist(self.store.clear)

    async def run_request(
        self,
        client: Any,
        image: bytes,
        filename: str,
        content_type: Optional[str],
        method: Union[str, CompressionMethod],
        num_components: int
    ) -> BrowsingState:
        """
        Validate, send and resolve a compression request.

        Input errors are raised before any state changes. Service and payload
        errors are recorded on the state, which returns to idle.

        Args:
            client: Object with an async ``compress`` method (CompressionServiceClient)
            image: Raw image bytes
            filename: Original upload filename
            content_type: MIME type of the upload
            method: Compression method
            num_components: Requested component count

        Returns:
            Snapshot of the state after the response was delivered

        Raises:
            InputValidationError: If the request is rejected before sending
            SupersededRequestError: If a newer request or a clear arrived
                while this one was in flight
        """
        parsed_method, num_components = validate_compress_request(
            image, content_type, method, num_components
        )
        token = self.start_request()
        try:
            payload = await client.compress(image, filename, content_type, parsed_method, num_components)
        except CompressionServiceError as e:
            delivered = self.fail_request(token, e.message)
        else:
            delivered = self.complete_request(token, payload)

        if not delivered:
            raise SupersededRequestError(f"Compression request {token} was superseded by a newer request")
        return self.state

    def _persist(self, func: Callable[..., Any], *args: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            func(*args)
            return

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compview-persist")
        future = loop.run_in_executor(self._executor, func, *args)
        self._pending.add(future)
        future.add_done_callback(self._on_persisted)

    def _on_persisted(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error(f"Session persistence write failed: {future.exception()}")

    async def flush(self) -> None:
        """Wait for all scheduled persistence writes to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """Release the persistence worker thread."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

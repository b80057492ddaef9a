"""Tests for the browsing state machine."""

import asyncio
import threading

import pytest

from compview.core.controller import BrowsingController, BrowsingStatus, ErrorKind
from compview.core.storage import RESULT_KEY, SELECTED_KEY, MemoryStorage, SessionPersistenceStore
from compview.errors import (
    CompressionServiceError,
    InputValidationError,
    InvalidStateError,
    LevelSelectionError,
    SupersededRequestError
)
from compview.models.result import ValidationReason, validate_result
from tests.conftest import FailingStorage, make_payload


class FakeServiceClient:
    """Stands in for CompressionServiceClient."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    async def compress(self, image, filename, content_type, method, num_components):
        self.calls.append((filename, content_type, method, num_components))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def controller(store):
    return BrowsingController(store)


def test_starts_idle(controller):
    assert controller.status is BrowsingStatus.IDLE
    assert controller.result is None
    assert controller.selected_index is None
    assert controller.selected_level is None


def test_rehydrates_from_store(store, payload):
    result = validate_result(payload)
    store.save(result, 1)

    controller = BrowsingController(store)
    assert controller.status is BrowsingStatus.READY
    assert controller.result == result
    assert controller.selected_index == 1
    assert controller.selected_level.num_components == 5


def test_start_request_enters_loading_and_clears_store(store, medium, payload):
    store.save(validate_result(payload), 1)
    controller = BrowsingController(store)

    token = controller.start_request()

    assert token == controller.generation
    assert controller.status is BrowsingStatus.LOADING
    assert controller.result is None
    assert controller.selected_index is None
    assert medium.items == {}


def test_success_selects_last_level_and_persists(controller, medium, payload):
    token = controller.start_request()
    assert controller.complete_request(token, payload)

    assert controller.status is BrowsingStatus.READY
    assert controller.selected_index == 2
    assert controller.error is None
    assert medium.items[SELECTED_KEY] == "2"
    assert controller.store.load() == (validate_result(payload), 2)


def test_invalid_payload_returns_to_idle(controller, medium):
    token = controller.start_request()
    controller.complete_request(token, make_payload(sizes=((4, 10), (2, 20))))

    assert controller.status is BrowsingStatus.IDLE
    assert controller.result is None
    assert controller.error.kind is ErrorKind.PAYLOAD
    assert controller.error.reason is ValidationReason.NON_MONOTONIC
    assert medium.items == {}


def test_failure_returns_to_idle(controller, medium):
    token = controller.start_request()
    assert controller.fail_request(token, "Invalid method. Use DCT or SVD")

    assert controller.status is BrowsingStatus.IDLE
    assert controller.error.kind is ErrorKind.TRANSPORT
    assert controller.error.message == "Invalid method. Use DCT or SVD"
    assert medium.items == {}


def test_superseded_response_is_ignored(controller):
    first = controller.start_request()
    second = controller.start_request()

    svd_payload = make_payload(method="SVD", sizes=((1, 10), (64, 500)))
    assert controller.complete_request(second, svd_payload)
    state = controller.state

    assert not controller.complete_request(first, make_payload())
    assert not controller.fail_request(first, "late failure")
    assert controller.state == state
    assert controller.result.method.value == "SVD"


def test_response_after_clear_is_ignored(controller, medium, payload):
    token = controller.start_request()
    controller.clear()

    assert not controller.complete_request(token, payload)
    assert controller.status is BrowsingStatus.IDLE
    assert medium.items == {}


def test_duplicate_response_is_ignored(controller, payload):
    token = controller.start_request()
    controller.complete_request(token, payload)
    controller.select_level(0)

    assert not controller.complete_request(token, payload)
    assert controller.selected_index == 0


def test_select_level(controller, medium, payload):
    controller.complete_request(controller.start_request(), payload)
    controller.select_level(1)

    assert controller.selected_index == 1
    assert medium.items[SELECTED_KEY] == "1"


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_select_out_of_range_leaves_state_unchanged(controller, medium, payload, index):
    controller.complete_request(controller.start_request(), payload)
    controller.select_level(1)

    with pytest.raises(LevelSelectionError):
        controller.select_level(index)
    assert controller.selected_index == 1
    assert medium.items[SELECTED_KEY] == "1"


def test_select_without_result(controller):
    with pytest.raises(InvalidStateError):
        controller.select_level(0)

    controller.start_request()
    with pytest.raises(InvalidStateError):
        controller.select_level(0)


def test_clear(controller, medium, payload):
    controller.complete_request(controller.start_request(), payload)
    controller.clear()

    assert controller.status is BrowsingStatus.IDLE
    assert controller.result is None
    assert controller.selected_index is None
    assert medium.items == {}


def test_end_to_end_cycle(controller, medium, payload):
    """Start, receive three levels, reload from storage, then clear."""
    controller.complete_request(controller.start_request(), payload)
    assert controller.selected_index == 2

    reloaded = BrowsingController(controller.store)
    assert reloaded.status is BrowsingStatus.READY
    assert (reloaded.result, reloaded.selected_index) == (validate_result(payload), 2)

    reloaded.clear()
    assert reloaded.status is BrowsingStatus.IDLE
    assert medium.items == {}


def test_write_failure_keeps_memory_state(payload):
    controller = BrowsingController(SessionPersistenceStore(FailingStorage()))
    controller.complete_request(controller.start_request(), payload)
    controller.select_level(0)

    assert controller.status is BrowsingStatus.READY
    assert controller.selected_index == 0


def test_run_request_success(controller, medium, payload):
    client = FakeServiceClient(payload=payload)

    async def scenario():
        state = await controller.run_request(client, b"png", "cat.png", "image/png", "DCT", 10)
        await controller.flush()
        return state

    state = asyncio.run(scenario())
    controller.close()

    assert state.status is BrowsingStatus.READY
    assert state.selected_index == 2
    assert client.calls == [("cat.png", "image/png", controller.result.method, 10)]
    assert RESULT_KEY in medium.items
    assert medium.items[SELECTED_KEY] == "2"


def test_run_request_service_error(controller):
    client = FakeServiceClient(error=CompressionServiceError("Failed to decode image", status_code=400))

    async def scenario():
        state = await controller.run_request(client, b"png", "cat.png", "image/png", "SVD", 64)
        await controller.flush()
        return state

    state = asyncio.run(scenario())
    controller.close()

    assert state.status is BrowsingStatus.IDLE
    assert state.error.message == "Failed to decode image"


@pytest.mark.parametrize("image, content_type, method, num_components", [
    (b"", "image/png", "DCT", 10),
    (b"gif", "image/gif", "DCT", 10),
    (b"png", "image/png", "PCA", 10),
    (b"png", "image/png", "DCT", 21),
    (b"png", "image/png", "SVD", 0),
])
def test_run_request_rejects_bad_input(store, payload, image, content_type, method, num_components):
    store.save(validate_result(payload), 1)
    controller = BrowsingController(store)
    client = FakeServiceClient(payload=payload)

    with pytest.raises(InputValidationError):
        asyncio.run(controller.run_request(client, image, "upload", content_type, method, num_components))

    assert client.calls == []
    assert controller.status is BrowsingStatus.READY
    assert controller.selected_index == 1
    assert controller.generation == 0


class BlockingStorage(MemoryStorage):
    """Medium whose writes wait until the test releases them."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def set_item(self, key, value):
        assert self.release.wait(timeout=5), "write was never released"
        super().set_item(key, value)


def test_transition_is_visible_before_write_settles(payload):
    medium = BlockingStorage()
    controller = BrowsingController(SessionPersistenceStore(medium))

    async def scenario():
        controller.complete_request(controller.start_request(), payload)

        # The save is still blocked on the worker thread
        assert controller.status is BrowsingStatus.READY
        assert controller.selected_index == 2
        assert RESULT_KEY not in medium.items

        controller.select_level(0)
        assert controller.selected_index == 0

        medium.release.set()
        await controller.flush()

    try:
        asyncio.run(scenario())
    finally:
        medium.release.set()
        controller.close()

    assert medium.items[SELECTED_KEY] == "0"
    assert controller.store.load() == (validate_result(payload), 0)


class InterruptingServiceClient(FakeServiceClient):
    """Starts a newer request on the controller while the first is in flight."""

    def __init__(self, controller, payload=None, error=None):
        super().__init__(payload=payload, error=error)
        self.controller = controller

    async def compress(self, image, filename, content_type, method, num_components):
        if not self.calls:
            self.controller.start_request()
        return await super().compress(image, filename, content_type, method, num_components)


@pytest.mark.parametrize("error", [None, CompressionServiceError("Network error: timed out")])
def test_run_request_superseded(controller, payload, error):
    client = InterruptingServiceClient(controller, payload=payload, error=error)

    with pytest.raises(SupersededRequestError):
        asyncio.run(controller.run_request(client, b"png", "cat.png", "image/png", "DCT", 10))
    controller.close()

    # The newer request still owns the state
    assert controller.status is BrowsingStatus.LOADING
    assert controller.error is None
    assert controller.generation == 2

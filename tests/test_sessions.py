"""Tests for the per-session controller registry."""

import pytest

from compview.core.controller import BrowsingStatus
from compview.core.sessions import SessionRegistry
from compview.utils.file_handling import new_session_id


@pytest.fixture
def registry(tmp_path):
    registry = SessionRegistry(str(tmp_path), max_sessions=3)
    yield registry
    registry.close()


def test_get_reuses_controller(registry):
    session_id = new_session_id()
    assert registry.get(session_id) is registry.get(session_id)
    assert len(registry) == 1


def test_registry_size_is_bounded(registry):
    session_ids = [new_session_id() for _ in range(10)]
    for session_id in session_ids:
        registry.get(session_id)

    assert len(registry) == 3
    assert [session_id in registry for session_id in session_ids[-3:]] == [True, True, True]
    assert session_ids[0] not in registry


def test_least_recently_used_is_evicted_first(registry):
    first, second, third = new_session_id(), new_session_id(), new_session_id()
    for session_id in (first, second, third):
        registry.get(session_id)

    registry.get(first)
    registry.get(new_session_id())

    assert first in registry
    assert second not in registry


def test_evicted_session_rehydrates_from_disk(registry, payload):
    session_id = new_session_id()
    controller = registry.get(session_id)
    controller.complete_request(controller.start_request(), payload)
    controller.select_level(1)

    for _ in range(3):
        registry.get(new_session_id())
    assert session_id not in registry

    reloaded = registry.get(session_id)
    assert reloaded is not controller
    assert reloaded.status is BrowsingStatus.READY
    assert reloaded.selected_index == 1


def test_loading_sessions_are_not_evicted(registry):
    waiting = [new_session_id() for _ in range(3)]
    for session_id in waiting:
        registry.get(session_id).start_request()

    newest = new_session_id()
    registry.get(newest)

    assert all(session_id in registry for session_id in waiting)
    assert newest in registry
    assert len(registry) == 4

    # Once answered they become evictable again
    for session_id in waiting:
        registry.get(session_id).clear()
    registry.get(new_session_id())
    assert len(registry) == 3


def test_max_sessions_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        SessionRegistry(str(tmp_path), max_sessions=0)


def test_end_deletes_session_dir(registry, tmp_path, payload):
    session_id = new_session_id()
    controller = registry.get(session_id)
    controller.complete_request(controller.start_request(), payload)
    assert (tmp_path / session_id).exists()

    registry.end(session_id)

    assert session_id not in registry
    assert not (tmp_path / session_id).exists()


def test_response_after_end_is_ignored(registry, tmp_path, payload):
    session_id = new_session_id()
    controller = registry.get(session_id)
    token = controller.start_request()

    registry.end(session_id)

    assert not controller.complete_request(token, payload)
    assert not controller.fail_request(token, "Network error: timed out")
    assert controller.status is BrowsingStatus.IDLE
    assert not (tmp_path / session_id).exists()

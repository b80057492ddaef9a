"""Shared fixtures for compression browser tests."""

import base64

import pytest

from compview.core.storage import MemoryStorage, SessionPersistenceStore, StorageMedium

PNG_BYTES = b"\x89PNG\r\n\x1a\n fake reconstruction"


def make_level(num_components, data_size, image=PNG_BYTES):
    return {
        "numComponents": num_components,
        "dataSize": data_size,
        "imageData": base64.b64encode(image).decode("ascii"),
    }


def make_payload(method="DCT", original_size=10240, sizes=((1, 512), (5, 2048), (10, 4096))):
    """Service payload with one level per (numComponents, dataSize) pair."""
    return {
        "method": method,
        "originalSize": original_size,
        "componentLevels": [make_level(n, size) for n, size in sizes],
    }


class FailingStorage(StorageMedium):
    """Medium whose writes fail as if the disk were full."""

    def __init__(self):
        self.items = {}

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        raise OSError("No space left on device")

    def remove_item(self, key):
        self.items.pop(key, None)


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def medium():
    return MemoryStorage()


@pytest.fixture
def store(medium):
    return SessionPersistenceStore(medium)

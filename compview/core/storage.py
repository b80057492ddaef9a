"""
Session-scoped persistence of the active compression result.

The store mirrors the browsing controller's state into a key-value medium so
it can be rehydrated after a reload. It never raises: write failures are
logged and swallowed, and corrupt stored data is cleared and treated as absent.
"""
import os
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from compview.models.result import (
    CompressionResult,
    ResultValidationError,
    validate_result_json
)

# Set up logging
logger = logging.getLogger(__name__)

RESULT_KEY = "img-compress-data"
SELECTED_KEY = "img-compress-selected"


class StorageMedium(ABC):
    """Minimal key-value interface the persistence store writes through"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""


class MemoryStorage(StorageMedium):
    """In-process medium, mainly for tests and single-process use"""

    def __init__(self):
        self.items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class DirectoryStorage(StorageMedium):
    """
    Medium backed by one file per key inside a session directory.

    Writes go to a temporary file that is then renamed over the target, so a
    reader sees either the old or the new value.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, key)

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()

    def set_item(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_path, path)

    def remove_item(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


class SessionPersistenceStore:
    """Persists exactly one compression result and its selected level"""

    def __init__(self, medium: StorageMedium):
        self.medium = medium

    def save(self, result: CompressionResult, selected_index: int) -> bool:
        """
        Persist a result together with its selected level.

        Args:
            result: The validated compression result
            selected_index: Index of the level currently displayed

        Returns:
            True if both writes succeeded. A failure of either write counts as
            a failure of the whole save.
        """
        try:
            self.medium.set_item(RESULT_KEY, result.to_json())
            self.medium.set_item(SELECTED_KEY, str(selected_index))
        except OSError as e:
            logger.error(f"Failed to save compression result to session storage: {e}")
            return False
        return True

    def save_selection(self, selected_index: int) -> bool:
        """Persist a new selected level for the already stored result."""
        try:
            self.medium.set_item(SELECTED_KEY, str(selected_index))
        except OSError as e:
            logger.error(f"Failed to update selected level in session storage: {e}")
            return False
        return True

    def load(self) -> Optional[Tuple[CompressionResult, int]]:
        """
        Read back the persisted result and selected level.

        Returns:
            Tuple of (result, selected_index), or None if nothing usable is
            stored. A missing or unusable index falls back to the last level.
            A corrupt result is cleared from the medium.
        """
        try:
            raw_result = self.medium.get_item(RESULT_KEY)
        except OSError as e:
            logger.error(f"Failed to read compression result from session storage: {e}")
            return None

        if raw_result is None:
            return None

        try:
            result = validate_result_json(raw_result)
        except ResultValidationError as e:
            logger.warning(f"Discarding corrupt stored compression result ({e.reason.value}): {e}")
            self.clear()
            return None

        return result, self._load_selected_index(result)

    def _load_selected_index(self, result: CompressionResult) -> int:
        try:
            raw_index = self.medium.get_item(SELECTED_KEY)
        except OSError as e:
            logger.error(f"Failed to read selected level from session storage: {e}")
            return result.last_index

        if raw_index is None:
            return result.last_index

        try:
            index = int(raw_index.strip())
        except ValueError:
            logger.warning(f"Ignoring unparseable stored level index {raw_index!r}")
            return result.last_index

        if not 0 <= index <= result.last_index:
            logger.warning(f"Ignoring out of range stored level index {index}")
            return result.last_index
        return index

    def clear(self) -> None:
        """Remove the persisted result and selection. Safe to call repeatedly."""
        for key in (RESULT_KEY, SELECTED_KEY):
            try:
                self.medium.remove_item(key)
            except OSError as e:
                logger.error(f"Failed to remove '{key}' from session storage: {e}")

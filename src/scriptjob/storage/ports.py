"""
Global Storage Port Interface

Defines the contract for the process-wide key-value store shared by all
jobs. Jobs only borrow a store for the duration of one execution.
"""

from abc import ABC, abstractmethod
from typing import Any, List


class IGlobalStorage(ABC):
    """
    Port interface for the shared key-value store.

    Keys are strings; values are plain structured data (None, bool, int,
    float, str, lists and dicts of those).
    """

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Return True if ``key`` is present."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Return the number of keys."""
        pass

    @abstractmethod
    def insert(self, key: str, value: Any) -> None:
        """Insert or replace the value stored under ``key``."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all keys."""
        pass

    @abstractmethod
    def remove(self, key: str) -> int:
        """
        Remove ``key``.

        Returns:
            Number of entries removed (0 or 1)
        """
        pass

    @abstractmethod
    def value(self, key: str) -> Any:
        """Return the value under ``key``, or None if it is absent."""
        pass

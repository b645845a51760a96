"""
Base plan store interface and exceptions.

This module defines the key-value persistence port used to keep planning
state (assumptions, asset exclusions and overrides, modeling assets and the
display mode) between sessions. The calculators never use it directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class PlanStoreError(Exception):
    """Base exception for plan store errors."""


class PlanNotFoundError(PlanStoreError):
    """Raised when a requested key is not in the store."""


class PlanStorePermissionError(PlanStoreError):
    """Raised when there are permission issues with store operations."""


class PlanStore(ABC):
    """
    Abstract base class for plan stores.

    Values are JSON-compatible dictionaries keyed by string.
    """

    @abstractmethod
    def save(self, key: str, data: Dict[str, Any]) -> str:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The key to store under
            data: JSON-compatible dictionary

        Returns:
            str: The key the value was stored under

        Raises:
            PlanStoreError: If the value cannot be stored
        """

    @abstractmethod
    def load(self, key: str) -> Dict[str, Any]:
        """
        Load the value stored under a key.

        Args:
            key: The key to load

        Returns:
            Dict: The stored value

        Raises:
            PlanNotFoundError: If the key is not found
            PlanStoreError: If the value cannot be loaded
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key from the store.

        Args:
            key: The key to delete

        Returns:
            bool: True if the key was deleted, False if it didn't exist
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if a key exists in the store."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """
        List keys in the store with optional prefix filter.

        Args:
            prefix: Optional prefix to filter keys

        Returns:
            Sorted list of keys
        """

    def load_or_default(self, key: str, default: Dict[str, Any]) -> Dict[str, Any]:
        """Load a value, returning ``default`` when the key is missing."""
        try:
            return self.load(key)
        except PlanNotFoundError:
            return default

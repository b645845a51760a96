"""In-memory plan store, used for tests and ephemeral sessions."""

import copy
from typing import Any, Dict

from .base import PlanNotFoundError, PlanStore


class InMemoryPlanStore(PlanStore):
    """Plan store backed by a dictionary. Values are copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def save(self, key: str, data: Dict[str, Any]) -> str:
        self._data[key] = copy.deepcopy(data)
        return key

    def load(self, key: str) -> Dict[str, Any]:
        if key not in self._data:
            raise PlanNotFoundError(f"Plan not found: {key}")
        return copy.deepcopy(self._data[key])

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return key in self._data

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self._data if key.startswith(prefix))

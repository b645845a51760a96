"""
Local filesystem plan store implementation.

Each key is stored as a JSON document under a base directory. It's suitable
for development and single-instance deployments.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .base import PlanNotFoundError, PlanStore, PlanStoreError, PlanStorePermissionError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class LocalPlanStore(PlanStore):
    """
    Local filesystem plan store.

    Stores each value as ``<base_path>/<key>.json``.
    """

    def __init__(self, base_path: str = "storage", create_dirs: bool = True):
        """
        Initialize the local plan store.

        Args:
            base_path: Base directory for stored plans
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = Path(base_path)
        self.create_dirs = create_dirs

        if self.create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _sanitize_key(self, key: str) -> str:
        """Normalize a key and strip any attempt to leave the base directory."""
        safe_key = key.lstrip("/").replace("\\", "/")

        sanitized_parts = []
        for part in safe_key.split("/"):
            if part == "..":
                if sanitized_parts:
                    sanitized_parts.pop()
            elif part and part != ".":
                sanitized_parts.append(part)

        if not sanitized_parts:
            raise PlanStoreError(f"Invalid plan key: {key!r}")
        return "/".join(sanitized_parts)

    def _get_path(self, key: str) -> Path:
        return self.base_path / (self._sanitize_key(key) + _SUFFIX)

    def save(self, key: str, data: Dict[str, Any]) -> str:
        """Write a value as JSON, creating parent directories as needed."""
        try:
            path = self._get_path(key)
            if self.create_dirs:
                path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, "w") as f:
                json.dump(data, f, indent=2)

            logger.debug(f"Saved plan {key} to {path}")
            return key

        except PermissionError as e:
            raise PlanStorePermissionError(f"Permission denied saving plan {key}: {e}")
        except (OSError, TypeError, ValueError) as e:
            raise PlanStoreError(f"Failed to save plan {key}: {e}")

    def load(self, key: str) -> Dict[str, Any]:
        """Read a value back from its JSON document."""
        path = self._get_path(key)
        if not path.exists():
            raise PlanNotFoundError(f"Plan not found: {key}")

        try:
            with open(path, "r") as f:
                return json.load(f)

        except PermissionError as e:
            raise PlanStorePermissionError(f"Permission denied loading plan {key}: {e}")
        except json.JSONDecodeError as e:
            raise PlanStoreError(f"Stored plan {key} is corrupted: {e}")
        except OSError as e:
            raise PlanStoreError(f"Failed to load plan {key}: {e}")

    def delete(self, key: str) -> bool:
        """Remove a stored value."""
        try:
            path = self._get_path(key)
            if not path.exists():
                return False
            path.unlink()
            return True

        except PermissionError as e:
            raise PlanStorePermissionError(f"Permission denied deleting plan {key}: {e}")
        except OSError as e:
            raise PlanStoreError(f"Failed to delete plan {key}: {e}")

    def exists(self, key: str) -> bool:
        return self._get_path(key).exists()

    def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally filtered by prefix."""
        try:
            keys = []
            if not self.base_path.exists():
                return keys

            for root, _dirs, filenames in os.walk(self.base_path):
                for filename in filenames:
                    if not filename.endswith(_SUFFIX):
                        continue
                    relative = (Path(root) / filename).relative_to(self.base_path)
                    key = str(relative).replace("\\", "/")[: -len(_SUFFIX)]
                    if key.startswith(prefix):
                        keys.append(key)

            return sorted(keys)

        except OSError as e:
            raise PlanStoreError(f"Failed to list plans with prefix {prefix}: {e}")

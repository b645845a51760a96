"""
Storage module for persisting planning state.

This module provides a key-value interface for saving and loading plan state
from various backends (local filesystem, in-memory).
"""

from .base import (
    PlanNotFoundError,
    PlanStore,
    PlanStoreError,
    PlanStorePermissionError,
)
from .factory import create_plan_store, get_plan_store
from .local import LocalPlanStore
from .memory import InMemoryPlanStore

__all__ = [
    "PlanStore",
    "PlanStoreError",
    "PlanNotFoundError",
    "PlanStorePermissionError",
    "LocalPlanStore",
    "InMemoryPlanStore",
    "create_plan_store",
    "get_plan_store",
]

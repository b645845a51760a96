"""
Plan store factory for creating store instances based on configuration.
"""

from wealthplan.config import Settings

from .base import PlanStore
from .local import LocalPlanStore
from .memory import InMemoryPlanStore


def create_plan_store(settings: Settings) -> PlanStore:
    """
    Create a plan store instance based on configuration.

    Args:
        settings: Application settings containing storage configuration

    Returns:
        PlanStore: Configured plan store instance

    Raises:
        ValueError: If storage configuration is invalid
    """
    if settings.storage_type == "local":
        return LocalPlanStore(base_path=settings.storage_base_path, create_dirs=True)

    elif settings.storage_type == "memory":
        return InMemoryPlanStore()

    else:
        raise ValueError(f"Unsupported storage type: {settings.storage_type}")


def get_plan_store() -> PlanStore:
    """
    Get a plan store instance using global settings.

    Returns:
        PlanStore: Configured plan store instance
    """
    from wealthplan.config import get_global_settings

    settings = get_global_settings()
    return create_plan_store(settings)

"""
Tests for plan store implementations.

This module tests the local and in-memory plan stores, including the
factory function and error handling.
"""

import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from wealthplan.config import Settings, reset_global_settings
from wealthplan.storage import (
    InMemoryPlanStore,
    LocalPlanStore,
    PlanNotFoundError,
    PlanStoreError,
    create_plan_store,
    get_plan_store,
)


class TestLocalPlanStore:
    """Test cases for the local plan store."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for testing."""
        temp_dir = tempfile.mkdtemp()
        yield temp_dir
        shutil.rmtree(temp_dir)

    @pytest.fixture
    def store(self, temp_dir):
        """Create a local plan store instance."""
        return LocalPlanStore(base_path=temp_dir, create_dirs=True)

    def test_save_and_load(self, store, temp_dir):
        """Test saving and loading a plan."""
        data = {"mode": "pro", "excluded_ids": ["a"]}

        assert store.save("plans/alpha", data) == "plans/alpha"
        assert store.load("plans/alpha") == data
        assert (Path(temp_dir) / "plans" / "alpha.json").exists()

    def test_save_replaces_previous_value(self, store):
        store.save("plans/alpha", {"mode": "easy"})
        store.save("plans/alpha", {"mode": "pro"})
        assert store.load("plans/alpha") == {"mode": "pro"}

    def test_load_missing_key(self, store):
        with pytest.raises(PlanNotFoundError):
            store.load("plans/missing")

    def test_load_or_default(self, store):
        assert store.load_or_default("plans/missing", {"mode": "easy"}) == {"mode": "easy"}

    def test_delete(self, store):
        store.save("plans/alpha", {})
        assert store.exists("plans/alpha")
        assert store.delete("plans/alpha") is True
        assert not store.exists("plans/alpha")
        assert store.delete("plans/alpha") is False

    def test_list_keys(self, store):
        store.save("plans/b", {})
        store.save("plans/a", {})
        store.save("other/c", {})

        assert store.list_keys() == ["other/c", "plans/a", "plans/b"]
        assert store.list_keys("plans/") == ["plans/a", "plans/b"]

    def test_path_traversal_stays_in_base(self, store, temp_dir):
        store.save("../../escape", {"x": 1})
        assert (Path(temp_dir) / "escape.json").exists()

    def test_empty_key_rejected(self, store):
        with pytest.raises(PlanStoreError):
            store.save("../", {})

    def test_corrupted_file(self, store, temp_dir):
        (Path(temp_dir) / "broken.json").write_text("{not json")
        with pytest.raises(PlanStoreError):
            store.load("broken")

    def test_unserializable_value(self, store):
        with pytest.raises(PlanStoreError):
            store.save("plans/bad", {"value": object()})


class TestInMemoryPlanStore:
    """Test cases for the in-memory plan store."""

    def test_values_are_copied(self):
        store = InMemoryPlanStore()
        data = {"excluded_ids": ["a"]}
        store.save("k", data)

        data["excluded_ids"].append("b")
        loaded = store.load("k")
        assert loaded == {"excluded_ids": ["a"]}

        loaded["excluded_ids"].append("c")
        assert store.load("k") == {"excluded_ids": ["a"]}

    def test_missing_and_delete(self):
        store = InMemoryPlanStore()
        with pytest.raises(PlanNotFoundError):
            store.load("missing")
        assert store.delete("missing") is False

        store.save("k", {})
        assert store.list_keys() == ["k"]
        assert store.delete("k") is True


class TestCreatePlanStore:
    """Test the plan store factory."""

    def test_create_memory_store(self):
        with patch.dict(
            os.environ, {"SECRET_KEY": "valid-secret-key-123", "STORAGE_TYPE": "memory"}, clear=True
        ):
            store = create_plan_store(Settings())
        assert isinstance(store, InMemoryPlanStore)

    def test_create_local_store(self, tmp_path):
        with patch.dict(
            os.environ,
            {
                "SECRET_KEY": "valid-secret-key-123",
                "STORAGE_TYPE": "local",
                "STORAGE_BASE_PATH": str(tmp_path / "plans"),
            },
            clear=True,
        ):
            store = create_plan_store(Settings())
        assert isinstance(store, LocalPlanStore)
        assert store.base_path == tmp_path / "plans"

    def test_get_plan_store_uses_global_settings(self):
        reset_global_settings()
        try:
            with patch.dict(
                os.environ, {"SECRET_KEY": "valid-secret-key-123", "STORAGE_TYPE": "memory"}, clear=True
            ):
                assert isinstance(get_plan_store(), InMemoryPlanStore)
        finally:
            reset_global_settings()

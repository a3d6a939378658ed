"""Tests for the public package surface of ``db_sync``."""

import importlib

import pytest

import db_sync


class TestTopLevelExports:
    def test_version(self):
        assert db_sync.__version__ == "1.0.0"

    @pytest.mark.parametrize("name", db_sync.__all__)
    def test_all_names_resolve(self, name):
        """Every name in __all__ is importable from the package root."""
        assert getattr(db_sync, name) is not None

    def test_error_hierarchy(self):
        for name in (
            "ConfigurationError",
            "ResolutionError",
            "ReconciliationError",
            "TransferError",
            "SyncCancelledError",
        ):
            assert issubclass(getattr(db_sync, name), db_sync.SyncError)


class TestSubpackages:
    @pytest.mark.parametrize(
        "module",
        [
            "db_sync.adapters",
            "db_sync.config",
            "db_sync.engine",
            "db_sync.schema",
            "db_sync.cli",
            "db_sync.log",
            "db_sync.factory",
        ],
    )
    def test_importable(self, module):
        importlib.import_module(module)

    def test_subpackage_all_resolves(self):
        for module_name in ("db_sync.adapters", "db_sync.config", "db_sync.engine", "db_sync.schema"):
            module = importlib.import_module(module_name)
            for name in module.__all__:
                assert hasattr(module, name), f"{module_name}.{name}"

"""Pytest configuration ensuring project root is importable.

Adds repository root to sys.path explicitly to avoid interpreter/path quirks.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_global_state(tmp_path, monkeypatch):  # noqa: D401
    """Keep config, env overrides, caches, metrics and events per-test.

    - AUTOBOOT_CONFIG_DIR points at an empty directory (defaults only)
    - AUTOBOOT__* overrides from the outer shell are dropped
    """
    from autoboot import metrics
    from autoboot.activation import clear_manifest_cache
    from autoboot.config import clear_config_cache
    from autoboot.events import reset_listeners_for_tests

    monkeypatch.setenv("AUTOBOOT_CONFIG_DIR", str(tmp_path / "_no_config"))
    for key in list(os.environ):
        if key.startswith("AUTOBOOT__"):
            monkeypatch.delenv(key)
    clear_config_cache()
    clear_manifest_cache()
    metrics.reset_for_tests()
    reset_listeners_for_tests()
    try:
        yield
    finally:
        clear_config_cache()
        clear_manifest_cache()
        reset_listeners_for_tests()

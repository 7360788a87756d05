"""Shared test fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CSP_LOG_JSON", "false")
    monkeypatch.setenv("CSP_LOG_LEVEL", "warning")
    monkeypatch.delenv("CSP_PRESETS_FILE", raising=False)
    monkeypatch.delenv("CSP_DEFAULT_PRESET", raising=False)

    # Reset cached settings and presets
    import cspolicy.config.loader as loader
    from cspolicy.config.presets import reset_presets_cache

    loader._settings = None
    reset_presets_cache()
    yield
    loader._settings = None
    reset_presets_cache()

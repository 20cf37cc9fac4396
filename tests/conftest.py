"""Root test configuration for routeguard.

Isolates every test from config files and environment overrides present on the
machine running the suite: the default search paths are emptied and the
ROUTEGUARD_* variables are cleared. Tests that exercise config loading set
them explicitly via monkeypatch.
"""

import pytest


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ignore ~/.routeguard/config.yaml and ./.routeguard/config.yaml in tests."""
    monkeypatch.setattr("routeguard.config.DEFAULT_CONFIG_PATHS", [])
    monkeypatch.delenv("ROUTEGUARD_CONFIG", raising=False)
    monkeypatch.delenv("ROUTEGUARD_PORT", raising=False)

# tests/conftest.py

"""
Pytest configuration for test isolation.

Settings and the shared analyzer are cached per process. Every test gets
clean caches and a rule file under its own temporary directory so saved
rules never leak between tests.
"""

import pytest

from app.config import get_settings
from app.dependencies import get_check_analyzer


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("RULES_PATH", str(tmp_path / "matching_rules.json"))
    monkeypatch.setenv("RULE_STORE", "file")
    monkeypatch.setenv("REQUIRE_AUTH", "false")
    monkeypatch.setenv("ANALYSIS_CONCURRENCY", "1")
    monkeypatch.setenv("ANALYSIS_RETRIES", "0")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("VISION_RELAY_URL", raising=False)
    get_settings.cache_clear()
    get_check_analyzer.cache_clear()
    yield
    get_settings.cache_clear()
    get_check_analyzer.cache_clear()

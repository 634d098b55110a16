"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the pomkit test suite.
"""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# =============================================================================
# Plugin Registration
# =============================================================================

pytest_plugins = [
    "pytester",
    "pomkit.testing",
    "tests.fixtures.config",
    "tests.fixtures.data",
    "tests.fixtures.logging",
]


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (filesystem, subprocess)"
    )
    config.addinivalue_line("markers", "property: Property-based tests (hypothesis)")


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Provide a temporary directory that is cleaned up after the test.

    Yields:
        Path: Temporary directory path
    """
    temp_path = Path(tempfile.mkdtemp(prefix="pomkit-test-"))
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """
    Remove every override slot from the process environment.

    Returns:
        The monkeypatch fixture, for setting slots in the test
    """
    for slot in (
        "TEST_ENV",
        "BASE_URL",
        "ENV_PREFIX",
        "SUBDOMAIN",
        "RBCCLIENT_USERNAME",
        "RBCCLIENT_PASSWORD",
        "TDFCLIENT_USERNAME",
        "TDFCLIENT_PASSWORD",
        "TEST_RUN_DIR",
        "AUTH_CREDENTIAL_KEY",
        "POM_CONFIG_FILE",
        "LOG_LEVEL",
        "POM_LOG_DIR",
    ):
        monkeypatch.delenv(slot, raising=False)
    return monkeypatch


# =============================================================================
# Test Collection Hooks
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to add markers.

    Args:
        config: Pytest config object
        items: List of collected test items
    """
    # Add 'unit' marker to tests without other markers
    for item in items:
        if not any(
            mark.name in ["integration", "property"] for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)

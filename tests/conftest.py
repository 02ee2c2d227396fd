"""Shared pytest fixtures for faultline test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Re-read environment settings for every test."""
    from faultline.core.config import get_fault_settings
    from faultline.core.config import get_outbound_settings

    get_fault_settings.cache_clear()
    get_outbound_settings.cache_clear()
    yield
    get_fault_settings.cache_clear()
    get_outbound_settings.cache_clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client for contract suites."""
    from faultline.main import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as test_client:
        yield test_client

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as testing authentication"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set a predictable environment for Settings.

    Clears anything the developer's shell might leak into the tests and
    sets the minimum credentials Settings needs.
    """
    for name in (
        "EMARSYS_API_BASE_URL",
        "EMARSYS_USE_MOCK_SERVER",
        "EMARSYS_STAGING",
        "EMARSYS_REQUEST_TIMEOUT",
        "EMARSYS_MAX_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("EMARSYS_USER", "test-user")
    monkeypatch.setenv("EMARSYS_SECRET", "test-secret")
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    yield


@pytest.fixture
def fixed_now():
    return datetime(2023, 2, 6, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now):
    return lambda: fixed_now

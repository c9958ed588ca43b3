"""
Pytest configuration for project root.

Ensures project modules can be imported in tests.
Provides global fixtures for the fake OCR and render backends.
"""

import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from infra.logger import create_logger
from infra.retry import RetryPolicy
from tests.fakes import RecordingSleep


@pytest.fixture(autouse=True)
def isolated_config_root(tmp_path, monkeypatch):
    """Point INKWELL_CONFIG_ROOT at an empty directory so a user's config.yaml never leaks in."""
    config_root = tmp_path / "config-root"
    monkeypatch.setenv("INKWELL_CONFIG_ROOT", str(config_root))
    monkeypatch.setenv("INKWELL_HEADLESS", "1")
    from infra.config import get_config
    get_config.cache_clear()
    yield config_root
    get_config.cache_clear()


@pytest.fixture
def fake_pdf(tmp_path):
    """An existing file standing in for a PDF; fake backends never parse it."""
    path = tmp_path / "document.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    return path


@pytest.fixture
def sleeps():
    return RecordingSleep()


@pytest.fixture
def retry_policy(sleeps):
    """RetryPolicy that records waits instead of sleeping, jitter fixed at its maximum."""
    return RetryPolicy(
        logger=create_logger("test", "retry"),
        sleep=sleeps,
        rand=lambda: 0.999,
    )

"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from inference import StubGateway  # noqa: E402


@pytest.fixture
def stub_gateway():
    """Ready backend returning the default stubbed reply for every call."""
    return StubGateway()


@pytest.fixture
def mock_tracer():
    """Enabled tracer whose record_event calls can be inspected."""
    tracer = MagicMock()
    tracer.is_enabled.return_value = True
    return tracer


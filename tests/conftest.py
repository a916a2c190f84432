"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def outgoing_webhook_form():
    """Form body of a typical Slack outgoing-webhook POST."""
    return {
        "token": "XXXXXXXXXXXXXXXXXX",
        "timestamp": "1426992833.123456",
        "team_id": "T0001",
        "team_domain": "example",
        "channel_id": "C2147483705",
        "channel_name": "general",
        "user_id": "U123",
        "user_name": "alice",
        "trigger_word": "hello",
        "text": "hello bot",
    }

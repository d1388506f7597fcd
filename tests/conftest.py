"""Shared pytest fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add the project root to Python path so tests can import the top-level modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tools import build_registry  # noqa: E402
from tools.trello.client import TrelloClient  # noqa: E402


@pytest.fixture
def trello_client():
    """A TrelloClient spy; set call.return_value / side_effect per test."""
    return AsyncMock(spec=TrelloClient)


@pytest.fixture
def registry(trello_client):
    """The Trello tool registry bound to the spy client."""
    return build_registry(trello_client)

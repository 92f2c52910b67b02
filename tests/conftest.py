# tests/conftest.py

"""Shared pytest fixtures for all exporter tests."""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def block_network() -> Generator[MagicMock, None, None]:
    """Patch the curl_cffi session globally so no test reaches the network.

    Tests that need a canned response patch the session again locally.
    """
    with patch(
        "refurb_exporter.scrapers.page_loader.curl_requests.Session"
    ) as mock_session_cls:
        mock_session_cls.return_value.get.side_effect = ConnectionError(
            "Network disabled in tests"
        )
        yield mock_session_cls

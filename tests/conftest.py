"""Shared fixtures for the test-suite."""

from __future__ import annotations

import pytest

from tests.helpers import FakeFetcher


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()

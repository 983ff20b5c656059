"""Tests for external integration connectivity helpers."""

from __future__ import annotations

import pytest
import pytest_mock

from imagelab.config.settings import get_settings
from imagelab.integrations.checks import check_replicate, run_all_checks


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPLICATE_API_TOKEN", "test-replicate")
    monkeypatch.setenv("REPLICATE_BASE_URL", "https://replicate.test/v1")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_check_replicate_success(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("imagelab.integrations.checks.ReplicateClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=True)
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_replicate()

    assert result.success
    instance.ping.assert_awaited_once()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_replicate_failure(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("imagelab.integrations.checks.ReplicateClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=False)
    instance.close = mocker.AsyncMock(return_value=None)

    results = await run_all_checks()

    assert len(results) == 1
    assert not results[0].success
    assert "non-success" in results[0].message.lower()

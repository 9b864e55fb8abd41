"""
HTTP 데이터 소스 어댑터 테스트

이 모듈은 사고 피드 어댑터와 World Bank 클라이언트를
네트워크 호출을 모킹하여 테스트합니다.
"""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from factories import ATOM_FEED
from safescore.adapters.feed.client import FeedIncidentSource
from safescore.adapters.worldbank.client import DatasetCountryRiskSource, WorldBankClient
from safescore.core.errors import DatasetFetchError, FeedParseError

WB_PAYLOAD = [
    {"page": 1, "pages": 1, "per_page": 20000, "total": 3},
    [
        {"country": {"id": "AU", "value": "Australia"}, "date": "2021", "value": 0.87},
        {"country": {"id": "AU", "value": "Australia"}, "date": "2020", "value": 1.5},
        {"country": {"id": "US", "value": "United States"}, "date": "2021", "value": 6.8},
    ],
]


class TestFeedIncidentSource:
    """사고 피드 어댑터 테스트"""

    @pytest.mark.asyncio
    async def test_no_url_returns_empty(self):
        source = FeedIncidentSource(None)
        assert await source.fetch_incidents() == []

    @pytest.mark.asyncio
    async def test_parses_feed(self):
        source = FeedIncidentSource("https://example.test/feed.xml", source_label="NSW RFS")
        with patch.object(source, "_fetch_text", new=AsyncMock(return_value=ATOM_FEED)):
            incidents = await source.fetch_incidents()

        assert len(incidents) == 1
        assert incidents[0].id == "urn:rfs:incident:1"
        assert incidents[0].source == "NSW RFS"
        # soft TTL 적용
        assert incidents[0].expires_at is not None

    @pytest.mark.asyncio
    async def test_result_cached(self):
        source = FeedIncidentSource("https://example.test/feed.xml")
        fetch = AsyncMock(return_value=ATOM_FEED)
        with patch.object(source, "_fetch_text", new=fetch):
            await source.fetch_incidents()
            await source.fetch_incidents()

        assert fetch.call_count == 1

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cache(self):
        """refresh는 캐시를 무시하고 다시 수집"""
        source = FeedIncidentSource("https://example.test/feed.xml")
        fetch = AsyncMock(return_value=ATOM_FEED)
        with patch.object(source, "_fetch_text", new=fetch):
            await source.fetch_incidents()
            incidents = await source.refresh()
            await source.fetch_incidents()

        assert fetch.call_count == 2
        assert len(incidents) == 1

    @pytest.mark.asyncio
    async def test_refresh_without_url(self):
        assert await FeedIncidentSource(None).refresh() == []

    @pytest.mark.asyncio
    async def test_invalid_xml_raises(self):
        source = FeedIncidentSource("https://example.test/feed.xml")
        with patch.object(source, "_fetch_text", new=AsyncMock(return_value="<not xml")):
            with pytest.raises(FeedParseError):
                await source.fetch_incidents()

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        source = FeedIncidentSource("https://example.test/feed.xml")
        with patch("safescore.adapters.feed.client.retry_with_backoff",
                   new=AsyncMock(side_effect=aiohttp.ClientError("refused"))):
            with pytest.raises(DatasetFetchError):
                await source.fetch_incidents()


class TestWorldBankClient:
    """World Bank 클라이언트 테스트"""

    @pytest.mark.asyncio
    async def test_fetch_rows(self):
        client = WorldBankClient("https://example.test/wb")
        with patch.object(client, "_fetch_json", new=AsyncMock(return_value=WB_PAYLOAD)):
            rows = await client.fetch_rows()
        assert len(rows) == 3

    @pytest.mark.asyncio
    async def test_rows_cached(self):
        client = WorldBankClient("https://example.test/wb")
        fetch = AsyncMock(return_value=WB_PAYLOAD)
        with patch.object(client, "_fetch_json", new=fetch):
            await client.fetch_rows()
            await client.fetch_rows()
        assert fetch.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"message": "error"},
        [{"page": 1}],
        [{"page": 1}, "rows"],
    ])
    async def test_unexpected_shape(self, payload):
        client = WorldBankClient("https://example.test/wb")
        with patch.object(client, "_fetch_json", new=AsyncMock(return_value=payload)):
            with pytest.raises(DatasetFetchError):
                await client.fetch_rows()

    @pytest.mark.asyncio
    async def test_null_rows_is_empty(self):
        client = WorldBankClient("https://example.test/wb")
        with patch.object(client, "_fetch_json", new=AsyncMock(return_value=[{"page": 1}, None])):
            assert await client.fetch_rows() == []

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        client = WorldBankClient("https://example.test/wb")
        with patch("safescore.adapters.worldbank.client.retry_with_backoff",
                   new=AsyncMock(side_effect=aiohttp.ClientError("refused"))):
            with pytest.raises(DatasetFetchError):
                await client.fetch_rows()


class TestDatasetCountryRiskSource:
    """데이터셋 직접 조회 CountryRiskSource 테스트"""

    @pytest.mark.asyncio
    async def test_latest_year(self):
        client = WorldBankClient("https://example.test/wb")
        source = DatasetCountryRiskSource(client)
        with patch.object(client, "_fetch_json", new=AsyncMock(return_value=WB_PAYLOAD)):
            risk = await source.get_country_risk("au")

        assert risk.country_code == "AU"
        assert risk.year == 2021
        assert risk.risk_score == 9.8

    @pytest.mark.asyncio
    async def test_unknown_country(self):
        client = WorldBankClient("https://example.test/wb")
        source = DatasetCountryRiskSource(client)
        with patch.object(client, "_fetch_json", new=AsyncMock(return_value=WB_PAYLOAD)):
            assert await source.get_country_risk("NZ") is None

import httpx
import pytest

from teamfeed.errors import AuthenticationError, RateLimitError, TransportFailure
from teamfeed.registry.leagues import resolve_feed
from teamfeed.scrapers.espn_scraper import EspnTeamsScraper

from conftest import NFL_PAYLOAD


def make_scraper(handler, max_attempts=1):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EspnTeamsScraper(client=client, timeout=2.0, max_attempts=max_attempts)


class TestEspnTeamsScraper:
    @pytest.mark.asyncio
    async def test_returns_decoded_json(self):
        scraper = make_scraper(lambda request: httpx.Response(200, json=NFL_PAYLOAD))

        payload = await scraper.fetch_payload(resolve_feed("nfl"))

        assert payload == NFL_PAYLOAD
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        scraper = make_scraper(lambda request: httpx.Response(200, text="not json"))

        assert await scraper.fetch_payload(resolve_feed("nfl")) is None
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_retries_transient_status_then_succeeds(self):
        statuses = iter([503, 200])

        def handler(request):
            status = next(statuses)
            if status == 200:
                return httpx.Response(200, json=NFL_PAYLOAD)
            return httpx.Response(status)

        scraper = make_scraper(handler, max_attempts=2)

        assert await scraper.fetch_payload(resolve_feed("nfl")) == NFL_PAYLOAD
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        scraper = make_scraper(handler, max_attempts=2)

        with pytest.raises(TransportFailure, match="status: 502"):
            await scraper.fetch_payload(resolve_feed("nfl"))
        assert len(calls) == 2
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        scraper = make_scraper(handler, max_attempts=3)

        with pytest.raises(TransportFailure, match="status: 404"):
            await scraper.fetch_payload(resolve_feed("nfl"))
        assert len(calls) == 1
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_auth_and_rate_limit_errors(self):
        scraper = make_scraper(lambda request: httpx.Response(403))
        with pytest.raises(AuthenticationError):
            await scraper.fetch_payload(resolve_feed("nfl"))
        await scraper.client.aclose()

        scraper = make_scraper(lambda request: httpx.Response(429))
        with pytest.raises(RateLimitError):
            await scraper.fetch_payload(resolve_feed("nfl"))
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        scraper = make_scraper(handler)

        with pytest.raises(TransportFailure, match="timed out"):
            await scraper.fetch_payload(resolve_feed("nfl"))
        await scraper.client.aclose()

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        scraper = make_scraper(lambda request: httpx.Response(200, json={}))

        await scraper.close()

        assert not scraper.client.is_closed
        await scraper.client.aclose()

import httpx
import pytest

from tictac_promo.client import PromoGameClient
from tictac_promo.main import create_app
from tictac_promo.storage import MemoryPlayerStore

from conftest import RecordingSink


@pytest.fixture
def app():
    return create_app(store=MemoryPlayerStore(), sink=RecordingSink(), bot_token=None)


@pytest.fixture
async def http(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


async def test_report_win_returns_server_code(http):
    client = PromoGameClient(http)
    assert await client.report_win("p1", "12345") == "12345"
    assert await client.report_win("p1", "99999") == "12345"
    status = await client.get_status("p1")
    assert status.last_promo_code == "12345"


async def test_report_loss(http):
    client = PromoGameClient(http)
    await client.report_loss("p1")
    assert (await client.get_status("p1")).is_connected is False


async def test_connect_url(http, app):
    client = PromoGameClient(http)
    url = await client.connect_url("p1")
    assert url == f"https://t.me/{app.state.bot_username}?start=connect_p1"


async def test_wait_until_linked_stops_polling():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return httpx.Response(
            200, json={"isConnected": len(calls) >= 3, "lastPromoCode": None}
        )

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test"
    ) as http_client:
        client = PromoGameClient(http_client)
        assert await client.wait_until_linked("p1", interval=0) is True
        assert calls == ["/api/player/p1"] * 3
        assert await client.wait_until_linked("p1", interval=0) is True
        assert len(calls) == 3


async def test_wait_until_linked_gives_up():
    def handler(request):
        return httpx.Response(200, json={"isConnected": False, "lastPromoCode": None})

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test"
    ) as http_client:
        client = PromoGameClient(http_client)
        assert await client.wait_until_linked("p1", interval=0, max_attempts=2) is False


async def test_link_seen_by_polling(http, app):
    client = PromoGameClient(http)
    assert await client.wait_until_linked("p1", interval=0, max_attempts=1) is False
    await app.state.link_service.link("p1", "chat-1")
    assert await client.wait_until_linked("p1", interval=0, max_attempts=1) is True

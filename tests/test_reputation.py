import httpx
import pytest

from app.services.reputation import ReputationClient


def make_client(handler, base_url="https://csi.test/api") -> ReputationClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ReputationClient(base_url, window_days=30, http=http)


@pytest.mark.asyncio
async def test_disabled_client_returns_none_without_request():
    client = ReputationClient(None)
    assert not client.enabled
    assert await client.get_score("alice") is None
    await client.aclose()


@pytest.mark.asyncio
async def test_score_is_read_from_csi_member():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={"csi": 4.2, "account": "alice"})

    assert await make_client(handler).get_score("alice") == 4.2
    assert seen[0].path == "/api/alice"
    assert seen[0].params["days"] == "30"


@pytest.mark.asyncio
async def test_score_member_and_bare_number_are_accepted():
    client = make_client(lambda r: httpx.Response(200, json={"score": "1.5"}))
    assert await client.get_score("alice") == 1.5

    client = make_client(lambda r: httpx.Response(200, json=3))
    assert await client.get_score("alice") == 3.0


@pytest.mark.asyncio
async def test_unknown_account_and_errors_yield_none():
    assert await make_client(lambda r: httpx.Response(404)).get_score("x") is None
    assert await make_client(lambda r: httpx.Response(500)).get_score("x") is None
    assert (
        await make_client(lambda r: httpx.Response(200, text="oops")).get_score("x")
        is None
    )
    assert (
        await make_client(lambda r: httpx.Response(200, json={"csi": None})).get_score(
            "x"
        )
        is None
    )


@pytest.mark.asyncio
async def test_null_csi_falls_back_to_score_member():
    client = make_client(
        lambda r: httpx.Response(200, json={"csi": None, "score": 2.0})
    )
    assert await client.get_score("alice") == 2.0

import json

import httpx
import pytest

from onboarding.domain.errors import TransportError
from onboarding.infrastructure.http.username_client import HttpUsernameChecker

BASE = "http://identity.test/api"


def make_checker(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpUsernameChecker(BASE, client=client), client


@pytest.mark.asyncio
async def test_check_posts_username_and_reads_verdict():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["json"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"available": False, "suggestion": "ravi_7"})

    checker, client = make_checker(handler)
    out = await checker.check("ravi")

    assert seen["path"] == "/api/auth/username/check"
    assert seen["json"] == {"username": "ravi"}
    assert out.available is False
    assert out.suggestion == "ravi_7"
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"available": "no"}, ["x"], None])
async def test_missing_boolean_counts_as_available(body):
    checker, client = make_checker(lambda _: httpx.Response(200, json=body))
    out = await checker.check("ravi")
    assert out.available is True
    assert out.suggestion is None
    await client.aclose()


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error():
    checker, client = make_checker(
        lambda _: httpx.Response(500, json={"message": "db unavailable"})
    )
    with pytest.raises(TransportError, match="db unavailable") as ei:
        await checker.check("ravi")
    assert ei.value.status_code == 500
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    checker, client = make_checker(handler)
    with pytest.raises(TransportError, match="Username check HTTP error"):
        await checker.check("ravi")
    await client.aclose()

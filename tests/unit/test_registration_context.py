import json

import httpx
import pytest

from onboarding.application.context import open_registration_context
from onboarding.domain.entities import ValidatorState
from onboarding.domain.flows import Role, SignupState
from tests.fakes import FakeNotifier


def identity_service(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/auth/register"):
        return httpx.Response(409, json={"data": {"pendingId": "p2"}})
    if path.endswith("/auth/register/verify"):
        body = json.loads(request.content.decode("utf-8"))
        if body["code"] == "123456":
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(400, json={"message": "Invalid or expired code"})
    if path.endswith("/auth/register/finalize"):
        return httpx.Response(201, json={"ok": True})
    if path.endswith("/auth/username/check"):
        body = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"available": body["username"] != "taken"})
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_context_wires_signup_end_to_end(settings):
    client = httpx.AsyncClient(transport=httpx.MockTransport(identity_service))
    notifier = FakeNotifier()

    async with open_registration_context(settings, client=client, notifier=notifier) as ctx:
        assert ctx.current_user is None
        signup = ctx.new_signup_controller()

        assert await signup.send_otp("9876543210") == "p2"
        await signup.verify_otp("123456")
        signup.select_role(Role.INVESTOR)
        assert signup.flow.current() == SignupState.INVESTOR

        user = await signup.complete(full_name="Ravi", username="ravi")
        assert ctx.current_user == user

        ctx.sign_out()
        assert ctx.current_user is None

    # borrowed client stays open
    assert client.is_closed is False
    await client.aclose()


@pytest.mark.asyncio
async def test_context_validator_uses_username_endpoint(settings):
    client = httpx.AsyncClient(transport=httpx.MockTransport(identity_service))
    fast = settings.model_copy(update={"username_debounce_ms": 10})

    async with open_registration_context(fast, client=client) as ctx:
        validator = ctx.new_username_validator()
        verdict = await validator.update("Taken")
        assert verdict.state == ValidatorState.TAKEN

    await client.aclose()


@pytest.mark.asyncio
async def test_context_closes_validators_on_exit(settings):
    client = httpx.AsyncClient(transport=httpx.MockTransport(identity_service))
    async with open_registration_context(settings, client=client) as ctx:
        validator = ctx.new_username_validator()
        pending = validator.update("someone")
    assert pending.cancelled()
    await client.aclose()


@pytest.mark.asyncio
async def test_context_owns_client_it_builds(settings):
    async with open_registration_context(settings) as ctx:
        owned = ctx.challenge._client  # type: ignore[attr-defined]
        assert owned.is_closed is False
    assert owned.is_closed is True

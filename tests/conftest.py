import pytest

from onboarding.application.registration_session import RegistrationOrchestrator
from onboarding.settings import Settings
from tests.fakes import FakeChallenge, FakeNotifier, FakeUsernameChecker


@pytest.fixture()
def settings():
    return Settings(_env_file=None, api_base_url="http://identity.test/api")


@pytest.fixture()
def challenge():
    return FakeChallenge(pending_id="p1")


@pytest.fixture()
def conflicting_challenge():
    return FakeChallenge(conflict_pending_id="p2")


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def orchestrator(challenge, notifier, settings):
    return RegistrationOrchestrator(challenge, notifier=notifier, settings=settings)


@pytest.fixture()
def checker():
    return FakeUsernameChecker(taken={"taken"})


@pytest.fixture(autouse=True)
def patch_password(monkeypatch):
    """
    Make generated passwords deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from onboarding.domain import services as domain_services

    monkeypatch.setattr(
        domain_services, "generate_strong_password", lambda length=16: "G" * length
    )
    yield

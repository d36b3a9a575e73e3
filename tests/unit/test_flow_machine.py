from enum import Enum

import pytest

from onboarding.domain.errors import ConfigError
from onboarding.domain.flow import FlowConfig, create
from onboarding.domain.flows import (
    EXPERT_FLOW,
    INVESTOR_FLOW,
    SIGNUP_FLOW,
    ExpertStep,
    InvestorStep,
    SignupEvent,
    SignupState,
    WizardEvent,
    signup_config,
)


class Light(str, Enum):
    RED = "red"
    GREEN = "green"
    OFF = "off"


class Tick(str, Enum):
    GO = "GO"
    STOP = "STOP"


def test_create_rejects_initial_without_table_entry():
    config = FlowConfig(initial=Light.OFF, transitions={Light.RED: {Tick.GO: Light.GREEN}})
    with pytest.raises(ConfigError):
        create(config)


def test_initial_with_no_outgoing_transitions_is_legal_and_inert():
    flow = create(FlowConfig(initial=Light.OFF, transitions={Light.OFF: {}}))
    assert flow.current() == Light.OFF
    assert flow.can(Tick.GO) is False
    assert flow.send(Tick.GO) is False
    assert flow.current() == Light.OFF


@pytest.mark.parametrize("config", [SIGNUP_FLOW, INVESTOR_FLOW, EXPERT_FLOW])
def test_send_follows_table_exactly(config):
    event_type = type(next(iter(next(e for e in config.transitions.values() if e))))
    for state in config.transitions:
        for event in event_type:
            flow = create(config)
            flow.go(state)
            expected = config.transitions[state].get(event)
            assert flow.can(event) is (expected is not None)
            moved = flow.send(event)
            if expected is None:
                assert moved is False
                assert flow.current() == state
            else:
                assert moved is True
                assert flow.current() == expected


def test_observers_notified_once_per_transition_and_not_on_noop():
    flow = create(SIGNUP_FLOW)
    seen = []
    flow.subscribe(lambda prev, cur, event: seen.append((prev, cur, event)))

    flow.send(SignupEvent.OTP_VERIFIED)  # not valid from phone
    assert seen == []

    flow.send(SignupEvent.OTP_SENT)
    assert seen == [(SignupState.PHONE, SignupState.OTP, SignupEvent.OTP_SENT)]


def test_go_jumps_without_table_and_notifies_with_no_event():
    flow = create(SIGNUP_FLOW)
    seen = []
    flow.subscribe(lambda prev, cur, event: seen.append((prev, cur, event)))

    flow.go(SignupState.EXPERT)
    assert flow.current() == SignupState.EXPERT
    assert seen == [(SignupState.PHONE, SignupState.EXPERT, None)]
    # role pages have no outgoing events
    assert flow.send(SignupEvent.BACK) is False


def test_unsubscribe_stops_notifications():
    flow = create(INVESTOR_FLOW)
    seen = []
    unsubscribe = flow.subscribe(lambda *args: seen.append(args))
    flow.send(WizardEvent.NEXT)
    unsubscribe()
    unsubscribe()  # idempotent
    flow.send(WizardEvent.NEXT)
    assert len(seen) == 1
    assert flow.current() == InvestorStep.RISK


def test_bind_returns_screen_for_current_state_or_none():
    flow = create(EXPERT_FLOW)
    screens = {ExpertStep.BASIC: "basic-screen", ExpertStep.PERSONA: "persona-screen"}
    assert flow.bind(screens) == "basic-screen"
    flow.send(WizardEvent.NEXT)
    assert flow.current() == ExpertStep.SPECIALIZATIONS
    assert flow.bind(screens) is None


def test_wizard_round_trip_back_and_next():
    flow = create(INVESTOR_FLOW)
    for _ in range(5):
        flow.send(WizardEvent.NEXT)
    assert flow.current() == InvestorStep.GENERATED
    for _ in range(5):
        flow.send(WizardEvent.BACK)
    assert flow.current() == InvestorStep.BASIC


def test_states_lists_every_state_in_table():
    assert SIGNUP_FLOW.states() == set(SignupState)
    assert INVESTOR_FLOW.states() == set(InvestorStep)


@pytest.mark.parametrize(
    "otp_sent,otp_verified,expected",
    [
        (False, False, SignupState.PHONE),
        (True, False, SignupState.OTP),
        (True, True, SignupState.ROLE),
    ],
)
def test_signup_config_resumes_at_matching_step(otp_sent, otp_verified, expected):
    flow = create(signup_config(otp_sent=otp_sent, otp_verified=otp_verified))
    assert flow.current() == expected

"""
Declarative flow state machine.

A flow is a closed set of states and events (one `Enum` each) plus a
transition table:

    SIGNUP = FlowConfig(
        initial=SignupState.PHONE,
        transitions={
            SignupState.PHONE: {SignupEvent.OTP_SENT: SignupState.OTP},
            SignupState.OTP: {SignupEvent.OTP_VERIFIED: SignupState.ROLE},
        },
    )

`send()` follows the table and silently ignores events that are not valid
in the current state, so a screen may dispatch optimistically. `go()` jumps
anywhere (reset and cancel paths). Everything is synchronous; observers run
inside the call that changed the state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Mapping, Optional, TypeVar

from onboarding.domain.errors import ConfigError

logger = logging.getLogger("onboarding.domain.flow")

S = TypeVar("S", bound=Enum)
E = TypeVar("E", bound=Enum)
T = TypeVar("T")

Observer = Callable[[Enum, Enum, Optional[Enum]], None]


@dataclass(frozen=True)
class FlowConfig(Generic[S, E]):
    initial: S
    transitions: Mapping[S, Mapping[E, S]]

    def states(self) -> set[S]:
        """Every state named in the table, as source or target."""
        found = {self.initial, *self.transitions.keys()}
        for edges in self.transitions.values():
            found.update(edges.values())
        return found


class FlowMachine(Generic[S, E]):
    def __init__(self, config: FlowConfig[S, E]) -> None:
        self._config = config
        self._state: S = config.initial
        self._observers: list[Observer] = []

    @property
    def config(self) -> FlowConfig[S, E]:
        return self._config

    def current(self) -> S:
        return self._state

    def can(self, event: E) -> bool:
        return event in self._config.transitions.get(self._state, {})

    def send(self, event: E) -> bool:
        target = self._config.transitions.get(self._state, {}).get(event)
        if target is None:
            logger.debug(
                "flow event ignored",
                extra={"state": self._state.value, "event": event.value},
            )
            return False
        self._move(target, event)
        return True

    def go(self, state: S) -> None:
        self._move(state, None)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def bind(self, bindings: Mapping[S, T]) -> T | None:
        """Return what the caller bound to the current state, or None."""
        return bindings.get(self._state)

    def _move(self, target: S, event: E | None) -> None:
        previous = self._state
        self._state = target
        logger.debug(
            "flow transition",
            extra={
                "from": previous.value,
                "to": target.value,
                "event": event.value if event is not None else None,
            },
        )
        for observer in list(self._observers):
            observer(previous, target, event)


def create(config: FlowConfig[S, E]) -> FlowMachine[S, E]:
    if config.initial not in config.transitions:
        raise ConfigError(
            f"initial state {config.initial.value!r} has no entry in transitions"
        )
    return FlowMachine(config)

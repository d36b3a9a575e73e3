from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import onboarding.domain.services as domain_services
from onboarding.domain.entities import (
    Availability,
    AvailabilityVerdict,
    ValidationQuery,
    ValidatorState,
)
from onboarding.domain.errors import TransportError
from onboarding.domain.ports.username_port import UsernameCheckPort
from onboarding.settings import Settings, get_settings

logger = logging.getLogger("onboarding.application.username_validator")

VerdictCallback = Callable[[AvailabilityVerdict], None]


class UsernameAvailabilityValidator:
    """
    Debounced, latest-wins username availability check for one input field.

    Every `update()` writes the "latest query" cell and restarts a trailing
    timer; when it fires, whatever the cell holds at that moment is checked.
    A response whose query no longer matches the cell is dropped, so a
    verdict is only ever delivered for the value currently typed.

    All futures handed out by `update()` and still pending share the next
    delivered verdict. Futures of superseded values are not cancelled; they
    resolve with the verdict of the value that superseded them.
    """

    def __init__(
        self,
        checker: UsernameCheckPort,
        *,
        debounce_seconds: float | None = None,
        min_length: int | None = None,
        on_verdict: Optional[VerdictCallback] = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._checker = checker
        self._debounce = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.username_debounce_ms / 1000
        )
        self._min_length = (
            min_length if min_length is not None else settings.username_min_length
        )
        self._on_verdict = on_verdict

        self._latest = ""
        self._state = ValidatorState.IDLE
        self._verdict: AvailabilityVerdict | None = None
        self._seq = 0
        self._timer: asyncio.TimerHandle | None = None
        self._waiters: list[asyncio.Future[AvailabilityVerdict]] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._checking: set[str] = set()
        self.last_query: ValidationQuery | None = None

    @property
    def state(self) -> ValidatorState:
        return self._state

    @property
    def latest(self) -> str:
        return self._latest

    @property
    def verdict(self) -> AvailabilityVerdict | None:
        return self._verdict

    def update(self, raw: str) -> asyncio.Future[AvailabilityVerdict]:
        loop = asyncio.get_running_loop()
        query = domain_services.normalize_username(raw)
        self._latest = query
        future: asyncio.Future[AvailabilityVerdict] = loop.create_future()

        if len(query) < self._min_length:
            self._cancel_timer()
            verdict = AvailabilityVerdict(
                query=query,
                state=ValidatorState.TOO_SHORT,
                message=f"At least {self._min_length} characters required",
            )
            self._deliver(verdict)
            future.set_result(verdict)
            return future

        self._waiters.append(future)
        self._state = ValidatorState.CHECKING
        self._cancel_timer()
        self._timer = loop.call_later(self._debounce, self._fire)
        return future

    async def aclose(self) -> None:
        self._cancel_timer()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.cancel()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        query = self._latest
        if len(query) < self._min_length:
            return
        if query in self._checking:
            # the in-flight check for this value will deliver it
            return
        self._seq += 1
        self.last_query = ValidationQuery(query=query, fired_at=self._seq)
        task = asyncio.get_running_loop().create_task(self._check(self.last_query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _check(self, pending: ValidationQuery) -> None:
        self._checking.add(pending.query)
        try:
            out = await self._checker.check(pending.query)
        except Exception as e:
            if isinstance(e, TransportError):
                logger.warning(
                    "username check failed",
                    extra={"query": pending.query, "error": str(e)},
                )
            else:
                logger.exception(
                    "username check crashed", extra={"query": pending.query}
                )
            pending.result = Availability.INDETERMINATE
            verdict = AvailabilityVerdict(
                query=pending.query,
                state=ValidatorState.INDETERMINATE,
                message="Could not validate username. Please try again.",
            )
        else:
            if out.available:
                pending.result = Availability.AVAILABLE
                verdict = AvailabilityVerdict(
                    query=pending.query,
                    state=ValidatorState.AVAILABLE,
                    message="Username available",
                )
            else:
                pending.result = Availability.TAKEN
                verdict = AvailabilityVerdict(
                    query=pending.query,
                    state=ValidatorState.TAKEN,
                    message="Username is already taken",
                    suggestion=out.suggestion,
                )
        finally:
            self._checking.discard(pending.query)

        if pending.query != self._latest:
            logger.debug(
                "stale username verdict dropped",
                extra={"query": pending.query, "fired_at": pending.fired_at},
            )
            return
        self._deliver(verdict)

    def _deliver(self, verdict: AvailabilityVerdict) -> None:
        self._state = verdict.state
        self._verdict = verdict
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(verdict)
        if self._on_verdict is not None:
            try:
                self._on_verdict(verdict)
            except Exception:
                logger.exception("username verdict callback failed")

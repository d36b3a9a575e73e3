class OnboardingError(Exception):
    """Base class for all onboarding errors."""

    pass


class ConfigError(OnboardingError):
    """A flow definition is unusable (e.g., initial state has no table entry)."""

    pass


class ValidationError(OnboardingError):
    """Malformed local input; never reaches the network."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StateError(OnboardingError):
    """Orchestrator invoked out of sequence (e.g., finalize without a pending id)."""

    pass


class TransportError(OnboardingError):
    """Network or backend failure, surfaced verbatim to the caller."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChallengeRejected(TransportError):
    """The backend refused the request (wrong/expired code, bad input)."""

    pass


class ConflictRecovered(OnboardingError):
    """
    The contact already has a pending registration.

    Raised by the transport and reconciled by the orchestrator, which adopts
    `pending_id`. Never surfaced to callers of the orchestrator.
    """

    def __init__(self, pending_id: str, message: str | None = None) -> None:
        super().__init__(message or "registration already pending")
        self.pending_id = pending_id

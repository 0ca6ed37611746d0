from __future__ import annotations

STATE_MISMATCH_MESSAGE = (
    "The generated state doesn't match the received one, "
    "watch out for cross-site request forgery attacks!"
)


class FlowError(RuntimeError):
    status_code = 400


class StateMismatch(FlowError):
    def __init__(self, message: str = STATE_MISMATCH_MESSAGE) -> None:
        super().__init__(message)


class ProviderDenied(FlowError):
    """The provider redirected back with an ``error`` instead of a code."""

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error


class TokenExchangeFailed(FlowError):
    status_code = 500

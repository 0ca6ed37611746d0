from __future__ import annotations

from dataclasses import asdict, dataclass, field

TOKEN_FIELDS = ("access_token", "token_type", "scope", "expires_in", "refresh_token")


@dataclass
class TokenSet:
    access_token: str | None = None
    token_type: str | None = None
    scope: str | None = None
    expires_in: str | None = None
    refresh_token: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in TOKEN_FIELDS)

    def as_dict(self) -> dict[str, str | None]:
        return asdict(self)


@dataclass
class PendingLogin:
    state: str | None = None
    code: str | None = None


@dataclass
class FlowSession:
    """State for the single login this process is driving."""

    pending: PendingLogin = field(default_factory=PendingLogin)
    tokens: TokenSet = field(default_factory=TokenSet)

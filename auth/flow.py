from __future__ import annotations

import logging

import httpx

from auth import spotify_oauth2
from auth.errors import ProviderDenied, StateMismatch, TokenExchangeFailed
from auth.models import FlowSession, TokenSet

DEFAULT_SCOPES = ["user-read-private", "user-read-email"]

LOGGER = logging.getLogger("spotauth.flow")


class AuthorizationFlow:
    """Authorization code grant against the Spotify accounts service.

    One flow drives one login at a time. Starting a new login replaces the
    pending state of the previous one, and a successful exchange replaces
    the stored tokens.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
        session: FlowSession | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = spotify_oauth2.DEFAULT_TIMEOUT_SECONDS,
        exchange_code_fn=spotify_oauth2.exchange_code,
        refresh_token_fn=spotify_oauth2.refresh_token,
        validate_token_fn=spotify_oauth2.is_access_token_valid,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(DEFAULT_SCOPES) if scopes is None else list(scopes)
        self.session = session or FlowSession()

        self._client = client
        self._timeout = timeout
        self._exchange_code_fn = exchange_code_fn
        self._refresh_token_fn = refresh_token_fn
        self._validate_token_fn = validate_token_fn

    @property
    def tokens(self) -> TokenSet:
        return self.session.tokens

    # -- operations ------------------------------------------------------------

    def begin_login(self) -> str:
        state = spotify_oauth2.generate_state()
        self.session.pending.state = state
        LOGGER.info("Starting Spotify login")
        return spotify_oauth2.build_authorization_url(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scopes=self.scopes,
            state=state,
        )

    def handle_callback(
        self,
        state: str | None,
        error: str | None,
        code: str | None,
    ) -> None:
        pending = self.session.pending
        # State is checked before the provider error.
        if pending.state is None or state != pending.state:
            LOGGER.warning("Rejected callback with mismatched state")
            raise StateMismatch()

        if error is not None:
            LOGGER.warning("Spotify denied authorization: %s", error)
            raise ProviderDenied(error)

        pending.code = code

    async def exchange_code(self) -> TokenSet:
        code = self.session.pending.code
        if not code:
            raise TokenExchangeFailed("No authorization code to exchange.")
        self.session.pending.code = None

        exchanged = await self._exchange_code_fn(
            client_id=self.client_id,
            client_secret=self.client_secret,
            code=code,
            redirect_uri=self.redirect_uri,
            client=self._client,
            timeout=self._timeout,
        )
        self.session.tokens = exchanged
        LOGGER.info("Exchanged authorization code for tokens (scope=%s)", exchanged.scope)
        return self.session.tokens

    async def refresh_token(self) -> TokenSet | None:
        tokens = self.session.tokens
        if tokens.refresh_token is None:
            LOGGER.info("No refresh token stored; skipping refresh")
            return None

        refreshed = await self._refresh_token_fn(
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=tokens.refresh_token,
            client=self._client,
            timeout=self._timeout,
        )
        tokens.access_token = refreshed.access_token
        tokens.token_type = refreshed.token_type
        tokens.scope = refreshed.scope
        tokens.expires_in = refreshed.expires_in
        LOGGER.info("Refreshed access token")
        return tokens

    async def check_session(self) -> bool:
        access_token = self.session.tokens.access_token
        if not access_token:
            return False

        valid = await self._validate_token_fn(
            access_token,
            client=self._client,
            timeout=self._timeout,
        )
        if not valid:
            LOGGER.info("Stored access token was rejected by Spotify")
        return valid

from __future__ import annotations

import base64
import secrets
import string
import urllib.parse

import httpx

from auth.errors import TokenExchangeFailed
from auth.models import TokenSet

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_CURRENT_USER_URL = "https://api.spotify.com/v1/me"

STATE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
STATE_LENGTH = 16
DEFAULT_TIMEOUT_SECONDS = 30.0


def generate_state(length: int = STATE_LENGTH) -> str:
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


def basic_credentials(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str,
    *,
    show_dialog: bool = False,
) -> str:
    query = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "state": state,
        "scope": " ".join(scopes),
        "show_dialog": "true" if show_dialog else "false",
    }
    return f"{SPOTIFY_AUTHORIZE_URL}?{urllib.parse.urlencode(query)}"


def _optional_str(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise TokenExchangeFailed(f"Token response field {key} has an unexpected type.")


def token_set_from_payload(payload: object) -> TokenSet:
    if not isinstance(payload, dict):
        raise TokenExchangeFailed("Token response must be a JSON object.")

    access_token = payload.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise TokenExchangeFailed("Token response missing access_token.")

    return TokenSet(
        access_token=access_token,
        token_type=_optional_str(payload, "token_type"),
        scope=_optional_str(payload, "scope"),
        expires_in=_optional_str(payload, "expires_in"),
        refresh_token=_optional_str(payload, "refresh_token"),
    )


async def _token_request(
    form: dict[str, str],
    *,
    client_id: str,
    client_secret: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> TokenSet:
    own_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)
    headers = {"Authorization": f"Basic {basic_credentials(client_id, client_secret)}"}

    try:
        response = await http_client.post(SPOTIFY_TOKEN_URL, data=form, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        detail = error.response.text
        raise TokenExchangeFailed(
            f"Token request failed with status {error.response.status_code}: {detail}"
        ) from error
    except httpx.HTTPError as error:
        raise TokenExchangeFailed(f"Token request failed: {error!r}") from error
    finally:
        if own_client:
            await http_client.aclose()

    try:
        payload = response.json()
    except ValueError as error:
        raise TokenExchangeFailed("Token response is not valid JSON.") from error

    return token_set_from_payload(payload)


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> TokenSet:
    return await _token_request(
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        },
        client_id=client_id,
        client_secret=client_secret,
        client=client,
        timeout=timeout,
    )


async def refresh_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> TokenSet:
    return await _token_request(
        {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        },
        client_id=client_id,
        client_secret=client_secret,
        client=client,
        timeout=timeout,
    )


async def is_access_token_valid(
    access_token: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> bool:
    own_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)

    try:
        response = await http_client.get(
            SPOTIFY_CURRENT_USER_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    finally:
        if own_client:
            await http_client.aclose()

    if response.status_code >= 400:
        return False
    try:
        payload = response.json()
    except ValueError:
        return False
    return not (isinstance(payload, dict) and payload.get("error") is not None)

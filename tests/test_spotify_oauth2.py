import string
import urllib.parse

import httpx
import pytest

from auth.errors import TokenExchangeFailed
from auth.spotify_oauth2 import (
    SPOTIFY_AUTHORIZE_URL,
    SPOTIFY_CURRENT_USER_URL,
    SPOTIFY_TOKEN_URL,
    basic_credentials,
    build_authorization_url,
    exchange_code,
    generate_state,
    is_access_token_valid,
    refresh_token,
    token_set_from_payload,
)


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return urllib.parse.parse_qs(request.content.decode("utf-8"))


def test_state_length_and_alphabet() -> None:
    allowed = set(string.ascii_letters + string.digits)

    for _ in range(50):
        state = generate_state()
        assert len(state) == 16
        assert set(state) <= allowed


def test_basic_credentials_is_base64_of_id_and_secret() -> None:
    assert basic_credentials("Aladdin", "open sesame") == "QWxhZGRpbjpvcGVuIHNlc2FtZQ=="


def test_build_authorization_url_contains_required_params() -> None:
    url = build_authorization_url(
        client_id="client123",
        redirect_uri="http://localhost:8080/callback",
        scopes=["user-read-private", "user-read-email"],
        state="state123",
    )

    assert url.startswith(f"{SPOTIFY_AUTHORIZE_URL}?")
    query = urllib.parse.parse_qs(urllib.parse.urlparse(url).query)
    assert query == {
        "client_id": ["client123"],
        "response_type": ["code"],
        "redirect_uri": ["http://localhost:8080/callback"],
        "state": ["state123"],
        "scope": ["user-read-private user-read-email"],
        "show_dialog": ["false"],
    }


def test_token_payload_stringifies_expires_in() -> None:
    tokens = token_set_from_payload({"access_token": "a", "expires_in": 3600})

    assert tokens.expires_in == "3600"
    assert tokens.refresh_token is None


def test_token_payload_requires_access_token() -> None:
    with pytest.raises(TokenExchangeFailed, match="missing access_token"):
        token_set_from_payload({"token_type": "Bearer"})


@pytest.mark.asyncio
async def test_exchange_code_success(httpx_mock) -> None:
    httpx_mock.add_response(
        url=SPOTIFY_TOKEN_URL,
        method="POST",
        json={
            "access_token": "access-1",
            "token_type": "Bearer",
            "scope": "user-read-private",
            "expires_in": 3600,
            "refresh_token": "refresh-1",
        },
    )

    tokens = await exchange_code(
        client_id="id",
        client_secret="secret",
        code="code123",
        redirect_uri="http://localhost:8080/callback",
    )

    assert tokens.access_token == "access-1"
    assert tokens.token_type == "Bearer"
    assert tokens.scope == "user-read-private"
    assert tokens.expires_in == "3600"
    assert tokens.refresh_token == "refresh-1"

    request = httpx_mock.get_request()
    assert request.headers["Authorization"] == f"Basic {basic_credentials('id', 'secret')}"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert _form(request) == {
        "grant_type": ["authorization_code"],
        "code": ["code123"],
        "redirect_uri": ["http://localhost:8080/callback"],
    }


@pytest.mark.asyncio
async def test_exchange_code_error_status(httpx_mock) -> None:
    httpx_mock.add_response(
        url=SPOTIFY_TOKEN_URL,
        method="POST",
        status_code=400,
        json={"error": "invalid_grant"},
    )

    with pytest.raises(TokenExchangeFailed, match="status 400"):
        await exchange_code(
            client_id="id",
            client_secret="secret",
            code="bad-code",
            redirect_uri="http://localhost:8080/callback",
        )


@pytest.mark.asyncio
async def test_exchange_code_network_error(httpx_mock) -> None:
    httpx_mock.add_exception(httpx.ConnectError("connection refused"))

    with pytest.raises(TokenExchangeFailed, match="Token request failed") as excinfo:
        await exchange_code(
            client_id="id",
            client_secret="secret",
            code="code123",
            redirect_uri="http://localhost:8080/callback",
        )

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_exchange_code_rejects_non_json(httpx_mock) -> None:
    httpx_mock.add_response(url=SPOTIFY_TOKEN_URL, method="POST", text="<html>oops</html>")

    with pytest.raises(TokenExchangeFailed, match="not valid JSON"):
        await exchange_code(
            client_id="id",
            client_secret="secret",
            code="code123",
            redirect_uri="http://localhost:8080/callback",
        )


@pytest.mark.asyncio
async def test_refresh_token_uses_refresh_grant(httpx_mock) -> None:
    httpx_mock.add_response(
        url=SPOTIFY_TOKEN_URL,
        method="POST",
        json={"access_token": "access-2", "token_type": "Bearer", "expires_in": 3600},
    )

    tokens = await refresh_token(
        client_id="id",
        client_secret="secret",
        refresh_token="refresh-1",
    )

    assert tokens.access_token == "access-2"
    assert tokens.refresh_token is None
    request = httpx_mock.get_request()
    assert request.headers["Authorization"] == f"Basic {basic_credentials('id', 'secret')}"
    assert _form(request) == {
        "grant_type": ["refresh_token"],
        "refresh_token": ["refresh-1"],
    }


@pytest.mark.asyncio
async def test_refresh_token_error(httpx_mock) -> None:
    httpx_mock.add_response(url=SPOTIFY_TOKEN_URL, method="POST", status_code=401, text="nope")

    with pytest.raises(TokenExchangeFailed, match="status 401"):
        await refresh_token(client_id="id", client_secret="secret", refresh_token="stale")


@pytest.mark.asyncio
async def test_access_token_valid(httpx_mock) -> None:
    httpx_mock.add_response(url=SPOTIFY_CURRENT_USER_URL, method="GET", json={"id": "listener"})

    assert await is_access_token_valid("access-1") is True
    assert httpx_mock.get_request().headers["Authorization"] == "Bearer access-1"


@pytest.mark.asyncio
async def test_access_token_rejected(httpx_mock) -> None:
    httpx_mock.add_response(
        url=SPOTIFY_CURRENT_USER_URL,
        method="GET",
        status_code=401,
        json={"error": {"status": 401, "message": "The access token expired"}},
    )

    assert await is_access_token_valid("expired") is False


@pytest.mark.asyncio
async def test_access_token_error_body(httpx_mock) -> None:
    httpx_mock.add_response(
        url=SPOTIFY_CURRENT_USER_URL,
        method="GET",
        json={"error": {"status": 400, "message": "Only valid bearer authentication supported"}},
    )

    assert await is_access_token_valid("garbage") is False

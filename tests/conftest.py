import pytest

from spotauth.env import ClientSettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch) -> None:
    for key in (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SPOTAUTH_CONFIG",
        "SPOTAUTH_HTTP_TIMEOUT",
        "SPOTAUTH_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def client_settings() -> ClientSettings:
    return ClientSettings.model_validate(
        {
            "client_id": "client-id",
            "client_secret": "client-secret",
            "scope": ["user-read-private", "user-read-email"],
            "redirect_uri": {"host": "127.0.0.1", "port": 8888, "path": "/callback"},
        }
    )

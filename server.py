from __future__ import annotations

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware

from auth.flow import AuthorizationFlow
from auth.routes import build_routes
from spotauth.app import FailureBoundaryMiddleware, health_route
from spotauth.constants import APP_VERSION, LOGGER
from spotauth.env import (
    ClientSettings,
    http_timeout,
    load_env,
    load_settings,
    setup_logging,
)


def build_flow(settings: ClientSettings, **kwargs) -> AuthorizationFlow:
    return AuthorizationFlow(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=settings.redirect_uri.url,
        scopes=settings.scope,
        timeout=http_timeout(),
        **kwargs,
    )


def create_app(
    settings: ClientSettings | None = None,
    flow: AuthorizationFlow | None = None,
) -> Starlette:
    if settings is None:
        load_env()
        setup_logging()
        settings = load_settings()

    flow = flow or build_flow(settings)
    app = Starlette(
        routes=[*build_routes(flow), health_route()],
        middleware=[Middleware(FailureBoundaryMiddleware)],
    )
    app.state.flow = flow
    app.state.settings = settings
    return app


def main() -> None:
    load_env()
    setup_logging()
    settings = load_settings()
    host = settings.redirect_uri.host
    port = settings.redirect_uri.port

    app = create_app(settings)
    LOGGER.info("spotauth %s listening on http://%s:%s", APP_VERSION, host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()

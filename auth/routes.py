from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from auth.errors import FlowError
from auth.flow import AuthorizationFlow


def envelope(success: bool, message: str | None = None, data: dict | None = None) -> dict:
    return {"success": success, "message": message, "data": data}


def envelope_response(
    success: bool,
    message: str | None = None,
    data: dict | None = None,
    status_code: int = 200,
) -> Response:
    return JSONResponse(envelope(success, message, data), status_code=status_code)


def _redirect(url: str) -> Response:
    return RedirectResponse(url=url, status_code=302)


def build_routes(flow: AuthorizationFlow) -> list[Route]:
    async def index_route(request: Request) -> Response:
        del request
        if not await flow.check_session():
            return _redirect("/login")
        return envelope_response(True, None, flow.tokens.as_dict())

    async def login_route(request: Request) -> Response:
        del request
        return _redirect(flow.begin_login())

    async def callback_route(request: Request) -> Response:
        params = request.query_params
        try:
            flow.handle_callback(
                state=params.get("state"),
                error=params.get("error"),
                code=params.get("code"),
            )
        except FlowError as error:
            return envelope_response(False, str(error), None, status_code=error.status_code)
        return _redirect("/access")

    async def access_route(request: Request) -> Response:
        del request
        await flow.exchange_code()
        return _redirect("/")

    async def refresh_route(request: Request) -> Response:
        del request
        await flow.refresh_token()
        return _redirect("/")

    return [
        Route("/", index_route, methods=["GET"]),
        Route("/login", login_route, methods=["GET"]),
        Route("/callback", callback_route, methods=["GET"]),
        Route("/access", access_route, methods=["GET"]),
        Route("/refresh", refresh_route, methods=["GET"]),
    ]

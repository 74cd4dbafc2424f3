"""
Permissive CORS handling. Every route answers OPTIONS with an empty 204
advertising its own methods.
"""

from __future__ import annotations

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.routing import APIRoute

ALLOWED_HEADERS = "Content-Type, Authorization"


def cors_headers(methods: list[str] | None = None) -> dict[str, str]:
    headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }
    if methods:
        headers["Access-Control-Allow-Methods"] = ", ".join(methods)
    return headers


def methods_by_path(*routers: APIRouter) -> dict[str, list[str]]:
    """Declared methods per route path (router prefixes included), plus OPTIONS."""
    collected: dict[str, set[str]] = {}
    for router in routers:
        for route in router.routes:
            if isinstance(route, APIRoute):
                collected.setdefault(route.path, set()).update(route.methods)
    return {path: sorted(methods | {"OPTIONS"}) for path, methods in collected.items()}


def _preflight_endpoint(methods: list[str]):
    headers = cors_headers(methods)

    def preflight() -> Response:
        return Response(status_code=204, headers=headers)

    return preflight


def preflight_router(*routers: APIRouter) -> APIRouter:
    """
    OPTIONS routes for every path of the given routers. Kept on a separate
    router so router-level dependencies (admin auth) do not apply.
    """
    preflight = APIRouter()
    for path, methods in methods_by_path(*routers).items():
        preflight.add_api_route(
            path,
            _preflight_endpoint(methods),
            methods=["OPTIONS"],
            status_code=204,
            response_class=Response,
            include_in_schema=False,
        )
    return preflight


def install_cors(app: FastAPI) -> None:
    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        response = await call_next(request)
        for name, value in cors_headers().items():
            response.headers.setdefault(name, value)
        return response

"""
Request gate: sends unauthenticated browser traffic to the login surface.
"""
import logging
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from .auth import extract_token, resolve_user, security

logger = logging.getLogger(__name__)

DOCS_ROUTES = ("/docs", "/redoc", "/openapi.json")


def matches_route(path: str, route: str) -> bool:
    return path == route or path.startswith(route.rstrip("/") + "/")


def is_public_route(path: str, public_routes) -> bool:
    return any(matches_route(path, route) for route in (*public_routes, *DOCS_ROUTES))


async def request_gate(request: Request, call_next):
    """Redirect anonymous page requests to login and signed-in users away from it"""
    settings = request.app.state.settings
    path = request.url.path

    # API handlers answer 401 themselves so JSON clients get a JSON error
    if matches_route(path, settings.api_prefix):
        return await call_next(request)

    credentials = await security(request)
    user = await resolve_user(request, extract_token(request, credentials))

    if is_public_route(path, settings.public_routes):
        if user is not None and path == settings.login_path:
            return RedirectResponse(url="/", status_code=307)
        return await call_next(request)

    if user is None:
        logger.info(f"Redirecting anonymous request for {path} to {settings.login_path}")
        query = urlencode({"callbackUrl": path})
        return RedirectResponse(url=f"{settings.login_path}?{query}", status_code=307)

    return await call_next(request)

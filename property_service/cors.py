from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send
from structlog import get_logger
from property_service.config import Settings

logger = get_logger()

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


def cors_options(settings: Settings) -> dict:
    """Keyword arguments for Starlette's CORSMiddleware."""
    return {
        "allow_origins": settings.allowed_origins,
        "allow_credentials": True,
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ["*"],
    }


class OriginPolicyMiddleware:
    """Reject requests from origins outside the allow-list before routing.

    Requests without an Origin header (curl, mobile apps, same-origin) pass.
    """

    def __init__(self, app: ASGIApp, allowed_origins: list[str]) -> None:
        self.app = app
        self.allowed_origins = set(allowed_origins)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if origin is None or origin in self.allowed_origins:
            await self.app(scope, receive, send)
            return

        logger.warning("Origin not allowed", origin=origin, path=scope.get("path"))
        response = JSONResponse(status_code=403, content={"error": f"Origin {origin} not allowed by CORS"})
        await response(scope, receive, send)

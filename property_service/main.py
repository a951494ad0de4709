from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from structlog import get_logger
from property_service.config import Settings
from property_service.cors import OriginPolicyMiddleware, cors_options
from property_service.errors import register_error_handlers
from property_service.logging_config import configure_logging
from property_service.routers import auth
from property_service.routers import properties
from property_service.services.supabase import SupabaseClient

logger = get_logger()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings are read once here and never change."""
    if settings is None:
        settings = Settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Property Listings Service")
    app.state.settings = settings
    app.state.supabase = SupabaseClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout=settings.REQUEST_TIMEOUT,
    )

    # Added last runs first: disallowed origins never reach CORS handling or routes
    app.add_middleware(CORSMiddleware, **cors_options(settings))
    app.add_middleware(OriginPolicyMiddleware, allowed_origins=settings.allowed_origins)
    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(properties.router)

    @app.get("/health")
    async def root_health():
        return "ok"

    logger.info("Application configured", allowed_origins=settings.allowed_origins)
    return app

from fastapi import HTTPException
from structlog import get_logger
from property_service.config import Settings
from property_service.services.supabase import SupabaseClient, SupabaseError

logger = get_logger()


async def send_login_link(supabase: SupabaseClient, settings: Settings, email: str | None) -> None:
    """Have Supabase send a magic link that lands on the dashboard.

    The link goes out by email from Supabase; it is never returned here.
    """
    if not email or not email.strip():
        raise HTTPException(status_code=400, detail="Email is required")
    try:
        await supabase.generate_magic_link(email.strip(), settings.login_redirect_url)
    except SupabaseError as e:
        logger.error("Magic link error", error=e.message, status_code=e.status_code)
        raise HTTPException(status_code=400, detail=e.message)
    logger.info("Sent magic link", redirect_to=settings.login_redirect_url)

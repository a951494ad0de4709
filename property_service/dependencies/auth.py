from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from structlog import get_logger
from property_service.dependencies.backend import get_supabase
from property_service.schemas.auth import AuthenticatedUser
from property_service.services.supabase import SupabaseClient, SupabaseError

# auto_error is off so a missing header gets our own 401 body instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)
logger = get_logger()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    supabase: SupabaseClient = Depends(get_supabase),
) -> AuthenticatedUser:
    """Resolve the bearer token to a user through Supabase auth.

    Missing or non-bearer headers, rejected tokens and failed lookups all
    end in 401; nothing downstream runs without an identity.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="No token provided")
    try:
        data = await supabase.get_user(credentials.credentials)
    except SupabaseError as e:
        if e.status_code is None:
            logger.error("Token lookup failed", error=e.message)
            raise HTTPException(status_code=401, detail="Unauthorized")
        logger.info("Rejected token", status_code=e.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")

    # Accept either {user: {...}} or a flat user object
    user = data.get("user", data) if isinstance(data, dict) else None
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return AuthenticatedUser(id=str(user["id"]), email=user.get("email"), role=user.get("role"))

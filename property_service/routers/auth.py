from fastapi import APIRouter, Depends
from typing import Optional
from property_service.config import Settings
from property_service.dependencies.backend import get_settings, get_supabase
from property_service.schemas.auth import LoginLinkRequest
from property_service.schemas.property import MessageResponse
from property_service.services.auth import send_login_link
from property_service.services.supabase import SupabaseClient

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/send-login-link", response_model=MessageResponse)
async def send_login_link_endpoint(
    data: Optional[LoginLinkRequest] = None,
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    await send_login_link(supabase, settings, data.email if data else None)
    return {"message": "Check your email for the magic link."}

from fastapi import Request
from property_service.config import Settings
from property_service.services.supabase import SupabaseClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_supabase(request: Request) -> SupabaseClient:
    return request.app.state.supabase

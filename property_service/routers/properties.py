from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional
from property_service.config import Settings
from property_service.dependencies.auth import get_current_user
from property_service.dependencies.backend import get_settings, get_supabase
from property_service.schemas.auth import AuthenticatedUser
from property_service.schemas.property import MessageResponse, PropertyCreatedResponse, PropertyResponse, PropertyUpdate
from property_service.services import properties as service
from property_service.services.supabase import SupabaseClient

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    return await service.list_properties(supabase, settings)


@router.post("", response_model=PropertyCreatedResponse)
async def create_property(
    title: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    lat: Optional[str] = Form(None),
    lng: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: AuthenticatedUser = Depends(get_current_user),
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    """Create a listing owned by the caller, with an optional image upload."""
    created = await service.create_property(supabase, settings, user, title, price, lat, lng, image)
    return {"message": "Property added", "property": created}


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: str,
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    return await service.get_property(supabase, settings, property_id)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str,
    data: PropertyUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    """Replace title and/or price. Other columns are left alone."""
    return await service.update_property(supabase, settings, user, property_id, data)


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    supabase: SupabaseClient = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    await service.delete_property(supabase, settings, user, property_id)
    return {"message": "Property deleted"}

import math
import time

from fastapi import HTTPException, UploadFile
from structlog import get_logger
from property_service.config import Settings
from property_service.schemas.auth import AuthenticatedUser
from property_service.schemas.property import PropertyUpdate
from property_service.services.supabase import SupabaseClient, SupabaseError

logger = get_logger()


def image_object_path(filename: str, now_ms: int | None = None) -> str:
    """Storage path for an upload: ``public/<epoch ms>.<original extension>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ext = filename.rsplit(".", 1)[-1]
    return f"public/{now_ms}.{ext}"


def _parse_number(field: str, value: str | None, cast):
    # Blank form fields are stored as null, same as missing ones
    if value is None or not value.strip():
        return None
    try:
        number = cast(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value!r}")
    if isinstance(number, float) and not math.isfinite(number):
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value!r}")
    return number


async def list_properties(supabase: SupabaseClient, settings: Settings) -> list[dict]:
    try:
        rows = await supabase.select(settings.PROPERTIES_TABLE)
    except SupabaseError as e:
        logger.error("Error fetching properties", error=e.message)
        raise HTTPException(status_code=500, detail=e.message)
    logger.info("Fetched properties", total_properties=len(rows))
    return rows


async def get_property(supabase: SupabaseClient, settings: Settings, property_id: str) -> dict:
    try:
        row = await supabase.select(settings.PROPERTIES_TABLE, filters={"id": property_id}, single=True)
    except SupabaseError as e:
        logger.info("Property lookup failed", property_id=property_id, error=e.message)
        raise HTTPException(status_code=404, detail="Property not found")
    return row


async def upload_image(supabase: SupabaseClient, settings: Settings, image: UploadFile) -> str:
    """Store the image and return its public URL."""
    path = image_object_path(image.filename)
    content = await image.read()
    try:
        await supabase.upload(
            settings.IMAGES_BUCKET,
            path,
            content,
            image.content_type or "application/octet-stream",
        )
    except SupabaseError as e:
        logger.error("Image upload failed", path=path, error=e.message)
        raise HTTPException(status_code=500, detail=f"Image upload failed: {e.message}")
    logger.info("Uploaded property image", path=path, size=len(content))
    return supabase.public_url(settings.IMAGES_BUCKET, path)


async def create_property(
    supabase: SupabaseClient,
    settings: Settings,
    user: AuthenticatedUser,
    title: str | None,
    price: str | None,
    lat: str | None,
    lng: str | None,
    image: UploadFile | None = None,
) -> dict:
    new_property = {
        "user_id": user.id,
        "title": title,
        "price": _parse_number("price", price, int),
        "image_url": "",
        "lat": _parse_number("lat", lat, float),
        "lng": _parse_number("lng", lng, float),
    }
    if image is not None and image.filename:
        new_property["image_url"] = await upload_image(supabase, settings, image)

    try:
        rows = await supabase.insert(settings.PROPERTIES_TABLE, [new_property])
    except SupabaseError as e:
        logger.error("Error creating property", user_id=user.id, error=e.message)
        raise HTTPException(status_code=500, detail=e.message)
    created = rows[0]
    logger.info("Created property", property_id=created.get("id"), user_id=user.id)
    return created


async def require_owner(
    supabase: SupabaseClient, settings: Settings, property_id: str, user: AuthenticatedUser, action: str = "modify"
) -> None:
    try:
        existing = await supabase.select(
            settings.PROPERTIES_TABLE, columns="user_id", filters={"id": property_id}, single=True
        )
    except SupabaseError:
        raise HTTPException(status_code=404, detail="Property not found")
    if not existing:
        raise HTTPException(status_code=404, detail="Property not found")
    if str(existing.get("user_id")) != user.id:
        logger.warning("Ownership check failed", property_id=property_id, user_id=user.id)
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this property")


async def update_property(
    supabase: SupabaseClient,
    settings: Settings,
    user: AuthenticatedUser,
    property_id: str,
    data: PropertyUpdate,
) -> dict:
    values = data.model_dump(exclude_unset=True)
    if not values:
        raise HTTPException(status_code=400, detail="Nothing to update")
    if settings.ENFORCE_UPDATE_OWNERSHIP:
        await require_owner(supabase, settings, property_id, user, action="update")
    else:
        logger.warning("Updating property without ownership check", property_id=property_id, user_id=user.id)

    try:
        rows = await supabase.update(settings.PROPERTIES_TABLE, values, {"id": property_id})
    except SupabaseError as e:
        logger.error("Error updating property", property_id=property_id, error=e.message)
        raise HTTPException(status_code=500, detail=e.message)
    if not rows:
        raise HTTPException(status_code=404, detail="Property not found")
    logger.info("Updated property", property_id=property_id, user_id=user.id, fields=sorted(values))
    return rows[0]


async def delete_property(supabase: SupabaseClient, settings: Settings, user: AuthenticatedUser, property_id: str) -> None:
    # The check and the delete are two calls; an ownership change in between goes unnoticed.
    await require_owner(supabase, settings, property_id, user, action="delete")

    try:
        await supabase.delete(settings.PROPERTIES_TABLE, {"id": property_id})
    except SupabaseError as e:
        logger.error("Error deleting property", property_id=property_id, error=e.message)
        raise HTTPException(status_code=500, detail=e.message)
    logger.info("Deleted property", property_id=property_id, user_id=user.id)

from pydantic import BaseModel, ConfigDict
from typing import Optional, Union


class PropertyResponse(BaseModel):
    # Columns we don't model (created_at, ...) are passed through as-is.
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    user_id: Optional[str] = None
    title: Optional[str] = None
    price: Optional[int] = None
    image_url: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class PropertyCreatedResponse(BaseModel):
    message: str
    property: PropertyResponse


class PropertyUpdate(BaseModel):
    title: Optional[str] = None
    price: Optional[int] = None


class MessageResponse(BaseModel):
    message: str

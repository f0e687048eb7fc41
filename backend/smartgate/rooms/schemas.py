"""Pydantic schemas for the room reservation endpoints."""
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRoomResponse(BaseModel):
    """Response of ``GET /api/register``."""
    roomId: str = Field(..., description="Generated and reserved room ID")
    name: str = Field(..., description="Slug the room ID was derived from")


class ReserveRoomRequest(BaseModel):
    """Request body of ``POST /api/reserve``."""
    roomId: Optional[str] = Field(default=None, description="Room ID to reserve")


class ReserveRoomResponse(BaseModel):
    ok: bool = True
    roomId: str

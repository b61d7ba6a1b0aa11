"""Inventory reservation models for the mock backend"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReservationStatus(str, Enum):
    RESERVED = "reserved"
    RELEASED = "released"
    COMMITTED = "committed"
    EXPIRED = "expired"


class LineItem(BaseModel):
    product_id: str
    shade_id: Optional[str] = None
    quantity: int = Field(ge=1)


class Reservation(BaseModel):
    """Stock held for one holder until it is committed, released or expires"""
    ticket_id: str
    holder_id: str
    reservation_key: Optional[str] = None
    items: list[LineItem]
    status: ReservationStatus = ReservationStatus.RESERVED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime
    release_reason: Optional[str] = None


class ReserveFailure(BaseModel):
    product_id: str
    shade_id: Optional[str] = None
    requested: int
    available: int = 0
    reason: str = "insufficient_stock"


class ReserveRequest(BaseModel):
    items: list[LineItem] = Field(min_length=1)
    holder_id: str
    reservation_key: Optional[str] = None
    ttl_minutes: int = Field(default=15, ge=1)


class ReserveResponse(BaseModel):
    success: bool
    ticket_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    items: list[LineItem] = Field(default_factory=list)
    failures: list[ReserveFailure] = Field(default_factory=list)


class ReleaseRequest(BaseModel):
    """Release by ticket id, or by the reservation key the hold was created under"""
    holder_id: str
    reason: str
    ticket_id: Optional[str] = None
    reservation_key: Optional[str] = None
    items: list[LineItem] = Field(default_factory=list)


class CommitRequest(BaseModel):
    ticket_id: str


class AckResponse(BaseModel):
    ok: bool
    detail: Optional[str] = None


class StockLevel(BaseModel):
    product_id: str
    shade_id: Optional[str] = None
    on_hand: int
    reserved: int
    available: int

"""Inventory API routes for the mock backend"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..config import mock_settings
from ..database.inventory import inventory_db
from ..models.inventory import (
    AckResponse,
    CommitRequest,
    ReleaseRequest,
    Reservation,
    ReserveRequest,
    ReserveResponse,
    StockLevel,
)

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


@router.post("/reserve", response_model=ReserveResponse)
async def reserve(request: ReserveRequest):
    """
    Hold stock for every line, or none.

    Running out of stock is a normal answer (``success: false`` with
    per-line failures), not an HTTP error.
    """
    ttl = min(request.ttl_minutes, mock_settings.max_reservation_ttl_minutes)
    reservation, failures = inventory_db.reserve(
        request.items,
        request.holder_id,
        ttl_minutes=ttl,
        reservation_key=request.reservation_key,
    )
    if reservation is None:
        return ReserveResponse(success=False, failures=failures)

    return ReserveResponse(
        success=True,
        ticket_id=reservation.ticket_id,
        expires_at=reservation.expires_at,
        items=reservation.items,
    )


@router.post("/release", response_model=AckResponse)
async def release(request: ReleaseRequest):
    """Release a hold; ``ok`` is false when there was nothing live to release"""
    released = inventory_db.release(
        request.holder_id,
        request.reason,
        ticket_id=request.ticket_id,
        reservation_key=request.reservation_key,
    )
    return AckResponse(ok=released > 0, detail=f"{released} reservations released")


@router.post("/commit", response_model=AckResponse)
async def commit(request: CommitRequest):
    """Convert a live hold into sold stock"""
    if inventory_db.commit(request.ticket_id):
        return AckResponse(ok=True)
    return AckResponse(ok=False, detail="Reservation is not held")


@router.get("/reservations/{ticket_id}", response_model=Reservation)
async def get_reservation(ticket_id: str):
    reservation = inventory_db.get_reservation(ticket_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


@router.get("/{product_id}", response_model=StockLevel)
async def get_stock(product_id: str, shade_id: Optional[str] = Query(None)):
    """On-hand, reserved and available units"""
    stock = inventory_db.get_stock(product_id, shade_id)
    if not stock:
        raise HTTPException(status_code=404, detail="Product not found")
    return stock

"""
Inventory API Client

Reserve / release / commit calls against the inventory service. Stock counts
live only in that service; nothing here caches them.
"""

import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..core.errors import ContractViolationError, MalformedResponseError
from ..models.reservation import ReservationFailure, ReservationItem, ReservationTicket
from .base_client import ServiceClient

logger = logging.getLogger(__name__)


class ReserveResponse(BaseModel):
    success: bool
    ticket_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    items: list[ReservationItem] = Field(default_factory=list)
    failures: list[ReservationFailure] = Field(default_factory=list)


class ReserveOutcome(BaseModel):
    """Result of a reservation attempt: a ticket, or why there is none"""
    success: bool
    ticket: Optional[ReservationTicket] = None
    failures: list[ReservationFailure] = Field(default_factory=list)


class AckResponse(BaseModel):
    ok: bool
    detail: Optional[str] = None


class Availability(BaseModel):
    product_id: str
    shade_id: Optional[str] = None
    on_hand: int
    reserved: int
    available: int


class InventoryClient(ServiceClient):
    """Client for the inventory reservation API"""

    service_name = "inventory"

    async def reserve(
        self,
        items: list[dict],
        holder_id: str,
        reservation_key: str,
        ttl_minutes: int = 15,
    ) -> ReserveOutcome:
        """
        Reserve every line for the holder, all or nothing.

        ``reservation_key`` makes a retried request return the original
        ticket instead of reserving twice.
        """
        data = await self._request(
            "POST",
            "/api/inventory/reserve",
            body={
                "items": items,
                "holder_id": holder_id,
                "reservation_key": reservation_key,
                "ttl_minutes": ttl_minutes,
            },
        )
        response = self._parse(ReserveResponse, data)

        if not response.success:
            logger.info(
                f"Reservation refused for {holder_id}: "
                f"{[f.product_id for f in response.failures]}"
            )
            return ReserveOutcome(success=False, failures=response.failures)

        if not response.ticket_id or not response.expires_at:
            logger.error(f"Reservation for {holder_id} succeeded without a ticket")
            raise MalformedResponseError(service=self.service_name)

        ticket = ReservationTicket(
            ticket_id=response.ticket_id,
            items=response.items or [ReservationItem(**item) for item in items],
            holder_id=holder_id,
            expires_at=response.expires_at,
        )
        return ReserveOutcome(success=True, ticket=ticket)

    async def release(
        self,
        items: list[dict],
        holder_id: str,
        reason: str,
        ticket_id: Optional[str] = None,
        reservation_key: Optional[str] = None,
    ) -> bool:
        """
        Release one hold, named by its ticket id or by the reservation key it
        was requested under. True when the service released something.
        """
        if not ticket_id and not reservation_key:
            raise ContractViolationError(f"Release for {holder_id} names no ticket or reservation key")

        body = {"items": items, "holder_id": holder_id, "reason": reason}
        if ticket_id:
            body["ticket_id"] = ticket_id
        if reservation_key:
            body["reservation_key"] = reservation_key
        data = await self._request("POST", "/api/inventory/release", body=body)
        return self._parse(AckResponse, data).ok

    async def commit(self, ticket_id: str) -> bool:
        """Convert a held reservation into sold stock"""
        data = await self._request(
            "POST",
            "/api/inventory/commit",
            body={"ticket_id": ticket_id},
        )
        return self._parse(AckResponse, data).ok

    async def get_availability(self, product_id: str, shade_id: Optional[str] = None) -> Availability:
        """Current on-hand / reserved / available counts"""
        params = {"shade_id": shade_id} if shade_id else None
        data = await self._request("GET", f"/api/inventory/{product_id}", params=params)
        return self._parse(Availability, data)

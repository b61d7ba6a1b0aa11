"""Inventory reservation models"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..core.errors import ContractViolationError


class TicketStatus(str, Enum):
    RESERVED = "reserved"
    RELEASED = "released"
    COMMITTED = "committed"


class ReservationItem(BaseModel):
    """One product/shade quantity held by a reservation"""
    product_id: str
    shade_id: Optional[str] = None
    quantity: int = Field(ge=1)


class ReservationFailure(BaseModel):
    """Why one line could not be reserved"""
    product_id: str
    shade_id: Optional[str] = None
    requested: int
    available: int = 0
    reason: str = "insufficient_stock"


class ReservationTicket(BaseModel):
    """
    A hold on inventory for one checkout attempt.

    While RESERVED the quantities are deducted from available stock. The
    ticket ends either RELEASED (unwound) or COMMITTED (order placed); both
    are terminal.
    """
    ticket_id: str
    items: list[ReservationItem]
    holder_id: str
    status: TicketStatus = TicketStatus.RESERVED
    expires_at: datetime
    release_reason: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def mark_released(self, reason: str) -> None:
        if self.status == TicketStatus.COMMITTED:
            raise ContractViolationError(f"Ticket {self.ticket_id} is committed and cannot be released")
        self.status = TicketStatus.RELEASED
        self.release_reason = reason

    def mark_committed(self) -> None:
        if self.status != TicketStatus.RESERVED:
            raise ContractViolationError(
                f"Ticket {self.ticket_id} is {self.status.value}; only reserved tickets commit"
            )
        self.status = TicketStatus.COMMITTED

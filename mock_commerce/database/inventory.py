"""
Mock inventory with reservations

Stock is held per product/shade. A reservation deducts from available stock
until it is committed (on-hand goes down for good), released, or reaches its
expiry. Expired holds are reaped lazily at the start of every operation.

All operations are synchronous, so each one is atomic on the event loop.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..models.inventory import LineItem, Reservation, ReservationStatus, ReserveFailure, StockLevel
from .products import ProductDatabase, product_db

logger = logging.getLogger(__name__)

StockKey = tuple[str, str]


class InventoryDatabase:
    """In-memory stock and reservation storage"""

    def __init__(self, products: ProductDatabase):
        self.products = products
        self.reset()

    def reset(self) -> None:
        """Restore catalog stock and drop every reservation"""
        self.on_hand: dict[StockKey, int] = self.products.initial_stock()
        self.reservations: dict[str, Reservation] = {}
        self.reservation_keys: dict[str, str] = {}

    def set_stock(self, product_id: str, shade_id: Optional[str], on_hand: int) -> None:
        key = self._resolve(product_id, shade_id)
        if key is None:
            raise KeyError(f"Unknown product/shade {product_id}/{shade_id}")
        self.on_hand[key] = on_hand

    def _resolve(self, product_id: str, shade_id: Optional[str]) -> Optional[StockKey]:
        """Stock key for a line; a missing shade means the product's first shade"""
        product = self.products.get_product(product_id)
        if not product:
            return None
        if shade_id is None:
            return product_id, product.default_shade_id()
        if not product.has_shade(shade_id):
            return None
        return product_id, shade_id

    def _reserved(self, key: StockKey) -> int:
        total = 0
        for reservation in self.reservations.values():
            if reservation.status != ReservationStatus.RESERVED:
                continue
            for item in reservation.items:
                if self._resolve(item.product_id, item.shade_id) == key:
                    total += item.quantity
        return total

    def available(self, key: StockKey) -> int:
        return max(0, self.on_hand.get(key, 0) - self._reserved(key))

    def reap_expired(self, now: Optional[datetime] = None) -> int:
        """Expire holds past their expiry; returns how many were reaped"""
        now = now or datetime.now(timezone.utc)
        reaped = 0
        for reservation in self.reservations.values():
            if reservation.status == ReservationStatus.RESERVED and now >= reservation.expires_at:
                reservation.status = ReservationStatus.EXPIRED
                reservation.release_reason = "expired"
                reaped += 1
        if reaped:
            logger.info(f"Reaped {reaped} expired reservations")
        return reaped

    # ==================== Operations ====================

    def reserve(
        self,
        items: list[LineItem],
        holder_id: str,
        ttl_minutes: int,
        reservation_key: Optional[str] = None,
    ) -> tuple[Optional[Reservation], list[ReserveFailure]]:
        """
        Hold every line or none of them.

        A request repeating a known ``reservation_key`` gets the original
        reservation back while it is still held.
        """
        self.reap_expired()

        if reservation_key and reservation_key in self.reservation_keys:
            existing = self.reservations[self.reservation_keys[reservation_key]]
            if existing.status == ReservationStatus.RESERVED and existing.holder_id == holder_id:
                logger.info(f"Reservation key {reservation_key} replayed; returning {existing.ticket_id}")
                return existing, []

        requested: dict[StockKey, int] = defaultdict(int)
        failures: list[ReserveFailure] = []
        for item in items:
            key = self._resolve(item.product_id, item.shade_id)
            if key is None:
                failures.append(ReserveFailure(
                    product_id=item.product_id,
                    shade_id=item.shade_id,
                    requested=item.quantity,
                    reason="unknown_product",
                ))
                continue
            requested[key] += item.quantity

        for (product_id, shade_id), quantity in requested.items():
            available = self.available((product_id, shade_id))
            if available < quantity:
                failures.append(ReserveFailure(
                    product_id=product_id,
                    shade_id=shade_id,
                    requested=quantity,
                    available=available,
                ))

        if failures:
            logger.info(f"Reservation for {holder_id} refused: {len(failures)} lines short")
            return None, failures

        now = datetime.now(timezone.utc)
        reservation = Reservation(
            ticket_id=f"res_{uuid.uuid4().hex[:16]}",
            holder_id=holder_id,
            reservation_key=reservation_key,
            items=[
                LineItem(product_id=product_id, shade_id=shade_id, quantity=quantity)
                for (product_id, shade_id), quantity in requested.items()
            ],
            created_at=now,
            expires_at=now + timedelta(minutes=ttl_minutes),
        )
        self.reservations[reservation.ticket_id] = reservation
        if reservation_key:
            self.reservation_keys[reservation_key] = reservation.ticket_id

        logger.info(f"Reserved {reservation.ticket_id} for {holder_id} until {reservation.expires_at.isoformat()}")
        return reservation, []

    def release(
        self,
        holder_id: str,
        reason: str,
        ticket_id: Optional[str] = None,
        reservation_key: Optional[str] = None,
    ) -> int:
        """
        Release the hold named by ticket id or by the reservation key it was
        created under; returns the count released.

        A holder may have several checkouts open, so there is no holder-wide
        release: without a ticket id or key nothing is released.
        """
        self.reap_expired()

        if not ticket_id and reservation_key:
            ticket_id = self.reservation_keys.get(reservation_key)
        reservation = self.reservations.get(ticket_id) if ticket_id else None
        candidates = [reservation] if reservation and reservation.holder_id == holder_id else []

        released = 0
        for reservation in candidates:
            if reservation.status != ReservationStatus.RESERVED:
                continue
            reservation.status = ReservationStatus.RELEASED
            reservation.release_reason = reason
            released += 1
            logger.info(f"Released {reservation.ticket_id} for {holder_id} ({reason})")
        return released

    def commit(self, ticket_id: str) -> bool:
        """Turn a live hold into sold stock; repeating a commit is a no-op"""
        self.reap_expired()

        reservation = self.reservations.get(ticket_id)
        if not reservation:
            return False
        if reservation.status == ReservationStatus.COMMITTED:
            return True
        if reservation.status != ReservationStatus.RESERVED:
            logger.info(f"Commit refused for {ticket_id}: {reservation.status.value}")
            return False

        for item in reservation.items:
            key = self._resolve(item.product_id, item.shade_id)
            self.on_hand[key] -= item.quantity
        reservation.status = ReservationStatus.COMMITTED
        logger.info(f"Committed {ticket_id}")
        return True

    def get_stock(self, product_id: str, shade_id: Optional[str] = None) -> Optional[StockLevel]:
        self.reap_expired()

        key = self._resolve(product_id, shade_id)
        if key is None:
            return None
        reserved = self._reserved(key)
        on_hand = self.on_hand.get(key, 0)
        return StockLevel(
            product_id=key[0],
            shade_id=key[1],
            on_hand=on_hand,
            reserved=reserved,
            available=max(0, on_hand - reserved),
        )

    def get_reservation(self, ticket_id: str) -> Optional[Reservation]:
        return self.reservations.get(ticket_id)


# Singleton instance
inventory_db = InventoryDatabase(product_db)

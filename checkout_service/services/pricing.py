"""
Pricing Accumulator

Rebuilds subtotal, shipping and tax from the session inputs. Every call
produces a fresh PricingBreakdown; nothing is patched incrementally.
"""

import logging
from typing import Optional

from ..core.errors import PricingError, ServiceUnavailableError, ShippingRateNotOfferedError
from ..models.cart import CartSnapshot
from ..models.checkout import Address, PricingBreakdown, ShippingRate
from ..models.money import ZERO
from .shipping_client import ShippingTaxClient

logger = logging.getLogger(__name__)


class PricingAccumulator:
    """Computes the running total fed to the payment step"""

    def __init__(self, shipping_client: ShippingTaxClient, currency: str = "USD"):
        self.shipping = shipping_client
        self.currency = currency

    async def quote_rates(self, address: Address) -> list[ShippingRate]:
        """Shipping options for an address"""
        try:
            return await self.shipping.get_rates(address)
        except ServiceUnavailableError as e:
            logger.warning(f"Shipping rates unavailable: {e.to_dict()}")
            raise PricingError() from e

    async def recompute(
        self,
        snapshot: CartSnapshot,
        address: Address,
        rate: Optional[ShippingRate],
    ) -> PricingBreakdown:
        """
        Price a snapshot for an address and shipping rate.

        The subtotal comes from the snapshot, never the live cart. Shipping
        is zero until a rate is chosen. Tax is whatever the tax service
        returns for the subtotal plus shipping.
        """
        subtotal = snapshot.subtotal
        shipping_cost = rate.amount if rate else ZERO

        try:
            tax = await self.shipping.calculate_tax(address, subtotal + shipping_cost)
        except ServiceUnavailableError as e:
            logger.warning(f"Tax calculation unavailable: {e.to_dict()}")
            raise PricingError() from e

        pricing = PricingBreakdown.build(
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            currency=snapshot.currency or self.currency,
            shipping_rate_id=rate.id if rate else None,
            address_fingerprint=address.fingerprint(),
        )
        logger.debug(
            f"Priced {snapshot.item_count} items: subtotal={pricing.subtotal} "
            f"shipping={pricing.shipping_cost} tax={pricing.tax} total={pricing.total}"
        )
        return pricing

    async def price_shipping(
        self,
        snapshot: CartSnapshot,
        address: Address,
        rate_id: str,
    ) -> tuple[PricingBreakdown, list[ShippingRate]]:
        """
        Re-quote rates for the finalized address and price the selected one.

        Returns the breakdown together with the fresh quotes.
        """
        rates = await self.quote_rates(address)
        rate = next((r for r in rates if r.id == rate_id), None)
        if rate is None:
            raise ShippingRateNotOfferedError(rate_id=rate_id)

        return await self.recompute(snapshot, address, rate), rates

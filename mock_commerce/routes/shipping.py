"""Shipping rate and tax routes for the mock backend"""

from fastapi import APIRouter

from ..database.shipping import shipping_db
from ..models.shipping import RatesRequest, RatesResponse, TaxRequest, TaxResponse

shipping_router = APIRouter(prefix="/api/shipping", tags=["Shipping"])
tax_router = APIRouter(prefix="/api/tax", tags=["Tax"])


@shipping_router.post("/rates", response_model=RatesResponse)
async def get_rates(request: RatesRequest):
    """Shipping options for an address"""
    return RatesResponse(shipping_rates=shipping_db.quote_rates(request.address))


@tax_router.post("/calculate", response_model=TaxResponse)
async def calculate_tax(request: TaxRequest):
    """Sales tax in cents for an amount in cents"""
    tax, rate = shipping_db.calculate_tax(request.address, request.amount)
    return TaxResponse(
        tax=tax,
        rate=str(rate),
        jurisdiction=f"{request.address.country.upper()}-{request.address.state.strip().upper()}",
    )

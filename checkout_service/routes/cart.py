"""Cart API routes for the storefront"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.errors import CheckoutError
from ..models import Cart, CartLineItem
from ..services.orchestrator import CheckoutOrchestrator
from .checkout import get_orchestrator, to_http_exception

router = APIRouter(prefix="/api/cart", tags=["Cart"])


class AddToCartRequest(BaseModel):
    """Request to add item to cart; price and name come from the storefront catalog"""
    product_id: str
    product_name: str = ""
    shade_id: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity; 0 removes the line"""
    quantity: int = Field(ge=0)
    shade_id: Optional[str] = None


class CartResponse(BaseModel):
    cart: Cart
    subtotal: Decimal
    message: Optional[str] = None

    @classmethod
    def for_cart(cls, cart: Cart, message: Optional[str] = None) -> "CartResponse":
        return cls(cart=cart, subtotal=cart.subtotal, message=message)


@router.post("", response_model=CartResponse, status_code=201)
async def create_cart(checkout: CheckoutOrchestrator = Depends(get_orchestrator)):
    """Create a new shopping cart"""
    cart = checkout.carts.create_cart(currency=checkout.settings.currency)
    return CartResponse.for_cart(cart, message="Cart created")


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, checkout: CheckoutOrchestrator = Depends(get_orchestrator)):
    """Get cart by ID"""
    try:
        cart = checkout.carts.require_cart(cart_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return CartResponse.for_cart(cart)


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_to_cart(
    cart_id: str,
    request: AddToCartRequest,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Add an item to the cart"""
    item = CartLineItem(
        product_id=request.product_id,
        product_name=request.product_name,
        shade_id=request.shade_id,
        quantity=request.quantity,
        unit_price=request.unit_price,
    )
    try:
        cart = checkout.carts.add_item(cart_id, item)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    return CartResponse.for_cart(cart, message=f"Added {request.quantity}x {request.product_name or request.product_id} to cart")


@router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    cart_id: str,
    product_id: str,
    request: UpdateCartItemRequest,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Update item quantity in cart"""
    try:
        cart = checkout.carts.update_item_quantity(cart_id, product_id, request.quantity, request.shade_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    if not cart:
        raise HTTPException(status_code=404, detail="Item not in cart")
    return CartResponse.for_cart(cart, message="Cart updated")


@router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    cart_id: str,
    product_id: str,
    shade_id: Optional[str] = None,
    checkout: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """Remove an item from the cart"""
    try:
        cart = checkout.carts.update_item_quantity(cart_id, product_id, 0, shade_id)
    except CheckoutError as e:
        raise to_http_exception(e) from e
    if not cart:
        raise HTTPException(status_code=404, detail="Item not in cart")
    return CartResponse.for_cart(cart, message="Item removed")

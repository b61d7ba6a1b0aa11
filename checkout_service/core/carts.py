"""Live cart storage for the checkout service"""

from typing import Optional

from ..models.cart import Cart, CartLineItem
from .errors import CartNotFoundError


class CartStore:
    """In-memory cart storage"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}

    def create_cart(self, currency: str = "USD") -> Cart:
        """Create a new cart"""
        cart = Cart(currency=currency)
        self.carts[cart.cart_id] = cart
        return cart

    def get_cart(self, cart_id: str) -> Optional[Cart]:
        """Get a cart by ID"""
        return self.carts.get(cart_id)

    def require_cart(self, cart_id: str) -> Cart:
        cart = self.get_cart(cart_id)
        if not cart:
            raise CartNotFoundError(cart_id=cart_id)
        return cart

    def add_item(self, cart_id: str, item: CartLineItem) -> Cart:
        """Add an item to the cart"""
        cart = self.require_cart(cart_id)
        cart.add_item(item)
        return cart

    def update_item_quantity(
        self,
        cart_id: str,
        product_id: str,
        quantity: int,
        shade_id: Optional[str] = None,
    ) -> Optional[Cart]:
        """Update item quantity in cart; None when the line is not in the cart"""
        cart = self.require_cart(cart_id)
        if not cart.update_quantity(product_id, quantity, shade_id):
            return None
        return cart

    def clear_cart(self, cart_id: str) -> Optional[Cart]:
        """Clear all items from cart"""
        cart = self.get_cart(cart_id)
        if not cart:
            return None
        cart.clear()
        return cart

    def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart"""
        if cart_id in self.carts:
            del self.carts[cart_id]
            return True
        return False

"""Mock product database"""

from decimal import Decimal
from typing import Optional

from ..models.product import Product, Shade

# Veloura catalog
PRODUCTS: dict[str, Product] = {
    "velvet-rose": Product(
        id="velvet-rose",
        name="Velvet Rose",
        description="Luxurious rose-tinted gloss with a velvet finish.",
        price=Decimal("28.00"),
        sku="VEL-LG-VR",
        shades=[
            Shade(id="velvet-rose-01", name="Velvet Rose", hex_code="#D4506B", description="Classic rose with velvet finish"),
            Shade(id="velvet-rose-02", name="Deep Rose", hex_code="#B8374D", description="Deeper rose for evening wear"),
        ],
    ),
    "golden-hour": Product(
        id="golden-hour",
        name="Golden Hour",
        description="Warm golden nude with a luminous shine.",
        price=Decimal("28.00"),
        sku="VEL-LG-GH",
        shades=[
            Shade(id="golden-hour-01", name="Golden Hour", hex_code="#E6A867", description="Warm golden nude"),
            Shade(id="golden-hour-02", name="Sunset Glow", hex_code="#D4956B", description="Deeper sunset-inspired shade"),
        ],
    ),
    "midnight-berry": Product(
        id="midnight-berry",
        name="Midnight Berry",
        description="Rich berry gloss for after dark.",
        price=Decimal("28.00"),
        sku="VEL-LG-MB",
        shades=[
            Shade(id="midnight-berry-01", name="Midnight Berry", hex_code="#8B2F47", description="Rich midnight berry"),
        ],
    ),
    "crystal-clear": Product(
        id="crystal-clear",
        name="Crystal Clear",
        description="High-shine clear gloss that layers over any shade.",
        price=Decimal("25.00"),
        sku="VEL-LG-CC",
        shades=[
            Shade(id="crystal-clear-01", name="Crystal Clear", hex_code="transparent", description="Crystal clear with high shine"),
        ],
    ),
    "rouge-noir": Product(
        id="rouge-noir",
        name="Rouge Noir",
        description="Limited edition deep red with black undertones.",
        price=Decimal("35.00"),
        sku="VEL-LG-RN",
        shades=[
            Shade(id="rouge-noir-01", name="Rouge Noir", hex_code="#8B0000", description="Deep red with black undertones"),
        ],
    ),
    "ruby-velvet": Product(
        id="ruby-velvet",
        name="Ruby Velvet",
        description="Jewel-toned ruby with a soft velvet finish.",
        price=Decimal("28.00"),
        sku="VEL-LG-RV",
        shades=[
            Shade(id="ruby-velvet-01", name="Ruby Velvet", hex_code="#9B111E", description="Jewel-toned ruby"),
        ],
    ),
}

# Units on hand per product, split evenly across its shades
STOCK_LEVELS: dict[str, int] = {
    "velvet-rose": 150,
    "golden-hour": 200,
    "midnight-berry": 75,
    "crystal-clear": 300,
    "rouge-noir": 25,
    "ruby-velvet": 120,
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self):
        self.products = PRODUCTS.copy()

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def search_products(
        self,
        query: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """Search products with filters"""
        results = list(self.products.values())

        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower()
                or query_lower in p.description.lower()
                or any(query_lower in s.name.lower() for s in p.shades)
            ]

        if min_price is not None:
            results = [p for p in results if p.price >= min_price]

        if max_price is not None:
            results = [p for p in results if p.price <= max_price]

        total = len(results)
        return results[offset:offset + limit], total

    def initial_stock(self) -> dict[tuple[str, str], int]:
        """Starting on-hand quantity for every product/shade"""
        stock = {}
        for product_id, level in STOCK_LEVELS.items():
            shades = self.products[product_id].shades
            per_shade, remainder = divmod(level, len(shades))
            for index, shade in enumerate(shades):
                stock[(product_id, shade.id)] = per_shade + (1 if index < remainder else 0)
        return stock


# Singleton instance
product_db = ProductDatabase()

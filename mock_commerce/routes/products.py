"""Product API routes for the mock backend"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..database.products import product_db
from ..models.product import Product, ProductSearchResponse

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    query: Optional[str] = Query(None, description="Search query"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    limit: int = Query(20, ge=1, le=100, description="Max results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
):
    """Search products in the catalog"""
    products, total = product_db.search_products(
        query=query,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
        offset=offset,
    )

    return ProductSearchResponse(
        products=products,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str):
    """Get product details by ID"""
    product = product_db.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

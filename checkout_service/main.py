"""
Checkout Service Application

Veloura storefront checkout: carts, the checkout wizard and order placement
over the inventory, payment, shipping/tax, analytics and loyalty services.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv()

from .core.config import settings
from .routes import cart_router, checkout_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Checkout service starting up...")
    logger.info(f"Inventory URL: {settings.inventory_base_url}")
    logger.info(f"Payments URL: {settings.payments_base_url}")
    logger.info(f"Shipping/tax URL: {settings.shipping_base_url}")

    yield

    logger.info("Checkout service shutting down...")
    from .routes.checkout import orchestrator
    if orchestrator:
        orchestrator.cleanup()
        await orchestrator.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Checkout orchestration for the Veloura storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(cart_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    return {
        "message": "Veloura Checkout API",
        "docs": "/docs",
        "endpoints": {
            "cart": "/api/cart",
            "checkout": "/api/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "checkout",
        "inventory_configured": bool(settings.inventory_base_url),
        "payments_configured": bool(settings.payments_base_url),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "checkout_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

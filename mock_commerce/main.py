"""
Mock Commerce Application

A simulated commerce backend for developing and testing the checkout
service: catalog, inventory reservations, payments, shipping rates and
tax, analytics collection and loyalty points, all in memory.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv()

from .config import mock_settings
from .routes import (
    analytics_router,
    inventory_router,
    loyalty_router,
    payments_router,
    products_router,
    shipping_router,
    tax_router,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if mock_settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock commerce backend starting up...")
    logger.info(f"Declining payment method: {mock_settings.decline_payment_method}")
    yield
    logger.info("Mock commerce backend shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Mock Commerce",
    description="Simulated inventory, payment, shipping and tax services for Veloura checkout",
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

# Include API routers
app.include_router(products_router)
app.include_router(inventory_router)
app.include_router(payments_router)
app.include_router(shipping_router)
app.include_router(tax_router)
app.include_router(analytics_router)
app.include_router(loyalty_router)


@app.get("/")
async def home():
    return {
        "message": "Mock Commerce API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "inventory": "/api/inventory",
            "payments": "/api/payments",
            "shipping": "/api/shipping",
            "tax": "/api/tax",
            "analytics": "/api/analytics",
            "loyalty": "/api/loyalty",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-commerce"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mock_commerce.main:app",
        host=mock_settings.host,
        port=mock_settings.port,
        reload=mock_settings.debug,
    )

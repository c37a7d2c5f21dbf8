"""
Storefront Cart API - Main FastAPI Application

Single entry point for the cart endpoints, deployable as one serverless
function.
"""
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.logging import configure_logging
from storefront.routers import cart_router

configure_logging()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


app = FastAPI(
    title="Storefront Cart API",
    description="Session shopping cart for the storefront",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart_router)


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront-cart"}

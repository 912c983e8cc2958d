"""Routes API / API routes."""

from fastapi import APIRouter

from carrental.api import auth, bookings, cart, catalog, listings

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(listings.router, prefix="/listings", tags=["listings"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(cart.router, prefix="/cart", tags=["cart"])

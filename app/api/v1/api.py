"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import admin, auth, bookings, health, rooms

api_router = APIRouter()

# Auth (register, login, logout, profile)
api_router.include_router(auth.router)

# Public room catalogue
api_router.include_router(rooms.router)

# Guest bookings
api_router.include_router(bookings.router)

# Admin dashboard, rooms, bookings
api_router.include_router(admin.router)

# Health
api_router.include_router(health.router)

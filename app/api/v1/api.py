"""
API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, inspections, users

api_router = APIRouter()

# Auth (login, register, profile)
api_router.include_router(auth.router)

# Inspection records
api_router.include_router(inspections.router)

# Roster & task assignment
api_router.include_router(users.router)

"""
Main API Router Aggregator

Collects all v1 endpoint routers and mounts them
under a common prefix.
"""

from fastapi import APIRouter

from iqx.api.v1.companies import router as companies_router

# Main v1 router
api_router = APIRouter()

api_router.include_router(
    companies_router,
    prefix="/companies",
    tags=["Companies"],
)

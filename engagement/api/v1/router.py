"""Main API router aggregating all v1 routes."""

from fastapi import APIRouter

from engagement.api.v1 import subscriptions, views, watch_history

api_router = APIRouter()

# Include all route modules
api_router.include_router(views.router)
api_router.include_router(watch_history.router)
api_router.include_router(subscriptions.router)

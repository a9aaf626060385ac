"""Main API router that includes versioned routers."""

from fastapi import APIRouter

from api.v1 import auth, bids, chat, health, notifications, payments, project_work, projects, subscriptions

# Main API router
api_router = APIRouter()

# Include v1 routers
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(auth.router, tags=["auth"])
v1_router.include_router(projects.router, tags=["projects"])
v1_router.include_router(bids.router, tags=["bids"])
v1_router.include_router(payments.router, tags=["payments"])
v1_router.include_router(project_work.router, tags=["project-work"])
v1_router.include_router(chat.router, tags=["chat"])
v1_router.include_router(subscriptions.router, tags=["subscriptions"])
v1_router.include_router(notifications.router, tags=["notifications"])

api_router.include_router(v1_router)

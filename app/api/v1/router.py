# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.modules.deliveries.router import router as deliveries_router
from app.modules.reviews.router import router as reviews_router
from app.modules.users.router import router as users_router

# Main API v1 router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    deliveries_router,
    prefix="/deliveries",
    tags=["Deliveries"]
)

api_router.include_router(
    reviews_router,
    prefix="/reviews",
    tags=["Reviews"]
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"]
)

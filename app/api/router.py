from fastapi import APIRouter
from app.api import admins, restaurants, users

router = APIRouter()
router.include_router(restaurants.router, prefix="/restaurants", tags=["Restaurants"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(admins.router, prefix="/admins", tags=["Admins"])

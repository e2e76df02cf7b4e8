from fastapi import APIRouter

from app.api.v1.endpoints import advisory, weather

api_router = APIRouter()

api_router.include_router(weather.router)
api_router.include_router(advisory.router)

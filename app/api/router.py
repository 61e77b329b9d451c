from fastapi import APIRouter
from app.api.endpoints import auth, news, calendar

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(news.router, prefix="/news", tags=["News"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])

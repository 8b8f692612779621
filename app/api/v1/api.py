from fastapi import APIRouter
from app.api.v1.endpoints import sessions, users

api_router = APIRouter()

api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(users.router, prefix="/users", tags=["users"])

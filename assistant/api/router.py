from fastapi import APIRouter

from . import events, finances, health, llm, telegram, users

api_router = APIRouter()
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(finances.router, prefix="/finances", tags=["finances"])
api_router.include_router(llm.router, prefix="/llm", tags=["llm"])
api_router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])

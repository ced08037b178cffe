from fastapi import APIRouter

from app.api.v1.endpoints.auth import router as auth_router
from app.api.v1.endpoints.oauth2 import router as oauth2_router
from app.api.v1.endpoints.task import router as task_router
from app.api.v1.endpoints.category import router as category_router
from app.api.v1.endpoints.user import router as user_router

routers = APIRouter()
routers.include_router(auth_router, prefix="/auth", tags=["Auth"])
routers.include_router(oauth2_router, prefix="/auth")
routers.include_router(task_router)
routers.include_router(category_router)
routers.include_router(user_router)

from fastapi import APIRouter
from app.modules.auth.router import router as auth_router
from app.modules.users.router import router as users_router
from app.modules.projects.router import router as projects_router
from app.modules.categories.router import router as categories_router
from app.modules.templates.router import router as templates_router
from app.modules.webhooks.router import router as webhooks_router

api_router = APIRouter()
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(projects_router, tags=["projects"])
api_router.include_router(categories_router, tags=["categories"])
api_router.include_router(templates_router, tags=["templates"])
api_router.include_router(webhooks_router, tags=["webhooks"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}

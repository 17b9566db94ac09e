from fastapi import APIRouter
from api.v1.routes.github import router as github_router


# Main v1 router (includes all endpoints)
router = APIRouter()
router.include_router(github_router)

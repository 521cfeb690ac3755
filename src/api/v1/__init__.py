"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.groups import router as groups_router
from api.v1.routes.join_requests import group_join_requests_router, join_requests_router
from api.v1.routes.members import router as members_router

router = APIRouter()
router.include_router(groups_router)
router.include_router(members_router)
router.include_router(group_join_requests_router)
router.include_router(join_requests_router)

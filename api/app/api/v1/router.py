"""Version 1 API router."""
from fastapi import APIRouter

from app.api.v1.routes.persons import router as persons_router
from app.api.v1.routes.events import router as events_router
from app.api.v1.routes.members import router as members_router
from app.api.v1.routes.song_requests import router as song_requests_router
from app.api.v1.routes.feedback import router as feedback_router

router = APIRouter()
router.include_router(persons_router)
router.include_router(events_router)
router.include_router(members_router)
router.include_router(song_requests_router)
router.include_router(feedback_router)

from fastapi import APIRouter

from schoolhub.modules.events import router as events_router
from schoolhub.modules.holidays import router as holidays_router
from schoolhub.modules.subjects import router as subjects_router

api_router = APIRouter()

api_router.include_router(subjects_router, prefix="/subjects", tags=["Subjects"])

api_router.include_router(events_router, prefix="/events", tags=["Events"])

api_router.include_router(holidays_router, prefix="/holidays", tags=["Holidays"])

from fastapi import APIRouter

from organizer.api.routes.auth import router as auth_router
from organizer.api.routes.calendar import router as calendar_router
from organizer.api.routes.google_tasks import router as google_tasks_router
from organizer.api.routes.health import router as health_router
from organizer.api.routes.ical_feed import router as ical_feed_router
from organizer.api.routes.meal_plan import router as meal_plan_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(calendar_router)
api_router.include_router(meal_plan_router)
api_router.include_router(google_tasks_router)
api_router.include_router(ical_feed_router)

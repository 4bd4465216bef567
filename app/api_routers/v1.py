from fastapi import APIRouter

from app.features.auth.routes.auth import router as auth_router
from app.features.health.routes.health import router as health_router
from app.features.matching.routes.matching import router as matching_router
from app.features.payments.routes.payments import router as payments_router
from app.features.vouching.routes.vouching import router as vouching_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(auth_router)
api_router.include_router(matching_router)
api_router.include_router(vouching_router)
api_router.include_router(payments_router)
api_router.include_router(health_router)

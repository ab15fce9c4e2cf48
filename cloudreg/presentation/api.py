from fastapi import APIRouter

from cloudreg.presentation.routers.connect.activations import (
    router as activations_router,
)
from cloudreg.presentation.routes.health import router as health_router

api = APIRouter()

api.include_router(health_router)

# Add all connect API routers here
routers = (activations_router,)
for router in routers:
    api.include_router(router, prefix="/connect")

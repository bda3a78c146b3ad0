from fastapi import APIRouter
from app.api.v1 import series_watch, watching_state

# Create main API router
api_router = APIRouter()

# Include sub-routers
api_router.include_router(series_watch.router, prefix="/series-watch", tags=["Series Watch"])
api_router.include_router(watching_state.router, prefix="/watching-state", tags=["Watching State"])

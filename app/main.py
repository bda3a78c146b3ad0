from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.config import settings
from app.database import create_tables
from app.api.v1 import api_router
from app.exceptions import InvalidArgumentError, ReviewNotAllowedError, UnknownStatusError
from app.utils.logging import setup_logger

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    description="TV series tracking API: episode progress, watching states and reviews"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# ── Domain errors ─────────────────────────────────────────────────────────────

@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ReviewNotAllowedError)
async def review_not_allowed_handler(request: Request, exc: ReviewNotAllowedError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "current_status": exc.current_status.value,
            "can_create_review": False,
        },
    )


@app.exception_handler(UnknownStatusError)
async def unknown_status_handler(request: Request, exc: UnknownStatusError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Stored watching state is invalid"},
    )


@app.on_event("startup")
async def startup_event():
    """Initialize app on startup"""
    setup_logger(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION}")
    create_tables()
    logger.info("Database tables created/verified")
    logger.info(f"Server running on http://{settings.HOST}:{settings.PORT} (docs at /docs)")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {settings.APP_NAME}")


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION
    }


# Include API v1 router
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )

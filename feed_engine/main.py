import logging
import subprocess

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feed_engine.comments.router import router as comments_router
from feed_engine.config import settings
from feed_engine.posts.router import router as posts_router
from feed_engine.utils.logging import configure_logging

# Load environment variables from .env file
load_dotenv()

# Configure logging from logging.ini file (basicConfig fallback)
configure_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    swagger_ui_parameters={"docExpansion": "none"}
)

# Add CORS middleware
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin)
                       for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include routers
app.include_router(posts_router, prefix=settings.API_V1_STR)
app.include_router(comments_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up...")

    # Optional: auto run alembic migrations on startup
    if settings.AUTO_MIGRATE_ON_STARTUP:
        try:
            subprocess.run(["alembic", "upgrade", "head"], check=True)
            logger.info("[Startup] Alembic migrations applied")
        except (OSError, subprocess.CalledProcessError) as e:
            logger.error(f"[Startup] Alembic migration failed: {e}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .core.config import settings
from .db.database import create_tables
from .routers.commands import router as commands_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting LightCommand API...")

    # Create database tables
    create_tables()
    logger.info("Database tables created")

    yield

    logger.info("Shutting down LightCommand API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.include_router(commands_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health():
    return {"status": "ok"}

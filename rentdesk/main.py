"""
Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rentdesk.config import get_settings
from rentdesk.api import router as api_router
from rentdesk.db.database import Database

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and apply pending schema steps for the app's lifetime."""
    database = Database.open(settings.database_url)
    applied = database.upgrade()
    if applied:
        logger.info(f"Applied schema versions {applied}")
    app.state.database = database
    try:
        yield
    finally:
        database.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Rental property finance tracking",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rentdesk.main:app", host=settings.host, port=settings.port)

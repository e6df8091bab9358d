"""FastAPI application entry point."""

from fastapi import FastAPI

from mailrelay.config import get_settings
from mailrelay.routers.emails import router as emails_router
from mailrelay.utils.logging import configure_logging

# Settings are validated at import; missing required values abort startup
settings = get_settings()

# Configure logging (must be called before other modules use loggers)
configure_logging(debug=settings.debug)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
)

# Include routers
app.include_router(emails_router)


@app.get("/")
async def root() -> dict:
    """Return application information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}

"""
Clinic Agenda Backend - Main Application
Serves synthetic week generation and gap triage
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables FIRST before reading settings
load_dotenv()

from clinic_agenda.config import get_settings, validate_environment  # noqa: E402
from clinic_agenda.utils.logging_config import configure_logging  # noqa: E402
from clinic_agenda.api import ai_suggestions  # noqa: E402

settings_valid = validate_environment()
if settings_valid:
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        engine_level=settings.engine_log_level,
        environment=settings.ENVIRONMENT,
    )
else:
    configure_logging(level=logging.INFO)
logger = logging.getLogger(__name__)

if not settings_valid:
    logger.warning(
        "Environment validation failed - agenda requests will fail until the "
        "AGENDA_* settings are fixed. See logs above for details."
    )

app = FastAPI(
    title="Clinic Agenda API",
    description="Synthetic clinic weeks, gap detection and gap triage",
    version="1.0.0",
)

origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "*"  # Allow all origins as fallback
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(ai_suggestions.router)
logger.info("✅ AI suggestions routes registered")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": "healthy",
        "service": "Clinic Agenda Backend",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Instant health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic_agenda.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=True
    )

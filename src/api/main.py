"""
Quality Audit API

Backend for the audit pages: participation-filtered Intercom conversations
for an admin and day, Intercom passthrough lookups, and the pull history the
pages record after each run.

Run with:
    uvicorn src.api.main:app --reload --port 8000

Docs at /docs (Swagger UI) and /redoc.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# .env must be loaded before the routers import the Intercom client,
# whose API version and pipeline knobs are read at class definition time
load_dotenv(Path(__file__).parent.parent.parent / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routers import health, intercom, pull_history
from src.logging_utils import configure_safe_logging

configure_safe_logging(log_file=os.getenv("AUDIT_LOG_FILE", "/tmp/quality-audit-app.log"))

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

# Streamlit dev server
FRONTEND_ORIGINS = ["http://localhost:8501", "http://127.0.0.1:8501"]


app = FastAPI(
    title="Quality Audit API",
    description=(
        "Conversations an agent actually replied in (not just was assigned to), "
        "single conversation and admin/team lookups, and pull history."
    ),
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(health.router)
app.include_router(intercom.router)
app.include_router(pull_history.router)


@app.get("/")
def root():
    return {
        "name": app.title,
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }

"""
TaskTrail Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from tasktrail.config import settings
from tasktrail.database import init_db
from tasktrail.schemas.common import HealthResponse

# Import all API routers
from tasktrail.api import auth, users, tasks, projects, requests, notifications, history

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    yield
    # Shutdown


app = FastAPI(
    title="TaskTrail API",
    description="Team task tracker with a full audit trail",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(tasks.router)
app.include_router(projects.router)
app.include_router(requests.router)
app.include_router(notifications.router)
app.include_router(history.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "TaskTrail API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse()

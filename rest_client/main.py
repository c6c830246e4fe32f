"""
REST Client - FastAPI Application Entry Point

Compose and fire ad-hoc HTTP requests, cancel them while in flight, inspect
and export structured responses, and browse request history.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import init_db
from .engine import Engine
from .exceptions import register_exception_handlers
from .routers import execute, history, requests, responses, variables


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    init_db()
    # Tests install their own engine before startup
    if getattr(app.state, "engine", None) is None:
        app.state.engine = Engine.from_environment()
    logger.info("REST Client service started")
    yield


app = FastAPI(
    title="REST Client",
    description="Send ad-hoc HTTP requests and inspect structured responses",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Configure CORS middleware
# Allow all origins for development; restrict in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": "REST Client",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register routers
app.include_router(execute.router)
app.include_router(requests.router)
app.include_router(responses.router)
app.include_router(history.router)
app.include_router(variables.router)

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.templating import Jinja2Templates

from task_manager.app.middleware.access_log import AccessLogMiddleware
from task_manager.app.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from task_manager.app.responses import install_error_handlers
from task_manager.app.routes import health, tasks
from task_manager.config import Settings, load_settings
from task_manager.domain.sample_tasks import sample_tasks
from task_manager.infra.memory.task_store import InMemoryTaskStore
from task_manager.observability.logging import setup_logging
from task_manager.services.task_service import TaskService

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
logger = logging.getLogger("task_manager.system")

ENDPOINTS = [
    ("GET", "/api/v1/health", "Health check endpoint for monitoring"),
    ("GET", "/api/v1/tasks", "List tasks with filtering and pagination"),
    ("POST", "/api/v1/tasks", "Create a new task"),
    ("GET", "/api/v1/tasks/{id}", "Get a specific task"),
    ("PUT", "/api/v1/tasks/{id}", "Update an existing task"),
    ("DELETE", "/api/v1/tasks/{id}", "Delete a task"),
    ("POST", "/api/v1/tasks/search", "Full-text search with filters and sorting"),
    ("GET", "/api/v1/tasks/stats", "Task statistics"),
]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(level="DEBUG" if settings.app.debug else None)
    logger.info(
        "system.start",
        extra={
            "category": "system",
            "event": "system.start",
            "app_name": settings.app.name,
            "version": settings.app.version,
            "environment": settings.app.environment,
        },
    )

    # debug only selects the log level; error responses stay JSON envelopes
    app = FastAPI(title=settings.app.name, version=settings.app.version)
    app.state.settings = settings
    app.state.started_at = datetime.now(timezone.utc)

    # Middleware added last runs first: CORS -> access log -> rate limit
    features = settings.features
    if features.rate_limit_per_min > 0:
        app.add_middleware(RateLimitMiddleware, limiter=RateLimiter(features.rate_limit_per_min))
    if features.enable_logging:
        app.add_middleware(AccessLogMiddleware)
    if features.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
            max_age=86400,
        )

    install_error_handlers(app)

    # Static files (CSS)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    # --- store wiring ---
    seed = sample_tasks() if features.seed_sample_tasks else []
    store = InMemoryTaskStore(features.max_tasks_per_user, seed=seed)
    app.state.task_service = TaskService(store)
    logger.info(
        "store.ready",
        extra={"category": "system", "event": "store.ready", "tasks": len(store), "max_tasks": store.max_tasks},
    )

    # Routers
    app.include_router(health.router)
    app.include_router(tasks.router)

    # Pages
    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    def home(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {"app": settings.app, "port": settings.server.port, "endpoints": ENDPOINTS},
        )

    return app

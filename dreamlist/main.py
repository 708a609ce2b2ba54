"""
Dream List - task-list API entry point.

A minimal todo service. The sync agent (dreamlist.agent) posts the tasks it
finds in assistant sessions here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dreamlist.api.todos import router as todos_router
from dreamlist.config.logging_config import configure_logging
from dreamlist.config.settings import Settings, get_settings
from dreamlist.infrastructure.database import create_session_factory, init_database
from dreamlist.infrastructure.todo_repository import InMemoryTodoRepository, SqlTodoRepository
from dreamlist.usecases.todo_service import TodoService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)

    Returns:
        Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings.debug)
    engine = None

    if settings.todo_backend == "sqlite":
        engine, session_factory = create_session_factory(settings.database_url, echo=settings.debug)
        repository = SqlTodoRepository(session_factory)
    elif settings.todo_backend == "memory":
        repository = InMemoryTodoRepository()
    else:
        raise ValueError(f"Unknown todo backend: {settings.todo_backend}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        logger.info("Starting Dream List API...")
        if engine is not None:
            logger.info("Initializing database...")
            await init_database(engine)
        logger.info(f"Storage backend: {settings.todo_backend}")

        yield

        logger.info("Shutting down...")
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="Dream List",
        description="Minimal task list with automatic task capture from assistant sessions",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.todo_service = TodoService(repository)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body"})

    app.include_router(todos_router, prefix="/api", tags=["Todos"])

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Dream List",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "todos": "/api/todos",
                "health": "/health"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "dreamlist", "backend": settings.todo_backend}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dreamlist.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug
    )

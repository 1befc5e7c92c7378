"""
Todo Service - Main application module.
"""
import logging
import time
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.auth import AuthProvider, get_auth_provider
from .core.config import Settings, get_settings
from .core.gate import request_gate
from .core.store import InMemoryTodoStore, TodoStore
from .routers import auth, categories, data, tags, todos

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TodoStore] = None,
    auth_provider: Optional[AuthProvider] = None,
) -> FastAPI:
    """
    Build the application.

    The store is created here, once per process, and shared by every
    handler through app.state.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Todo Service",
        description="Personal task management with categories, tags and local data migration",
        version=settings.service_version,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else InMemoryTodoStore()
    app.state.auth_provider = auth_provider or get_auth_provider(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
    )

    app.middleware("http")(request_gate)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """Log all requests with timing"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = str(process_time)

        # Skip logging for health checks to reduce noise
        if request.url.path != "/health":
            logger.info(f"{request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)")

        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors as {"error": ...} bodies"""
        content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": details},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error" if not settings.debug else str(exc)},
        )

    prefix = settings.api_prefix
    app.include_router(data.router, prefix=prefix + "/data", tags=["data"])
    app.include_router(todos.router, prefix=prefix + "/todos", tags=["todos"])
    app.include_router(categories.router, prefix=prefix + "/categories", tags=["categories"])
    app.include_router(tags.router, prefix=prefix + "/tags", tags=["tags"])
    app.include_router(auth.router, prefix=prefix + "/auth", tags=["auth"])
    app.add_api_route(settings.login_path, auth.login_page, methods=["GET"], tags=["auth"])

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting {settings.service_name} {settings.service_version} (auth mode: {settings.auth_mode})")

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "running",
            "message": "Todo Service is operational"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "healthy",
            "store": type(app.state.store).__name__,
            "timestamp": time.time()
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "todo_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )

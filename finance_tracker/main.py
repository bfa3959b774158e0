import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.errors import AppError
from .core.logging import build_logger, configure_logging
from .database import init_db
from .routers import auth as auth_router
from .routers import budgets as budgets_router
from .routers import expenses as expenses_router
from .routers import goals as goals_router
from .routers import incomes as incomes_router
from .routers import reports as reports_router
from .routers import users as users_router


def create_app() -> FastAPI:
    configure_logging(settings.log_level, json_output=settings.log_json)
    logger = build_logger()

    app = FastAPI(title="Finance Tracker – Backend", version="0.1.0")
    app.state.logger = logger

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Stays 500 when call_next raises; the error handler answers after us.
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            request.app.state.logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        request.app.state.logger.error(
            "unhandled_error",
            method=request.method,
            path=request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.on_event("startup")
    def on_startup():
        init_db()
        logger.info("startup_complete", environment=settings.environment)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(expenses_router.router)
    app.include_router(incomes_router.router)
    app.include_router(budgets_router.router)
    app.include_router(goals_router.router)
    app.include_router(reports_router.router)

    return app


app = create_app()

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from exam_admin.config import Settings, get_settings
from exam_admin.database import Database
from exam_admin.routers import exams as exams_router
from exam_admin.routers import organizations as organizations_router
from exam_admin.routers import questions as questions_router
from exam_admin.routers import search as search_router
from exam_admin.routers import stats as stats_router
from exam_admin.utils.responses import (
    CORS_HEADERS,
    ApiError,
    create_error_response,
    create_response,
    error_response,
)

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # missing DATABASE_URL fails here, before any request is served
        database = Database.from_settings(settings)
        database.init()
        app.state.database = database
        logger.info("Exam admin API started")
        yield
        database.dispose()
        logger.info("Exam admin API stopped")

    app = FastAPI(title="Exam Admin API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"})
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return create_error_response("VALIDATION_ERROR", "Validation failed", {"errors": errors}, 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "HTTP_ERROR")
        return create_error_response(code, str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return create_error_response("INTERNAL_ERROR", "Internal server error", status_code=500)

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(organizations_router.router, prefix=prefix)
    app.include_router(exams_router.router, prefix=prefix)
    app.include_router(questions_router.router, prefix=prefix)
    app.include_router(search_router.router, prefix=prefix)
    app.include_router(stats_router.router, prefix=prefix)

    @app.get("/health", tags=["Health"])
    def health():
        return create_response({"status": "ok"})

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("exam_admin.main:app", host="127.0.0.1", port=8000, reload=True)

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from employee_directory.api.employees import router as employees_router
from employee_directory.core.config import Settings, get_settings
from employee_directory.core.cors import AllowListCORSMiddleware, cors_headers
from employee_directory.core.db import build_engine, build_session_factory, init_db
from employee_directory.core.exceptions import ConfigurationError
from employee_directory.core.logging_config import setup_logging
from employee_directory.services.employee_store import EmployeeStore

logger = logging.getLogger(__name__)


async def _connect_store(app: FastAPI) -> None:
    """
    DB 연결 → 접속 확인 → 테이블 생성 → 저장소 인스턴스 등록.
    하나라도 실패하면 예외를 다시 올려서 서버가 요청을 받기 전에 종료되게 한다.
    """
    settings: Settings = app.state.settings
    try:
        engine = build_engine(settings)
        app.state.engine = engine
        store = EmployeeStore(build_session_factory(engine))
        await store.ping()
        await init_db(engine)
    except ConfigurationError as exc:
        logger.critical("Startup aborted: %s", exc)
        raise
    except Exception as exc:
        # 드라이버 메시지에 접속 정보가 섞일 수 있으므로 예외 타입만 남김
        logger.critical(
            "Database initialisation failed (%s); refusing to serve requests",
            exc.__class__.__name__,
        )
        raise

    app.state.store = store
    logger.info("Database connection established")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[EmployeeStore] = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Employee Directory",
        version="0.1.0",
        description="Employee CRUD service (REST + PostgreSQL + SQLAlchemy)",
    )
    app.state.settings = settings
    app.state.engine = None
    app.state.store = store

    @app.on_event("startup")
    async def on_startup() -> None:
        if app.state.store is None:
            await _connect_store(app)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.engine is not None:
            await app.state.engine.dispose()

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # 상세 내용은 로그에만, 응답에는 일반 메시지만
        logger.error(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
            headers=cors_headers(request.headers.get("origin"), settings.ALLOWED_ORIGINS),
        )

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": settings.SERVICE_NAME,
        }

    app.add_middleware(AllowListCORSMiddleware, allowed_origins=settings.ALLOWED_ORIGINS)
    app.include_router(employees_router)

    return app


def run() -> None:
    try:
        settings = get_settings()
    except PydanticValidationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.critical("Invalid configuration:\n%s", exc)
        raise SystemExit(1) from exc

    setup_logging(settings)
    logger.info("Server starting on port %s", settings.PORT)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()

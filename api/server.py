"""
FastAPI 앱 정의 및 라우터 통합

Régie Virtuelle 자막 동기화 서버의 메인 모듈입니다.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config_manager import ConfigStore
from lib.hub import BroadcastHub
from lib.types import CaptionState
from poller.config import PollerConfig
from poller.status_poller import StatusPoller

from .dependencies import Settings, get_settings
from .routes import config_router, status_router, ws_router
from .schemas.response import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """앱 라이프사이클 관리

    시작 시:
        - ProPresenter 폴링 시작

    종료 시:
        - 폴링 중지
    """
    poller: StatusPoller = app.state.poller
    await poller.start()
    logger.info(f"[Server] ProPresenter API: {app.state.config_store.external_api}")

    yield

    await poller.stop()
    logger.info("[Server] 서버 종료")


def create_app(
    title: str = "Régie Virtuelle",
    version: str = "4.0.0",
    debug: bool = False,
    settings: Settings | None = None,
    config_store: ConfigStore | None = None,
    poller_config: PollerConfig | None = None,
) -> FastAPI:
    """FastAPI 앱 생성

    설정 저장소, 자막 상태, 허브, 폴러를 만들어 app.state에 보관합니다.

    Args:
        title: API 제목
        version: API 버전
        debug: 디버그 모드
        settings: 앱 설정 (None이면 환경변수)
        config_store: 설정 저장소 (None이면 settings.config_file 로드)
        poller_config: 폴러 설정 (None이면 환경변수)

    Returns:
        FastAPI 앱 인스턴스
    """
    settings = settings or get_settings()

    if config_store is None:
        config_store = ConfigStore(settings.config_file)
        config_store.load()

    caption = CaptionState()
    hub = BroadcastHub(config_store, caption, send_timeout=settings.ws_send_timeout)
    poller = StatusPoller(
        poller_config or PollerConfig.from_env_validated(),
        config_store,
        hub,
        caption,
    )

    app = FastAPI(
        title=title,
        version=version,
        description="""
# Régie Virtuelle 자막 서버

ProPresenter 슬라이드 텍스트를 디스플레이 화면에 실시간으로 전달합니다.

## 주요 기능

- **설정 조회/수정**: GET/POST /api/config
- **설정 초기화**: GET /api/config/reset
- **서버 상태**: GET /api/status
- **디스플레이 구독**: WebSocket / 또는 /ws
        """,
        debug=debug or settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.config_store = config_store
    app.state.caption = caption
    app.state.hub = hub
    app.state.poller = poller

    # CORS 설정 (설정 편집기는 다른 호스트에서 열릴 수 있음)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 라우터 등록
    app.include_router(config_router)  # /api/config
    app.include_router(status_router)  # /api/status, /health/live
    app.include_router(ws_router)  # /, /ws

    # 요청 검증 실패 핸들러
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """잘못된 요청 본문 → {success: false, error}"""
        fields = sorted(
            {".".join(str(part) for part in err["loc"][1:]) or "body" for err in exc.errors()}
        )
        logger.warning(f"[API] 잘못된 요청: {fields}")
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(error=f"Invalid request: {', '.join(fields)}").model_dump(),
        )

    # 글로벌 예외 핸들러
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """글로벌 예외 핸들러"""
        logger.exception(f"[Server] 처리되지 않은 예외: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "INTERNAL_ERROR",
                "details": str(exc) if settings.debug else None,
            },
        )

    return app


# 기본 앱 인스턴스
app = create_app()


# 직접 실행 시
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.server:app",
        host=settings.api_host,
        port=settings.api_port,
    )

"""FastAPI 애플리케이션 엔트리포인트: 미들웨어 및 라우터 등록.

FastAPI application entry point: Middleware and router registration.
One application hosts one reporting session: its ``ReportingContext``
lives on ``app.state.context`` and is closed on shutdown.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streetwatch.api import api_router
from streetwatch.clients.issue_api_client import IssueApi
from streetwatch.config import Settings, settings as default_settings
from streetwatch.context import ReportingContext
from streetwatch.middleware.axiom_logging import AxiomLoggingMiddleware
from streetwatch.services.geo_locator import PositionProvider
from streetwatch.utils.logging import setup_logging


def create_app(
    config: Settings | None = None,
    api: IssueApi | None = None,
    position_provider: PositionProvider | None = None,
) -> FastAPI:
    """리포팅 호스트 앱을 생성합니다.

    Build the reporting host application.

    Args:
        config: 설정, None이면 전역 설정 (Settings; defaults to the global singleton)
        api: 이슈 백엔드 클라이언트 대체 (Replacement issue backend client)
        position_provider: 서버 측 위치 제공자 (Server-side position provider, optional)

    Returns:
        FastAPI: 구성된 앱 (Configured application)
    """
    config = config or default_settings
    setup_logging(config)
    context = ReportingContext(config, api=api, position_provider=position_provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await context.aclose()

    app = FastAPI(
        title=config.APP_NAME,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.context = context

    # Axiom API 로깅 미들웨어 (CORS보다 먼저 등록하여 모든 요청을 캡처)
    # Registered before CORS to capture all requests
    app.add_middleware(AxiomLoggingMiddleware, config=config)

    # CORS 미들웨어 (Cross-Origin Resource Sharing middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """서버 상태 확인 엔드포인트 (Health check endpoint)."""
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api/v1")
    return app


app: FastAPI = create_app()

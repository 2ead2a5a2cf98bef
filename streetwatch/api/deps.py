"""FastAPI 의존성 주입 모듈: 리포팅 컨텍스트와 인증 검사.

FastAPI dependency injection module.
Provides the reporting context stored on ``app.state`` and an
authentication guard backed by its session context.
"""

from typing import Annotated

from fastapi import Depends, Request

from streetwatch.context import ReportingContext
from streetwatch.utils.exceptions import NotAuthenticatedError


def get_context(request: Request) -> ReportingContext:
    """앱 상태에서 리포팅 컨텍스트를 꺼냅니다 (Context created in create_app)."""
    return request.app.state.context


async def require_session(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> ReportingContext:
    """인증된 세션을 요구합니다.

    Raises:
        NotAuthenticatedError(401): 세션 토큰 없음 (No session token)
    """
    if not context.session.is_authenticated():
        raise NotAuthenticatedError()
    return context

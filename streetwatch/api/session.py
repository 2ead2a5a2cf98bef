"""세션 라우터: 외부 인증 결과를 세션에 연결.

Session router: attaches the token issued by the external auth flow
to the reporting session. Credentials never pass through here.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from streetwatch.api.deps import get_context
from streetwatch.context import ReportingContext
from streetwatch.schemas.session import SessionCreate, SessionResponse

router: APIRouter = APIRouter()


@router.get("", response_model=SessionResponse)
async def get_session(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> dict:
    """현재 세션 상태."""
    session = context.session
    return {"authenticated": session.is_authenticated(), "user_name": session.user_name}


@router.put("", response_model=SessionResponse)
async def set_session(
    data: SessionCreate,
    context: Annotated[ReportingContext, Depends(get_context)],
) -> dict:
    """세션 토큰 등록."""
    context.session.sign_in(data.access_token, data.user_name)
    return {"authenticated": True, "user_name": data.user_name}


@router.delete("", response_model=SessionResponse)
async def clear_session(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> dict:
    """로그아웃: 진행 중인 신고 시도도 초기화."""
    context.session.sign_out()
    context.pipeline.reset()
    return {"authenticated": False, "user_name": None}

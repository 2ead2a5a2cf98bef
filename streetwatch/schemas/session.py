"""세션 스키마 (Session request/response schemas)."""

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    """외부 인증 흐름이 발급한 토큰 등록 요청."""

    access_token: str = Field(min_length=1)
    user_name: str | None = None


class SessionResponse(BaseModel):
    authenticated: bool
    user_name: str | None = None

"""커스텀 예외 클래스 모듈.

Custom exception classes module.
Every error in the reporting core is an HTTPException subclass with a preset
status code and a machine-readable ``code``. The submission pipeline turns
these into a ``failed`` state with that code; the HTTP host returns them as-is.

Usage:
    from streetwatch.utils.exceptions import NotFoundError, InvalidTransitionError
    raise NotFoundError("Issue not found")
"""

from fastapi import HTTPException, status


class StreetWatchError(HTTPException):
    """모든 도메인 예외의 부모 클래스.

    Base class for domain errors. ``code`` identifies the failure reason
    independently of the human-readable ``detail``.
    """

    code: str = "error"
    status_code_default: int = status.HTTP_400_BAD_REQUEST
    detail_default: str = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.detail_default,
        )


class InvalidMediaError(StreetWatchError):
    """422: 이미지 형식/크기 오류 (Wrong image type or too large)."""

    code = "invalid_media"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail_default = "Invalid image file"


class PreconditionNotMetError(StreetWatchError):
    """409: 제출 시 이미지 또는 위치 누락 (Image or location missing at submit)."""

    code = "precondition_not_met"
    status_code_default = status.HTTP_409_CONFLICT
    detail_default = "An image and a location are required before submitting"


class NotAuthenticatedError(StreetWatchError):
    """401: 로그인 필요 (Caller must sign in)."""

    code = "not_authenticated"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    detail_default = "You must sign in to report an issue"


class NotFoundError(StreetWatchError):
    """404: 이슈를 찾을 수 없음 (Issue not found)."""

    code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND
    detail_default = "Issue not found"


class DuplicateIdError(StreetWatchError):
    """409: 이미 존재하는 이슈 ID (Issue identifier already present)."""

    code = "duplicate_id"
    status_code_default = status.HTTP_409_CONFLICT
    detail_default = "Issue already exists"


class InvalidTransitionError(StreetWatchError):
    """409: 허용되지 않는 상태 전이 (Backward or otherwise invalid status move)."""

    code = "invalid_transition"
    status_code_default = status.HTTP_409_CONFLICT
    detail_default = "Invalid status transition"


class TransportError(StreetWatchError):
    """502 Bad Gateway 예외: 백엔드 호출 실패.

    Raised when the issue backend cannot be reached or answers with an error.
    ``detail`` carries the server's message verbatim so the UI can show it.
    """

    code = "transport"
    status_code_default = status.HTTP_502_BAD_GATEWAY
    detail_default = "An error occurred"

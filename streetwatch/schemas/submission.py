"""신고 제출 스키마.

Report submission schemas: image uploads, pipeline states, and the
snapshot the UI observes.
"""

import base64
from datetime import datetime
from enum import Enum
from io import BytesIO

from pydantic import BaseModel, ConfigDict

from streetwatch.schemas.issue import IssueCategory, Location


class ImageUpload(BaseModel):
    """사용자가 선택한 원본 이미지 (Image as selected by the user)."""

    filename: str
    content_type: str | None = None
    content: bytes


class ValidatedImage(BaseModel):
    """검증을 통과한 이미지: 미리보기와 업로드에 모두 사용.

    Image that passed validation. ``open()`` yields a fresh read handle
    for upload; ``preview_data_url()`` renders it for preview.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def open(self) -> BytesIO:
        return BytesIO(self.content)

    def preview_data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class SubmissionState(str, Enum):
    """제출 파이프라인 상태 (Pipeline states)."""

    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_LOCATION = "awaiting_location"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureReason(str, Enum):
    INVALID_MEDIA = "invalid_media"
    PRECONDITION_NOT_MET = "precondition_not_met"
    NOT_AUTHENTICATED = "not_authenticated"
    TRANSPORT = "transport"


class SubmissionSnapshot(BaseModel):
    """UI가 관찰하는 현재 시도의 상태.

    Read-only view of the active attempt, safe to serialize.

    Attributes:
        state: 파이프라인 상태 (Pipeline state)
        failure_reason: 실패 사유 코드 (Reason code when failed)
        failure_message: 사용자에게 보여줄 메시지 (Message shown to the user, verbatim for transport errors)
        image_name / image_type / image_size: 선택된 이미지 정보 (Selected image metadata)
        location_resolved: 위치 확인 완료 여부 (Whether the location lookup finished)
        issue_id / category / category_label / confidence: 성공 시 결과 (Result after success)
    """

    state: SubmissionState
    failure_reason: FailureReason | None = None
    failure_message: str | None = None
    image_name: str | None = None
    image_type: str | None = None
    image_size: int | None = None
    location: Location | None = None
    location_resolved: bool = False
    issue_id: str | None = None
    category: IssueCategory | None = None
    category_label: str | None = None
    confidence: float | None = None
    submitted_at: datetime | None = None

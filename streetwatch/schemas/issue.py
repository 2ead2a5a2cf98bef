"""이슈 Pydantic 스키마.

Issue domain and wire schemas.
``Issue`` is the normalized client-side entity; ``RawIssue`` and
``SubmissionReceipt`` describe what the issue backend sends back.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field


class IssueStatus(str, Enum):
    """이슈 처리 상태: forward-only: pending → in_progress → completed."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class IssueCategory(str, Enum):
    """정규화된 이슈 분류 (Fixed category enumeration)."""

    POTHOLE = "pothole"
    BROKEN_STREETLIGHT = "broken_streetlight"
    GRAFFITI = "graffiti"
    FLY_TIPPING = "fly_tipping"
    DAMAGED_SIGN = "damaged_sign"
    OTHER = "other"


class LocationSource(str, Enum):
    DEVICE = "device"  # 기기에서 보고된 좌표 (Device-reported)
    DEFAULT = "default"  # 설정된 기본 좌표 (Configured fallback)


# 지도/목록 상태 필터, "all" 또는 상태 값 (Status filter for views)
StatusFilter = Literal["all", "pending", "in_progress", "completed"]


class Location(BaseModel):
    """위도/경도 좌표: 둘 다 필수 (Both coordinates always present)."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    source: LocationSource | None = None  # 출처, 서버 데이터는 None (None for server records)


class Issue(BaseModel):
    """클라이언트 측 이슈 엔티티.

    Normalized street issue. Instances are immutable; a status change
    produces a new instance that replaces the old one in the collection.

    Attributes:
        id: 서버가 부여한 식별자 (Opaque server-assigned identifier)
        category: 정규화된 분류 (Normalized category member)
        category_label: 표시용 라벨 (Display label derived from the raw classifier string)
        status: 처리 상태 (Resolution status)
        location: 좌표 (Coordinates, never absent)
        image_reference: 이미지 경로 또는 URL (Raw image path or URL)
        reporter_name: 신고자 이름 (Reporter display name, optional)
        created_at: 신고 시각 (Creation timestamp, immutable)
        confidence: 분류 신뢰도 (Classifier confidence in [0, 1], optional)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    category: IssueCategory
    category_label: str
    status: IssueStatus = IssueStatus.PENDING
    location: Location
    image_reference: str | None = None
    reporter_name: str | None = None
    created_at: datetime
    confidence: float | None = Field(default=None, ge=0, le=1)


class RawLocation(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "lng", "lon"))


def _coerce_id(value: Any) -> Any:
    # 백엔드가 숫자 ID를 보낼 수 있음 (Backend may send numeric ids)
    if isinstance(value, int):
        return str(value)
    return value


IssueId = Annotated[str, BeforeValidator(_coerce_id)]


class RawIssue(BaseModel):
    """백엔드 이슈 레코드: 지도/목록 두 가지 형태를 모두 수용.

    Issue record as returned by the backend. Map records carry flat
    ``latitude``/``longitude``; report records nest them under ``location``
    and name the category ``issue``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: IssueId = Field(validation_alias=AliasChoices("id", "_id", "issueId"))
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "issue", "issueType"))
    status: str | None = None
    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "lng"))
    location: RawLocation | None = None
    image_url: str | None = Field(default=None, validation_alias=AliasChoices("imageUrl", "image_url", "image"))
    user_name: str | None = Field(default=None, validation_alias=AliasChoices("userName", "user_name", "reporterName"))
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("date", "createdAt", "created_at"))
    confidence: float | None = None

    def coordinates(self) -> tuple[float, float] | None:
        """좌표 쌍을 반환합니다. 하나라도 없으면 None (Both or nothing)."""
        lat, lng = self.latitude, self.longitude
        if (lat is None or lng is None) and self.location is not None:
            lat, lng = self.location.latitude, self.location.longitude
        if lat is None or lng is None:
            return None
        return lat, lng


class SubmissionReceipt(BaseModel):
    """신고 제출 응답: 서버가 부여한 ID와 분류 결과.

    Backend answer to a successful report submission.
    ``category`` is the untrusted classifier label, normalized by the caller.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    issue_id: IssueId = Field(validation_alias=AliasChoices("issueId", "issue_id", "id", "_id"))
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "issue", "detectedIssue"))
    confidence: float | None = None
    image_url: str | None = Field(default=None, validation_alias=AliasChoices("imageUrl", "image_url"))
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("date", "createdAt", "created_at"))


class StatusUpdate(BaseModel):
    """상태 변경 요청 (Status update request body)."""

    status: IssueStatus

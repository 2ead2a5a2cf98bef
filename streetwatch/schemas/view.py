"""지도/목록 뷰 스키마.

Map and list view schemas derived from the issue collection.
"""

from datetime import datetime

from pydantic import BaseModel

from streetwatch.schemas.issue import IssueCategory, IssueStatus


class DisplayPayload(BaseModel):
    """마커 팝업과 목록 행에 공통으로 표시되는 정보.

    Display fields shared by map popups and catalog rows.

    Attributes:
        category_label: 정규화된 분류 라벨 (Normalized category label)
        reporter: 신고자, 없으면 "Anonymous" (Reporter name or "Anonymous")
        reported_at: 표시용 날짜 (Formatted date)
        coordinates: 소수점 4자리 좌표 (Coordinates to 4 decimals)
        map_url: 외부 지도 링크 (External Google Maps link)
    """

    category_label: str
    reporter: str
    reported_at: str
    coordinates: str
    map_url: str


class Marker(BaseModel):
    id: str
    latitude: float
    longitude: float
    status: IssueStatus
    category: IssueCategory
    icon_class: str  # red / orange / green
    popup: DisplayPayload


class BoundingBox(BaseModel):
    south: float
    west: float
    north: float
    east: float


class Viewport(BaseModel):
    """지도 시점: 마커가 없으면 설정된 기본값 (Configured default when no markers)."""

    center_latitude: float
    center_longitude: float
    zoom: int
    bounds: BoundingBox | None = None
    is_default: bool = False


class MapProjection(BaseModel):
    markers: list[Marker]
    viewport: Viewport
    total: int  # 필터 전 이슈 수 (Issues before filtering)
    visible: int  # 표시되는 마커 수 (Markers shown)


class ReportRow(BaseModel):
    """목록 행: 마커 표시 정보 + 절대 이미지 URL."""

    id: str
    status: IssueStatus
    status_label: str
    category: IssueCategory
    created_at: datetime
    image_url: str | None
    confidence: float | None = None
    display: DisplayPayload

"""표시용 포맷 유틸리티.

Display formatting helpers shared by the map projector and the report catalog.
"""

from datetime import datetime

from streetwatch.schemas.issue import IssueStatus

ANONYMOUS: str = "Anonymous"
MAP_LINK_TEMPLATE: str = "https://www.google.com/maps?q={lat},{lng}"


def display_reporter(name: str | None) -> str:
    if name is None or not name.strip():
        return ANONYMOUS
    return name.strip()


def format_reported_at(value: datetime) -> str:
    """신고 시각을 "Jan 5, 2025, 02:30 PM" 형식으로 변환합니다."""
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"


def format_coordinates(latitude: float, longitude: float) -> str:
    # 소수점 4자리 (4 decimal places)
    return f"{latitude:.4f}, {longitude:.4f}"


def map_link(latitude: float, longitude: float) -> str:
    return MAP_LINK_TEMPLATE.format(lat=latitude, lng=longitude)


def status_label(status: IssueStatus) -> str:
    return status.value.replace("_", " ")

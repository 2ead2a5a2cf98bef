"""지도 프로젝터.

Map projector: derives a styled marker set and a fitted viewport from a
sequence of issues. Pure: no network, no collection mutation.

Viewport policy:
    - markers present: bounding box of all markers, padded on each side by
      ``MAP_PADDING_RATIO`` of its span, zoom fitted to the configured
      viewport size and capped at ``MAP_MAX_ZOOM``. A marker set that
      straddles the antimeridian gets the narrow box across it;
    - no markers: the configured default centre and zoom (``is_default``).
"""

import math
from typing import Iterable, Sequence

from streetwatch.config import Settings, settings as default_settings
from streetwatch.schemas.issue import Issue, IssueStatus, StatusFilter
from streetwatch.schemas.view import BoundingBox, DisplayPayload, MapProjection, Marker, Viewport
from streetwatch.utils.formatting import display_reporter, format_coordinates, format_reported_at, map_link

# 상태별 마커 색상, 고정 매핑 (Fixed status → icon mapping)
ICON_CLASSES: dict[IssueStatus, str] = {
    IssueStatus.PENDING: "red",
    IssueStatus.IN_PROGRESS: "orange",
    IssueStatus.COMPLETED: "green",
}

_TILE_SIZE: int = 256
_MAX_MERCATOR_LAT: float = 85.0511287798


def display_payload(issue: Issue) -> DisplayPayload:
    """마커 팝업/목록 행 표시 정보를 만듭니다."""
    lat, lng = issue.location.latitude, issue.location.longitude
    return DisplayPayload(
        category_label=issue.category_label,
        reporter=display_reporter(issue.reporter_name),
        reported_at=format_reported_at(issue.created_at),
        coordinates=format_coordinates(lat, lng),
        map_url=map_link(lat, lng),
    )


def filter_by_status(issues: Sequence[Issue], status_filter: StatusFilter | IssueStatus) -> list[Issue]:
    """상태 필터 적용: 입력 순서 유지 (Order-preserving)."""
    if status_filter == "all":
        return list(issues)
    status = IssueStatus(status_filter)
    return [i for i in issues if i.status == status]


def _mercator_y(latitude: float) -> float:
    lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, latitude))
    rad = math.radians(lat)
    return math.log(math.tan(math.pi / 4 + rad / 2))


def _longitude_span(longitudes: Iterable[float]) -> tuple[float, float]:
    """가장 좁은 경도 구간 (west, east).

    Narrowest longitude arc holding every point. When that arc crosses the
    antimeridian, ``east`` is returned above 180 so that ``east - west`` is
    still the span, the same unwrapped form Leaflet's ``fitBounds`` accepts.
    """
    ordered = sorted(longitudes)
    west, east = ordered[0], ordered[-1]
    wrap_gap = 360.0 - (east - west)
    widest, after = 0.0, 0
    for i in range(1, len(ordered)):
        gap = ordered[i] - ordered[i - 1]
        if gap > widest:
            widest, after = gap, i
    if widest > wrap_gap:
        return ordered[after], ordered[after - 1] + 360.0
    return west, east


class MapProjector:

    def __init__(self, config: Settings | None = None) -> None:
        config = config or default_settings
        self.max_zoom: int = config.MAP_MAX_ZOOM
        self.padding_ratio: float = config.MAP_PADDING_RATIO
        self.width_px: int = config.MAP_VIEWPORT_WIDTH_PX
        self.height_px: int = config.MAP_VIEWPORT_HEIGHT_PX
        self.default_viewport: Viewport = Viewport(
            center_latitude=config.MAP_DEFAULT_LATITUDE,
            center_longitude=config.MAP_DEFAULT_LONGITUDE,
            zoom=config.MAP_DEFAULT_ZOOM,
            is_default=True,
        )

    def project(
        self,
        issues: Sequence[Issue],
        status_filter: StatusFilter | IssueStatus = "all",
    ) -> MapProjection:
        """이슈 목록을 마커와 지도 시점으로 변환합니다.

        Project issues onto the map.

        Args:
            issues: 이슈 목록 (Issues, typically ``IssueCollection.all()``)
            status_filter: "all" 또는 상태 (``"all"`` or a status)

        Returns:
            MapProjection: 마커, 시점, 전체/표시 개수
                           (Markers, viewport, total and visible counts)
        """
        visible = filter_by_status(issues, status_filter)
        markers = [self.marker(issue) for issue in visible]
        return MapProjection(
            markers=markers,
            viewport=self.fit(markers),
            total=len(issues),
            visible=len(markers),
        )

    def marker(self, issue: Issue) -> Marker:
        return Marker(
            id=issue.id,
            latitude=issue.location.latitude,
            longitude=issue.location.longitude,
            status=issue.status,
            category=issue.category,
            icon_class=ICON_CLASSES[issue.status],
            popup=display_payload(issue),
        )

    def fit(self, markers: Sequence[Marker]) -> Viewport:
        """마커 전체를 포함하는 시점을 계산합니다. 비어 있으면 기본 시점."""
        if not markers:
            return self.default_viewport.model_copy()

        lats = [m.latitude for m in markers]
        south, north = min(lats), max(lats)
        west, east = _longitude_span(m.longitude for m in markers)

        # 각 변을 span * ratio 만큼 확장 (Pad each side by span * ratio)
        pad_lat = (north - south) * self.padding_ratio
        pad_lng = (east - west) * self.padding_ratio
        if east <= 180.0:
            west, east = max(-180.0, west - pad_lng), min(180.0, east + pad_lng)
        elif east - west + 2 * pad_lng < 360.0:
            west, east = west - pad_lng, east + pad_lng
        else:
            west, east = -180.0, 180.0
        bounds = BoundingBox(
            south=max(-90.0, south - pad_lat),
            west=west,
            north=min(90.0, north + pad_lat),
            east=east,
        )
        center_lng = (bounds.west + bounds.east) / 2
        if center_lng > 180.0:
            center_lng -= 360.0
        return Viewport(
            center_latitude=(bounds.south + bounds.north) / 2,
            center_longitude=center_lng,
            zoom=self._fit_zoom(bounds),
            bounds=bounds,
        )

    def _fit_zoom(self, bounds: BoundingBox) -> int:
        # 단일 지점(범위 0)이면 최대 줌 (Zero span falls back to the cap)
        candidates: list[float] = [float(self.max_zoom)]
        lng_fraction = (bounds.east - bounds.west) / 360
        if lng_fraction > 0:
            candidates.append(math.log2(self.width_px / _TILE_SIZE / lng_fraction))
        lat_fraction = (_mercator_y(bounds.north) - _mercator_y(bounds.south)) / (2 * math.pi)
        if lat_fraction > 0:
            candidates.append(math.log2(self.height_px / _TILE_SIZE / lat_fraction))
        return max(0, min(self.max_zoom, math.floor(min(candidates))))

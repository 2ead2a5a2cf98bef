"""이슈 라우터: 지도/목록 뷰와 상태 변경.

Issue router: map projection, report catalog, nearby lookup, refresh,
and status updates. Views are derived from the in-memory collection; only
``refresh``, ``nearby`` and status updates reach the backend.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query

from streetwatch.api.deps import get_context, require_session
from streetwatch.context import ReportingContext
from streetwatch.schemas.issue import StatusFilter, StatusUpdate
from streetwatch.schemas.view import MapProjection, ReportRow
from streetwatch.utils.pagination import Page

router: APIRouter = APIRouter()


@router.post("/refresh")
async def refresh_issues(
    context: Annotated[ReportingContext, Depends(get_context)],
    source: Literal["reports", "map"] = "reports",
) -> dict:
    """백엔드에서 전체 목록 새로고침."""
    issues = await context.issues.refresh(source)
    return {"total": len(issues), "version": context.collection.version}


@router.get("/map", response_model=MapProjection)
async def get_map(
    context: Annotated[ReportingContext, Depends(get_context)],
    status: StatusFilter = "all",
) -> MapProjection:
    """상태 필터가 적용된 지도 마커와 시점."""
    return context.views.map(status)


@router.get("/reports", response_model=Page[ReportRow])
async def list_reports(
    context: Annotated[ReportingContext, Depends(get_context)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int | None, Query(ge=1)] = None,
) -> Page[ReportRow]:
    """최신순 신고 목록."""
    return context.views.page(page, per_page)


@router.get("/nearby", response_model=MapProjection)
async def get_nearby(
    context: Annotated[ReportingContext, Depends(get_context)],
    latitude: Annotated[float, Query(ge=-90, le=90)],
    longitude: Annotated[float, Query(ge=-180, le=180)],
    radius: Annotated[int, Query(ge=1)] = 5000,
) -> MapProjection:
    """주변 이슈: 컬렉션에는 반영하지 않음."""
    issues = await context.issues.nearby(latitude, longitude, radius)
    return context.projector.project(issues)


@router.patch("/{issue_id}/status", response_model=ReportRow)
async def update_issue_status(
    issue_id: str,
    data: StatusUpdate,
    context: Annotated[ReportingContext, Depends(require_session)],
) -> ReportRow:
    """이슈 상태 변경: 앞으로만 가능."""
    issue = await context.issues.update_status(issue_id, data.status)
    return context.catalog.row(issue)

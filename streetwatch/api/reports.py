"""신고 제출 라우터: 파이프라인 상태 기계를 HTTP로 노출.

Report submission router: exposes the submission pipeline of the
reporting session. Every endpoint answers with the pipeline snapshot;
failures are carried in ``state``/``failure_reason`` rather than HTTP errors.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from streetwatch.api.deps import get_context
from streetwatch.context import ReportingContext
from streetwatch.schemas.submission import ImageUpload, SubmissionSnapshot
from streetwatch.services.geo_locator import GeoLocator, static_position

router: APIRouter = APIRouter()


@router.get("", response_model=SubmissionSnapshot)
async def get_report_state(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> SubmissionSnapshot:
    """현재 신고 시도 상태."""
    return context.pipeline.snapshot()


@router.get("/preview")
async def get_report_preview(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> dict:
    """선택된 이미지 미리보기 (data URL)."""
    return {"preview": context.pipeline.preview_data_url()}


@router.post("/image", response_model=SubmissionSnapshot)
async def select_report_image(
    context: Annotated[ReportingContext, Depends(get_context)],
    image: Annotated[UploadFile, File()],
    latitude: Annotated[float | None, Form()] = None,
    longitude: Annotated[float | None, Form()] = None,
) -> SubmissionSnapshot:
    """이미지 선택: 검증 후 위치 확인.

    ``latitude``/``longitude`` are the coordinates the browser obtained, if
    any; without them the session's own locator is asked.
    """
    upload = ImageUpload(
        filename=image.filename or "upload",
        content_type=image.content_type,
        content=await image.read(),
    )
    locator: GeoLocator | None = None
    if latitude is not None or longitude is not None:
        locator = GeoLocator(static_position(latitude, longitude), context.config)
    return await context.pipeline.select_image(upload, locator=locator)


@router.post("/submit", response_model=SubmissionSnapshot)
async def submit_report(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> SubmissionSnapshot:
    """현재 시도 제출."""
    return await context.pipeline.submit()


@router.post("/reset", response_model=SubmissionSnapshot)
async def reset_report(
    context: Annotated[ReportingContext, Depends(get_context)],
) -> SubmissionSnapshot:
    """다른 사진 올리기: 시도 초기화."""
    return context.pipeline.reset()

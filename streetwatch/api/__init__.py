"""API 라우터 패키지: 리포팅 호스트의 모든 엔드포인트 통합.

API Router package: Aggregates the reporting host endpoints into a single
router for inclusion in the FastAPI application.

Included routers:
    - session: 세션 토큰 등록/해제 (Attach or clear the session token)
    - reports: 신고 제출 파이프라인 (Submission pipeline)
    - issues: 지도/목록 뷰와 상태 변경 (Map and list views, status updates)
"""

from fastapi import APIRouter

from streetwatch.api.issues import router as issues_router
from streetwatch.api.reports import router as reports_router
from streetwatch.api.session import router as session_router

api_router: APIRouter = APIRouter()

api_router.include_router(session_router, prefix="/session", tags=["Session"])
api_router.include_router(reports_router, prefix="/report", tags=["Report"])
api_router.include_router(issues_router, prefix="/issues", tags=["Issues"])

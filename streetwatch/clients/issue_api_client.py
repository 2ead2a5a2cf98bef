"""이슈 백엔드 HTTP 클라이언트.

Issue backend HTTP client built on httpx.AsyncClient.
Returns normalized-shape records (``RawIssue``, ``SubmissionReceipt``);
every failure surfaces as ``TransportError`` carrying the server's message
verbatim. No automatic retries.

Endpoints:
    POST  /api/issues/report        multipart: image, latitude, longitude
    GET   /api/issues/reports       report list
    GET   /api/issues/map           map data
    GET   /api/issues/nearby        issues around a point
    PATCH /api/issues/{id}/status   {"status": ...}
"""

from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from streetwatch.config import Settings, settings as default_settings
from streetwatch.schemas.issue import IssueStatus, RawIssue, SubmissionReceipt
from streetwatch.schemas.submission import ValidatedImage
from streetwatch.services.session_context import SessionContext
from streetwatch.utils.exceptions import TransportError
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)

REPORT_ISSUE: str = "/api/issues/report"
GET_REPORTS: str = "/api/issues/reports"
GET_MAP_DATA: str = "/api/issues/map"
GET_NEARBY_ISSUES: str = "/api/issues/nearby"


def update_status_path(issue_id: str) -> str:
    return f"/api/issues/{issue_id}/status"


class IssueApi(Protocol):
    """코어가 소비하는 전송 계층 인터페이스 (Transport interface consumed by the core)."""

    async def submit_report(self, image: ValidatedImage, latitude: float, longitude: float) -> SubmissionReceipt: ...

    async def list_reports(self) -> list[RawIssue]: ...

    async def list_map_data(self) -> list[RawIssue]: ...

    async def list_nearby(self, latitude: float, longitude: float, radius: int = 5000) -> list[RawIssue]: ...

    async def update_status(self, issue_id: str, status: IssueStatus) -> RawIssue: ...


class IssueApiClient:
    """httpx 기반 IssueApi 구현.

    httpx-backed IssueApi. The session context supplies the bearer token
    on every request; the transport timeout comes from settings.
    """

    def __init__(
        self,
        session: SessionContext,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = config or default_settings
        self._session: SessionContext = session
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=config.API_BASE_URL,
            timeout=config.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._session.access_token:
            headers["Authorization"] = f"Bearer {self._session.access_token}"
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise TransportError(message)

        if "application/json" not in response.headers.get("content-type", ""):
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Malformed JSON response from server") from exc

    # --- 신고 제출 (Report submission) ---

    async def submit_report(self, image: ValidatedImage, latitude: float, longitude: float) -> SubmissionReceipt:
        """이미지와 좌표를 multipart로 전송합니다.

        Upload the image with its coordinates as multipart/form-data.

        Returns:
            SubmissionReceipt: 서버 ID와 분류 결과 (Server id and classifier output)

        Raises:
            TransportError: 네트워크 오류 또는 오류 응답 (Network failure or error response)
        """
        data = await self._request(
            "POST",
            REPORT_ISSUE,
            files={"image": (image.filename, image.open(), image.content_type)},
            data={"latitude": str(latitude), "longitude": str(longitude)},
        )
        record = _unwrap(data)
        try:
            return SubmissionReceipt.model_validate(record)
        except ValidationError as exc:
            raise TransportError("Malformed submission response from server") from exc

    # --- 조회 (Reads) ---

    async def list_reports(self) -> list[RawIssue]:
        return _parse_issue_list(await self._request("GET", GET_REPORTS))

    async def list_map_data(self) -> list[RawIssue]:
        return _parse_issue_list(await self._request("GET", GET_MAP_DATA))

    async def list_nearby(self, latitude: float, longitude: float, radius: int = 5000) -> list[RawIssue]:
        params = {"latitude": latitude, "longitude": longitude, "radius": radius}
        return _parse_issue_list(await self._request("GET", GET_NEARBY_ISSUES, params=params))

    # --- 상태 변경 (Status update) ---

    async def update_status(self, issue_id: str, status: IssueStatus) -> RawIssue:
        data = await self._request("PATCH", update_status_path(issue_id), json={"status": status.value})
        record = _unwrap(data)
        try:
            return RawIssue.model_validate(record)
        except ValidationError as exc:
            raise TransportError("Malformed status update response from server") from exc


def _unwrap(data: Any) -> Any:
    # 응답이 {"issue": {...}, "message": ...} 형태일 수 있음 (May be wrapped)
    if isinstance(data, dict) and isinstance(data.get("issue"), dict):
        return data["issue"]
    return data


def _error_message(response: httpx.Response) -> str:
    """오류 응답에서 메시지를 추출합니다 (message → error → 본문)."""
    if "application/json" in response.headers.get("content-type", ""):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or "An error occurred")
        return "An error occurred"
    return response.text or "An error occurred"


def _parse_issue_list(data: Any) -> list[RawIssue]:
    if isinstance(data, dict):
        data = next(
            (data[k] for k in ("issues", "reports", "data", "items") if isinstance(data.get(k), list)),
            None,
        )
    if not isinstance(data, list):
        raise TransportError("Expected a list of issues from server")

    records: list[RawIssue] = []
    for item in data:
        try:
            records.append(RawIssue.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed issue record: %s", exc.errors()[0].get("msg"))
    return records

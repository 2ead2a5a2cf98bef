"""테스트 인프라: 가짜 백엔드, 설정, 파이프라인, httpx 클라이언트 픽스처.

Test infrastructure: Fake issue backend, settings, pipeline, and httpx client fixtures.
Only the external collaborators (backend API, device position) are faked;
everything else runs for real.
"""

import asyncio
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from streetwatch.config import Settings
from streetwatch.main import create_app
from streetwatch.repositories.issue_collection import IssueCollection
from streetwatch.schemas.issue import Issue, IssueCategory, IssueStatus, Location, RawIssue, SubmissionReceipt
from streetwatch.schemas.submission import ImageUpload, ValidatedImage
from streetwatch.services.geo_locator import GeoLocator
from streetwatch.services.session_context import SessionContext
from streetwatch.services.submission_pipeline import IssueSubmissionPipeline

MiB = 1024 * 1024
BASE_TIME = datetime(2025, 1, 5, 14, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# 가짜 외부 협력자 (Fake external collaborators)
# ---------------------------------------------------------------------------
class FakeIssueApi:
    """IssueApi 가짜 구현: 호출 기록과 응답 제어.

    ``gate`` holds submissions until set; ``fail_with`` makes every call raise.
    """

    def __init__(self) -> None:
        self.submit_calls: list[tuple[str, float, float]] = []
        self.status_calls: list[tuple[str, IssueStatus]] = []
        self.category: str | None = "pot_hole_india"
        self.confidence: float | None = 0.93
        self.reports: list[dict] = []
        self.map_data: list[dict] = []
        self.nearby_data: list[dict] = []
        self.gate: asyncio.Event | None = None
        self.fail_with: Exception | None = None
        self._next_id = 0

    async def submit_report(self, image: ValidatedImage, latitude: float, longitude: float) -> SubmissionReceipt:
        self.submit_calls.append((image.filename, latitude, longitude))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self._next_id += 1
        return SubmissionReceipt(
            issue_id=f"srv-{self._next_id}",
            category=self.category,
            confidence=self.confidence,
            image_url=f"/uploads/srv-{self._next_id}.jpg",
        )

    async def list_reports(self) -> list[RawIssue]:
        if self.fail_with is not None:
            raise self.fail_with
        return [RawIssue.model_validate(r) for r in self.reports]

    async def list_map_data(self) -> list[RawIssue]:
        if self.fail_with is not None:
            raise self.fail_with
        return [RawIssue.model_validate(r) for r in self.map_data]

    async def list_nearby(self, latitude: float, longitude: float, radius: int = 5000) -> list[RawIssue]:
        return [RawIssue.model_validate(r) for r in self.nearby_data]

    async def update_status(self, issue_id: str, status: IssueStatus) -> RawIssue:
        self.status_calls.append((issue_id, status))
        if self.fail_with is not None:
            raise self.fail_with
        return RawIssue(id=issue_id, status=status.value, latitude=0.0, longitude=0.0)


class FakePositionProvider:
    """기기 위치 제공자 가짜 구현 (Records how often it was asked)."""

    def __init__(self, position: tuple[float, float] = (28.7041, 77.1025), error: Exception | None = None,
                 delay: float = 0.0) -> None:
        self.position = position
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self) -> tuple[float, float]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.position


# ---------------------------------------------------------------------------
# 헬퍼 (Helpers)
# ---------------------------------------------------------------------------
def make_upload(content_type: str | None = "image/jpeg", size: int = 2 * MiB, filename: str = "photo.jpg") -> ImageUpload:
    return ImageUpload(filename=filename, content_type=content_type, content=b"\xff" * size)


def make_issue(
    issue_id: str,
    status: IssueStatus = IssueStatus.PENDING,
    latitude: float = 28.6139,
    longitude: float = 77.2090,
    created_at: datetime | None = None,
    reporter_name: str | None = "Asha",
    category: IssueCategory = IssueCategory.POTHOLE,
    label: str = "Pothole",
    image_reference: str | None = None,
) -> Issue:
    return Issue(
        id=issue_id,
        category=category,
        category_label=label,
        status=status,
        location=Location(latitude=latitude, longitude=longitude),
        image_reference=image_reference,
        reporter_name=reporter_name,
        created_at=created_at or BASE_TIME,
    )


def at(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


# ---------------------------------------------------------------------------
# 픽스처 (Fixtures)
# ---------------------------------------------------------------------------
@pytest.fixture
def config() -> Settings:
    """테스트 설정: 자동 초기화 비활성, Axiom 비활성."""
    return Settings(
        SUCCESS_RESET_SECONDS=0,
        GEOLOCATION_TIMEOUT_SECONDS=0.2,
        FALLBACK_LATITUDE=51.505,
        FALLBACK_LONGITUDE=-0.09,
        API_BASE_URL="http://backend.test",
        AXIOM_API_TOKEN="",
        AXIOM_DATASET="",
    )


@pytest.fixture
def fake_api() -> FakeIssueApi:
    return FakeIssueApi()


@pytest.fixture
def provider() -> FakePositionProvider:
    return FakePositionProvider()


@pytest.fixture
def collection() -> IssueCollection:
    return IssueCollection()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(access_token="token-123", user_name="Asha")


@pytest.fixture
def pipeline(collection, fake_api, session, provider, config) -> IssueSubmissionPipeline:
    return IssueSubmissionPipeline(
        collection,
        fake_api,
        session,
        locator=GeoLocator(provider, config),
        config=config,
    )


@pytest_asyncio.fixture
async def app(config, fake_api, provider):
    """가짜 백엔드를 쓰는 리포팅 호스트 앱."""
    application = create_app(config, api=fake_api, position_provider=provider)
    yield application
    await application.state.context.aclose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

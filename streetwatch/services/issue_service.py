"""이슈 서비스.

Issue service: turns backend records into ``Issue`` entities, refreshes the
collection from the source of truth, and forwards status updates.
"""

from datetime import datetime, timezone
from typing import Literal

from streetwatch.clients.issue_api_client import IssueApi
from streetwatch.config import Settings, settings as default_settings
from streetwatch.repositories.issue_collection import IssueCollection, is_forward_transition
from streetwatch.schemas.issue import Issue, IssueStatus, Location, RawIssue, SubmissionReceipt
from streetwatch.utils.category import classify, normalize_label
from streetwatch.utils.exceptions import InvalidTransitionError
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)

# 생성 시각이 없는 레코드의 기준 시각 (목록 맨 뒤로 정렬됨)
# Timestamp for records without one; sorts them last in the catalog
UNKNOWN_CREATED_AT: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)

RefreshSource = Literal["reports", "map"]


def _aware(value: datetime | None, default: datetime) -> datetime:
    if value is None:
        return default
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _confidence(value: float | None) -> float | None:
    # 범위를 벗어난 값은 버림 (Drop values outside [0, 1])
    if value is None or not 0 <= value <= 1:
        return None
    return value


def issue_from_receipt(
    receipt: SubmissionReceipt,
    location: Location,
    reporter_name: str | None,
    config: Settings | None = None,
) -> Issue:
    """제출 응답으로 새 이슈를 만듭니다. 상태는 항상 pending."""
    config = config or default_settings
    qualifiers = config.CATEGORY_LOCALE_QUALIFIERS
    return Issue(
        id=receipt.issue_id,
        category=classify(receipt.category, qualifiers),
        category_label=normalize_label(receipt.category, qualifiers),
        status=IssueStatus.PENDING,
        location=location,
        image_reference=receipt.image_url,
        reporter_name=reporter_name,
        created_at=_aware(receipt.created_at, datetime.now(timezone.utc)),
        confidence=_confidence(receipt.confidence),
    )


def issue_from_raw(raw: RawIssue, config: Settings | None = None) -> Issue | None:
    """백엔드 레코드를 이슈로 변환합니다.

    Convert a backend record into an Issue.

    Args:
        raw: 백엔드 레코드 (Backend record)
        config: 설정 (Settings for locale qualifiers)

    Returns:
        Issue | None: 변환된 이슈, 좌표가 없거나 상태가 잘못되면 None
                      (None when coordinates are missing/out of range or status is unknown)
    """
    config = config or default_settings
    coords = raw.coordinates()
    if coords is None:
        logger.warning("Skipping issue %s without location", raw.id)
        return None
    lat, lng = coords
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        logger.warning("Skipping issue %s with out-of-range location %s, %s", raw.id, lat, lng)
        return None

    try:
        status = IssueStatus(raw.status) if raw.status else IssueStatus.PENDING
    except ValueError:
        logger.warning("Skipping issue %s with unknown status %r", raw.id, raw.status)
        return None

    qualifiers = config.CATEGORY_LOCALE_QUALIFIERS
    return Issue(
        id=raw.id,
        category=classify(raw.category, qualifiers),
        category_label=normalize_label(raw.category, qualifiers),
        status=status,
        location=Location(latitude=lat, longitude=lng),
        image_reference=raw.image_url,
        reporter_name=raw.user_name,
        created_at=_aware(raw.created_at, UNKNOWN_CREATED_AT),
        confidence=_confidence(raw.confidence),
    )


class IssueService:
    """이슈 컬렉션과 백엔드 사이의 조정자.

    Coordinates the collection with the backend: full refreshes, nearby
    lookups and status updates. Local transition checks run before any
    network call, so an invalid move never reaches the server.
    """

    def __init__(
        self,
        collection: IssueCollection,
        api: IssueApi,
        config: Settings | None = None,
    ) -> None:
        self._collection: IssueCollection = collection
        self._api: IssueApi = api
        self._config: Settings = config or default_settings

    def _convert(self, records: list[RawIssue]) -> list[Issue]:
        issues: list[Issue] = []
        seen: set[str] = set()
        for raw in records:
            issue = issue_from_raw(raw, self._config)
            if issue is None:
                continue
            if issue.id in seen:
                logger.warning("Skipping duplicate issue %s in backend response", issue.id)
                continue
            seen.add(issue.id)
            issues.append(issue)
        return issues

    async def refresh(self, source: RefreshSource = "reports") -> list[Issue]:
        """백엔드에서 전체 목록을 받아 컬렉션을 교체합니다.

        Replace the collection with the backend's current list.

        Args:
            source: "reports" 또는 "map" 엔드포인트 (Which backend listing to use)

        Returns:
            list[Issue]: 새 컬렉션 내용 (New collection contents)

        Raises:
            TransportError: 백엔드 호출 실패, 컬렉션은 그대로 (Backend failure; collection untouched)
        """
        if source == "map":
            records = await self._api.list_map_data()
        else:
            records = await self._api.list_reports()
        issues = self._convert(records)
        self._collection.replace_all(issues)
        logger.info("Refreshed %d issues from %s", len(issues), source)
        return issues

    async def nearby(self, latitude: float, longitude: float, radius: int = 5000) -> list[Issue]:
        """주변 이슈를 조회합니다. 컬렉션은 변경하지 않습니다."""
        return self._convert(await self._api.list_nearby(latitude, longitude, radius))

    async def update_status(self, issue_id: str, new_status: IssueStatus) -> Issue:
        """이슈 상태를 변경합니다.

        Check the transition locally, send it to the backend, then apply it.
        Once the backend has accepted the change no local error is raised: if
        a refresh removed the issue or already moved it at least as far, the
        refreshed state wins.

        Raises:
            NotFoundError: 컬렉션에 없는 이슈 (Issue not in collection)
            InvalidTransitionError: 뒤로 가는 전이 (Backward transition)
            TransportError: 백엔드 실패, 상태는 그대로 (Backend failure; state unchanged)
        """
        current = self._collection.get(issue_id)
        if current.status == new_status:
            return current
        if not is_forward_transition(current.status, new_status):
            raise InvalidTransitionError(
                f"Cannot move issue {issue_id} from {current.status.value} to {new_status.value}"
            )

        await self._api.update_status(issue_id, new_status)

        # 전송 중 새로고침으로 컬렉션이 바뀌었을 수 있음 (A refresh may have landed meanwhile)
        if issue_id not in self._collection:
            logger.info("Issue %s left the collection during its status update", issue_id)
            return current.model_copy(update={"status": new_status})
        latest = self._collection.get(issue_id)
        if not is_forward_transition(latest.status, new_status):
            return latest
        return self._collection.update_status(issue_id, new_status)

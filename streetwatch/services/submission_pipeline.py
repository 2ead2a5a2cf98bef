"""신고 제출 파이프라인.

Issue submission pipeline: validate → locate → submit → reconcile for one
report attempt, exposed to the UI as a single state machine:

    idle → validating → awaiting_location → submitting → succeeded | failed

Rules:
    - Validation runs synchronously before any location or network work.
    - A second ``submit()`` while a submission is in flight is a no-op.
    - On success the new issue is in the collection before ``succeeded``
      becomes observable; on failure the collection is untouched. If a
      refresh already brought the new id in, the stored record is kept.
    - Starting a new attempt discards the previous one; a late result from a
      discarded attempt never changes the new attempt.
"""

import asyncio
from dataclasses import dataclass

from streetwatch.clients.issue_api_client import IssueApi
from streetwatch.config import Settings, settings as default_settings
from streetwatch.repositories.issue_collection import IssueCollection
from streetwatch.schemas.issue import Issue, Location
from streetwatch.schemas.submission import (
    FailureReason,
    ImageUpload,
    SubmissionSnapshot,
    SubmissionState,
    ValidatedImage,
)
from streetwatch.services.geo_locator import GeoLocator
from streetwatch.services.issue_service import issue_from_receipt
from streetwatch.services.media_validator import MediaValidator
from streetwatch.services.session_context import SessionContext
from streetwatch.utils.exceptions import (
    InvalidMediaError,
    NotAuthenticatedError,
    PreconditionNotMetError,
    TransportError,
)
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SubmissionAttempt:
    """진행 중인 한 번의 신고 시도: 저장되지 않음 (Transient, never persisted)."""

    state: SubmissionState = SubmissionState.IDLE
    image: ValidatedImage | None = None
    location: Location | None = None
    location_resolved: bool = False
    issue: Issue | None = None
    failure_reason: FailureReason | None = None
    failure_message: str | None = None


class IssueSubmissionPipeline:
    """한 리포팅 세션의 신고 제출 상태 기계.

    Submission state machine for one reporting session.

    Attributes:
        state: 현재 시도의 상태 (State of the active attempt)
    """

    def __init__(
        self,
        collection: IssueCollection,
        api: IssueApi,
        session: SessionContext,
        validator: MediaValidator | None = None,
        locator: GeoLocator | None = None,
        config: Settings | None = None,
    ) -> None:
        self._config: Settings = config or default_settings
        self._collection: IssueCollection = collection
        self._api: IssueApi = api
        self._session: SessionContext = session
        self._validator: MediaValidator = validator or MediaValidator(self._config)
        self._locator: GeoLocator = locator or GeoLocator(config=self._config)
        self._attempt: SubmissionAttempt = SubmissionAttempt()
        self._in_flight: bool = False
        self._reset_handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> SubmissionState:
        return self._attempt.state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def snapshot(self) -> SubmissionSnapshot:
        """현재 시도의 읽기 전용 스냅샷 (Read-only view of the active attempt)."""
        attempt = self._attempt
        image, issue = attempt.image, attempt.issue
        return SubmissionSnapshot(
            state=attempt.state,
            failure_reason=attempt.failure_reason,
            failure_message=attempt.failure_message,
            image_name=image.filename if image else None,
            image_type=image.content_type if image else None,
            image_size=image.size if image else None,
            location=attempt.location,
            location_resolved=attempt.location_resolved,
            issue_id=issue.id if issue else None,
            category=issue.category if issue else None,
            category_label=issue.category_label if issue else None,
            confidence=issue.confidence if issue else None,
            submitted_at=issue.created_at if issue else None,
        )

    def preview_data_url(self) -> str | None:
        image = self._attempt.image
        return image.preview_data_url() if image else None

    # --- 전이 (Transitions) ---

    async def select_image(self, upload: ImageUpload | None, locator: GeoLocator | None = None) -> SubmissionSnapshot:
        """새 시도를 시작하고 이미지를 검증한 뒤 위치를 확인합니다.

        Start a new attempt: validate the image synchronously, then resolve
        the location. A rejected image never reaches the locator.

        Args:
            upload: 선택된 이미지 (Selected image)
            locator: 이번 시도에만 쓸 위치 확인기 (Per-attempt locator override)

        Returns:
            SubmissionSnapshot: 처리 후 스냅샷 (Snapshot after validation and location)
        """
        self._cancel_auto_reset()
        attempt = SubmissionAttempt(state=SubmissionState.VALIDATING)
        self._attempt = attempt

        try:
            attempt.image = self._validator.validate(upload)
        except InvalidMediaError as exc:
            self._fail(attempt, FailureReason.INVALID_MEDIA, exc.detail)
            return self.snapshot()

        attempt.state = SubmissionState.AWAITING_LOCATION
        location = await (locator or self._locator).resolve()
        # 폐기된 시도에는 기록하지 않음 (Discarded attempts keep no late results)
        if attempt is self._attempt:
            attempt.location = location
            attempt.location_resolved = True
        return self.snapshot()

    async def submit(self) -> SubmissionSnapshot:
        """현재 시도를 제출합니다.

        Submit the active attempt. Guarded: a call while a submission is in
        flight, while the location is still being resolved, or after success
        returns the current snapshot unchanged.

        Returns:
            SubmissionSnapshot: 제출 후 스냅샷 (Snapshot after the attempt settles)
        """
        attempt = self._attempt
        if self._in_flight or attempt.state in (SubmissionState.SUBMITTING, SubmissionState.SUCCEEDED):
            return self.snapshot()
        # 위치 확인 중에는 대기 (Still validating or waiting on the locator)
        if attempt.state == SubmissionState.VALIDATING or (
            attempt.state == SubmissionState.AWAITING_LOCATION and not attempt.location_resolved
        ):
            return self.snapshot()

        if not self._session.is_authenticated():
            self._fail(attempt, FailureReason.NOT_AUTHENTICATED, NotAuthenticatedError().detail)
            return self.snapshot()

        if attempt.image is None or attempt.location is None:
            logger.warning(
                "Submit without %s (state=%s)",
                "image" if attempt.image is None else "location",
                attempt.state.value,
            )
            self._fail(attempt, FailureReason.PRECONDITION_NOT_MET, PreconditionNotMetError().detail)
            return self.snapshot()

        image, location = attempt.image, attempt.location
        attempt.state = SubmissionState.SUBMITTING
        attempt.failure_reason = None
        attempt.failure_message = None
        self._in_flight = True
        try:
            receipt = await self._api.submit_report(image, location.latitude, location.longitude)
        except TransportError as exc:
            logger.warning("Report submission failed: %s", exc.detail)
            self._fail(attempt, FailureReason.TRANSPORT, exc.detail)
            return self.snapshot()
        except Exception as exc:
            logger.exception("Report submission raised unexpectedly")
            self._fail(attempt, FailureReason.TRANSPORT, str(exc) or type(exc).__name__)
            return self.snapshot()
        finally:
            self._in_flight = False

        # 성공 상태 노출 전에 컬렉션 반영 (Collection updated before success is observable)
        issue = issue_from_receipt(receipt, location, self._session.user_name, self._config)
        if issue.id in self._collection:
            # 대기 중 새로고침이 이미 가져옴 (A refresh during the upload already stored it)
            logger.info("Issue %s already in collection, keeping stored record", issue.id)
            issue = self._collection.get(issue.id)
        else:
            self._collection.insert(issue)

        attempt.issue = issue
        attempt.state = SubmissionState.SUCCEEDED
        logger.info("Issue %s reported as %s", issue.id, issue.category.value)
        if attempt is self._attempt:
            self._schedule_auto_reset(attempt)
        return self.snapshot()

    def reset(self) -> SubmissionSnapshot:
        """현재 시도를 버리고 idle로 돌아갑니다 ("다른 사진 올리기")."""
        self._cancel_auto_reset()
        self._attempt = SubmissionAttempt()
        return self.snapshot()

    # --- 내부 (Internals) ---

    def _fail(self, attempt: SubmissionAttempt, reason: FailureReason, message: str) -> None:
        attempt.state = SubmissionState.FAILED
        attempt.failure_reason = reason
        attempt.failure_message = message

    def _schedule_auto_reset(self, attempt: SubmissionAttempt) -> None:
        delay = self._config.SUCCESS_RESET_SECONDS
        if delay <= 0:
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._auto_reset, attempt)

    def _auto_reset(self, attempt: SubmissionAttempt) -> None:
        self._reset_handle = None
        if attempt is self._attempt and attempt.state == SubmissionState.SUCCEEDED:
            self._attempt = SubmissionAttempt()

    def _cancel_auto_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

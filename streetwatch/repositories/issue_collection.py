"""이슈 컬렉션: 프로세스 전역의 권위 있는 이슈 집합.

Issue collection: the authoritative in-memory set of known issues.
Keeps insertion order, enforces id uniqueness and forward-only status
transitions, and notifies listeners after every applied change so derived
views (map, catalog) know when to recompute.

Mutations and reads share one lock: a reader never observes a partially
applied change. Listeners run after the lock is released.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

from streetwatch.schemas.issue import Issue, IssueStatus
from streetwatch.utils.exceptions import DuplicateIdError, InvalidTransitionError, NotFoundError
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)

# 상태 순서 (뒤로 가는 전이 금지, in_progress 건너뛰기 허용)
# Status order: backward moves rejected, skipping in_progress allowed
_STATUS_ORDER: dict[IssueStatus, int] = {
    IssueStatus.PENDING: 0,
    IssueStatus.IN_PROGRESS: 1,
    IssueStatus.COMPLETED: 2,
}


def is_forward_transition(current: IssueStatus, new: IssueStatus) -> bool:
    return _STATUS_ORDER[new] > _STATUS_ORDER[current]


class ChangeKind(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    REFRESHED = "refreshed"


@dataclass(frozen=True)
class CollectionChange:
    """컬렉션 변경 알림 (Change notification delivered to listeners)."""

    kind: ChangeKind
    version: int
    issue_ids: tuple[str, ...] = field(default_factory=tuple)


CollectionListener = Callable[[CollectionChange], None]


class IssueCollection:
    """삽입 순서를 유지하는 이슈 저장소.

    Insertion-ordered issue store. Issues are immutable; a status change
    swaps in a new instance under the lock.

    Attributes:
        version: 변경마다 증가하는 번호 (Monotonic counter bumped on every change)
    """

    def __init__(self, issues: Iterable[Issue] = ()) -> None:
        self._lock = threading.RLock()
        self._issues: dict[str, Issue] = {}
        self._listeners: list[CollectionListener] = []
        self._version: int = 0
        for issue in issues:
            self.insert(issue)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._issues)

    def __contains__(self, issue_id: object) -> bool:
        with self._lock:
            return issue_id in self._issues

    # --- 조회 (Reads) ---

    def all(self) -> list[Issue]:
        with self._lock:
            return list(self._issues.values())

    def by_status(self, status: IssueStatus) -> list[Issue]:
        with self._lock:
            return [i for i in self._issues.values() if i.status == status]

    def get(self, issue_id: str) -> Issue:
        with self._lock:
            issue = self._issues.get(issue_id)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found")
        return issue

    # --- 변경 (Mutations) ---

    def insert(self, issue: Issue) -> None:
        """새 이슈를 추가합니다.

        Append a new issue.

        Raises:
            DuplicateIdError: 같은 ID가 이미 있을 때 (Identifier already present)
        """
        with self._lock:
            if issue.id in self._issues:
                raise DuplicateIdError(f"Issue {issue.id} already exists")
            self._issues[issue.id] = issue
            change = self._bump(ChangeKind.INSERTED, (issue.id,))
        self._notify(change)

    def update_status(self, issue_id: str, new_status: IssueStatus) -> Issue:
        """이슈 상태를 앞으로만 변경합니다.

        Move an issue forward in its lifecycle. Setting the current status
        again is a no-op and emits no notification.

        Args:
            issue_id: 이슈 ID (Issue identifier)
            new_status: 새 상태 (Target status)

        Returns:
            Issue: 변경 후 이슈 (The issue after the update)

        Raises:
            NotFoundError: 이슈가 없을 때 (Unknown identifier)
            InvalidTransitionError: 뒤로 가는 전이 (Backward transition; state unchanged)
        """
        with self._lock:
            current = self._issues.get(issue_id)
            if current is None:
                raise NotFoundError(f"Issue {issue_id} not found")
            if current.status == new_status:
                return current
            if not is_forward_transition(current.status, new_status):
                raise InvalidTransitionError(
                    f"Cannot move issue {issue_id} from {current.status.value} to {new_status.value}"
                )
            updated = current.model_copy(update={"status": new_status})
            self._issues[issue_id] = updated
            change = self._bump(ChangeKind.UPDATED, (issue_id,))
        self._notify(change)
        return updated

    def replace_all(self, issues: Sequence[Issue]) -> None:
        """전체 새로고침: 외부 원본으로 컬렉션을 교체합니다.

        Full refresh from the external source of truth. The new contents are
        validated before anything is swapped in.

        Raises:
            DuplicateIdError: 입력에 중복 ID가 있을 때 (Input contains a repeated id)
        """
        fresh: dict[str, Issue] = {}
        for issue in issues:
            if issue.id in fresh:
                raise DuplicateIdError(f"Issue {issue.id} appears twice in refresh")
            fresh[issue.id] = issue
        with self._lock:
            self._issues = fresh
            change = self._bump(ChangeKind.REFRESHED, tuple(fresh))
        self._notify(change)

    # --- 구독 (Subscriptions) ---

    def subscribe(self, listener: CollectionListener) -> Callable[[], None]:
        """변경 리스너를 등록하고 해제 함수를 반환합니다."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _bump(self, kind: ChangeKind, ids: tuple[str, ...]) -> CollectionChange:
        self._version += 1
        return CollectionChange(kind=kind, version=self._version, issue_ids=ids)

    def _notify(self, change: CollectionChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                # 리스너 오류가 변경을 되돌리지 않도록 (A failing view must not undo the change)
                logger.exception("Collection listener failed on %s", change.kind.value)

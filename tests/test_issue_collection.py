"""이슈 컬렉션 테스트.

Issue collection tests: uniqueness, forward-only status, notifications.
"""

import pytest

from streetwatch.repositories.issue_collection import ChangeKind, IssueCollection, is_forward_transition
from streetwatch.schemas.issue import IssueStatus
from streetwatch.utils.exceptions import DuplicateIdError, InvalidTransitionError, NotFoundError
from tests.conftest import make_issue


class TestInsert:

    def test_keeps_insertion_order(self, collection):
        for issue_id in ("c", "a", "b"):
            collection.insert(make_issue(issue_id))

        assert [i.id for i in collection.all()] == ["c", "a", "b"]
        assert len(collection) == 3
        assert "a" in collection

    def test_duplicate_id_is_rejected(self, collection):
        """중복 ID는 거부되고 컬렉션은 그대로."""
        collection.insert(make_issue("a", reporter_name="first"))

        with pytest.raises(DuplicateIdError):
            collection.insert(make_issue("a", reporter_name="second"))
        assert len(collection) == 1
        assert collection.get("a").reporter_name == "first"

    def test_get_unknown(self, collection):
        with pytest.raises(NotFoundError):
            collection.get("missing")

    def test_initial_issues(self):
        collection = IssueCollection([make_issue("a"), make_issue("b")])
        assert [i.id for i in collection.all()] == ["a", "b"]


class TestUpdateStatus:

    def test_forward_transitions(self, collection):
        collection.insert(make_issue("a"))

        assert collection.update_status("a", IssueStatus.IN_PROGRESS).status is IssueStatus.IN_PROGRESS
        assert collection.update_status("a", IssueStatus.COMPLETED).status is IssueStatus.COMPLETED
        assert collection.get("a").status is IssueStatus.COMPLETED

    def test_skipping_in_progress_is_allowed(self, collection):
        collection.insert(make_issue("a"))
        assert collection.update_status("a", IssueStatus.COMPLETED).status is IssueStatus.COMPLETED

    def test_backward_transition_is_rejected(self, collection):
        """completed → pending 은 실패하고 상태 유지."""
        collection.insert(make_issue("a", IssueStatus.COMPLETED))

        with pytest.raises(InvalidTransitionError):
            collection.update_status("a", IssueStatus.PENDING)
        assert collection.get("a").status is IssueStatus.COMPLETED

    def test_unknown_issue(self, collection):
        with pytest.raises(NotFoundError):
            collection.update_status("missing", IssueStatus.COMPLETED)

    def test_same_status_is_noop(self, collection):
        collection.insert(make_issue("a"))
        version = collection.version
        changes = []
        collection.subscribe(changes.append)

        collection.update_status("a", IssueStatus.PENDING)

        assert collection.version == version
        assert changes == []

    def test_update_keeps_other_fields(self, collection):
        original = make_issue("a", reporter_name="Ravi", image_reference="/uploads/a.jpg")
        collection.insert(original)

        updated = collection.update_status("a", IssueStatus.IN_PROGRESS)

        assert updated.reporter_name == "Ravi"
        assert updated.image_reference == "/uploads/a.jpg"
        assert updated.created_at == original.created_at
        assert original.status is IssueStatus.PENDING

    @pytest.mark.parametrize(
        "current, new, expected",
        [
            (IssueStatus.PENDING, IssueStatus.IN_PROGRESS, True),
            (IssueStatus.PENDING, IssueStatus.COMPLETED, True),
            (IssueStatus.IN_PROGRESS, IssueStatus.COMPLETED, True),
            (IssueStatus.IN_PROGRESS, IssueStatus.PENDING, False),
            (IssueStatus.COMPLETED, IssueStatus.IN_PROGRESS, False),
            (IssueStatus.PENDING, IssueStatus.PENDING, False),
        ],
    )
    def test_is_forward_transition(self, current, new, expected):
        assert is_forward_transition(current, new) is expected


class TestQueries:

    def test_by_status(self, collection):
        collection.insert(make_issue("a"))
        collection.insert(make_issue("b", IssueStatus.COMPLETED))
        collection.insert(make_issue("c"))

        assert [i.id for i in collection.by_status(IssueStatus.PENDING)] == ["a", "c"]
        assert [i.id for i in collection.by_status(IssueStatus.IN_PROGRESS)] == []


class TestReplaceAll:

    def test_replaces_contents(self, collection):
        collection.insert(make_issue("old"))

        collection.replace_all([make_issue("x"), make_issue("y")])

        assert [i.id for i in collection.all()] == ["x", "y"]

    def test_duplicate_in_refresh_leaves_collection_untouched(self, collection):
        collection.insert(make_issue("old"))
        version = collection.version

        with pytest.raises(DuplicateIdError):
            collection.replace_all([make_issue("x"), make_issue("x")])
        assert [i.id for i in collection.all()] == ["old"]
        assert collection.version == version


class TestSubscribe:
    """변경 알림."""

    def test_notifies_each_change(self, collection):
        changes = []
        collection.subscribe(changes.append)

        collection.insert(make_issue("a"))
        collection.update_status("a", IssueStatus.IN_PROGRESS)
        collection.replace_all([make_issue("b")])

        assert [c.kind for c in changes] == [ChangeKind.INSERTED, ChangeKind.UPDATED, ChangeKind.REFRESHED]
        assert [c.version for c in changes] == [1, 2, 3]
        assert changes[0].issue_ids == ("a",)

    def test_listener_sees_applied_change(self, collection):
        seen = []
        collection.subscribe(lambda change: seen.append([i.id for i in collection.all()]))

        collection.insert(make_issue("a"))

        assert seen == [["a"]]

    def test_unsubscribe(self, collection):
        changes = []
        unsubscribe = collection.subscribe(changes.append)
        unsubscribe()
        unsubscribe()

        collection.insert(make_issue("a"))
        assert changes == []

    def test_failing_listener_does_not_undo_change(self, collection):
        def broken(change):
            raise RuntimeError("view exploded")

        changes = []
        collection.subscribe(broken)
        collection.subscribe(changes.append)

        collection.insert(make_issue("a"))

        assert "a" in collection
        assert len(changes) == 1

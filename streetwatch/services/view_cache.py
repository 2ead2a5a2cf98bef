"""파생 뷰 캐시.

Derived view cache: memoizes map projections and catalog rows per
collection version and drops them when the collection announces a change.
"""

from typing import Callable

from streetwatch.repositories.issue_collection import CollectionChange, IssueCollection
from streetwatch.schemas.issue import IssueStatus, StatusFilter
from streetwatch.schemas.view import MapProjection, ReportRow
from streetwatch.services.map_projector import MapProjector
from streetwatch.services.report_catalog import ReportCatalog
from streetwatch.utils.pagination import Page


class ViewCache:
    """컬렉션 변경 알림으로 무효화되는 뷰 캐시."""

    def __init__(self, collection: IssueCollection, projector: MapProjector, catalog: ReportCatalog) -> None:
        self._collection: IssueCollection = collection
        self._projector: MapProjector = projector
        self._catalog: ReportCatalog = catalog
        self._maps: dict[str, MapProjection] = {}
        self._rows: list[ReportRow] | None = None
        self._unsubscribe: Callable[[], None] = collection.subscribe(self._on_change)

    def _on_change(self, change: CollectionChange) -> None:
        self._maps.clear()
        self._rows = None

    def close(self) -> None:
        self._unsubscribe()

    def map(self, status_filter: StatusFilter | IssueStatus = "all") -> MapProjection:
        key = status_filter.value if isinstance(status_filter, IssueStatus) else status_filter
        if key not in self._maps:
            self._maps[key] = self._projector.project(self._collection.all(), key)
        return self._maps[key]

    def rows(self) -> list[ReportRow]:
        if self._rows is None:
            self._rows = self._catalog.list(self._collection.all())
        return self._rows

    def page(self, page: int = 1, per_page: int | None = None) -> Page[ReportRow]:
        return self._catalog.paginate_rows(self.rows(), page, per_page)

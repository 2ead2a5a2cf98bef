"""신고 목록 서비스.

Report catalog: sorted, paginated tabular view of the issue collection.
Most recent first; equal timestamps keep insertion order.
"""

from typing import Sequence

from streetwatch.config import Settings, settings as default_settings
from streetwatch.schemas.issue import Issue
from streetwatch.schemas.view import ReportRow
from streetwatch.services.image_url_resolver import ImageUrlResolver
from streetwatch.services.map_projector import display_payload
from streetwatch.utils.formatting import status_label
from streetwatch.utils.pagination import Page, page_count, paginate


class ReportCatalog:
    """이슈 목록 뷰: 최신순 정렬, 1부터 시작하는 페이지."""

    def __init__(self, resolver: ImageUrlResolver, config: Settings | None = None) -> None:
        config = config or default_settings
        self._resolver: ImageUrlResolver = resolver
        self.default_page_size: int = config.CATALOG_PAGE_SIZE
        self.max_page_size: int = config.CATALOG_MAX_PAGE_SIZE

    def row(self, issue: Issue) -> ReportRow:
        return ReportRow(
            id=issue.id,
            status=issue.status,
            status_label=status_label(issue.status),
            category=issue.category,
            created_at=issue.created_at,
            image_url=self._resolver.resolve(issue.image_reference),
            confidence=issue.confidence,
            display=display_payload(issue),
        )

    def list(self, issues: Sequence[Issue]) -> list[ReportRow]:
        """최신순 행 목록 (sorted() is stable, so ties keep insertion order)."""
        ordered = sorted(issues, key=lambda i: i.created_at, reverse=True)
        return [self.row(issue) for issue in ordered]

    def page(self, issues: Sequence[Issue], page: int = 1, per_page: int | None = None) -> Page[ReportRow]:
        """정렬된 목록의 한 페이지를 반환합니다.

        Return one page of the sorted rows.

        Args:
            issues: 이슈 목록 (Issues)
            page: 페이지 번호, 1부터 시작 (1-based page number)
            per_page: 페이지 크기, 최대값으로 제한 (Page size, capped at CATALOG_MAX_PAGE_SIZE)

        Returns:
            Page: 행 목록과 페이지 메타데이터 (Rows plus pagination metadata)
        """
        return self.paginate_rows(self.list(issues), page, per_page)

    def paginate_rows(self, rows: Sequence[ReportRow], page: int = 1, per_page: int | None = None) -> Page[ReportRow]:
        size = min(per_page or self.default_page_size, self.max_page_size)
        items, total = paginate(rows, page, size)
        return Page[ReportRow](items=list(items), total=total, page=page, per_page=size, pages=page_count(total, size))

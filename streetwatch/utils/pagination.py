"""페이지네이션 유틸리티 모듈.

Pagination for already-ordered in-memory sequences.
Pages are 1-based; a page past the end is empty rather than an error.
"""

import math
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """한 페이지의 항목과 메타데이터.

    One page of items plus the metadata a list view needs for its controls.

    Attributes:
        items: 현재 페이지 항목 (Items on this page)
        total: 전체 항목 수 (Item count across all pages)
        page: 페이지 번호, 1부터 시작 (1-based page number)
        per_page: 적용된 페이지 크기 (Page size actually applied)
        pages: 전체 페이지 수, 비어 있으면 0 (Page count; 0 when empty)
    """

    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int


def paginate(items: Sequence[T], page: int = 1, per_page: int = 20) -> tuple[Sequence[T], int]:
    """시퀀스에서 한 페이지를 잘라 (항목, 전체 개수)를 반환합니다.

    Raises:
        ValueError: page 또는 per_page가 1 미만 (Non-positive page or size)
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be >= 1")

    start = (page - 1) * per_page
    return items[start:start + per_page], len(items)


def page_count(total: int, per_page: int) -> int:
    return math.ceil(total / per_page) if total else 0

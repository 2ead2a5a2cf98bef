"""분류 라벨 정규화 유틸리티.

Classifier label normalization.
The backend classifier returns an untrusted free-form string such as
``"pot_hole_india"``. Two deterministic steps turn it into something the
core can rely on:

    normalize_label("pot_hole_india")    -> "Pot Hole"
    classify("pot_hole_india")           -> IssueCategory.POTHOLE

Locale qualifiers are whole tokens listed in ``CATEGORY_LOCALE_QUALIFIERS``.
"""

import re
from typing import Iterable

from streetwatch.config import settings
from streetwatch.schemas.issue import IssueCategory

UNKNOWN_LABEL: str = "Unknown Issue"

_SEPARATORS = re.compile(r"[\s_\-./]+")

# 공백 제거 후 소문자 라벨 → 분류 (Compacted lowercase label → category)
_ALIASES: dict[str, IssueCategory] = {
    "pothole": IssueCategory.POTHOLE,
    "potholes": IssueCategory.POTHOLE,
    "roadcrack": IssueCategory.POTHOLE,
    "brokenstreetlight": IssueCategory.BROKEN_STREETLIGHT,
    "streetlight": IssueCategory.BROKEN_STREETLIGHT,
    "brokenlight": IssueCategory.BROKEN_STREETLIGHT,
    "streetlightout": IssueCategory.BROKEN_STREETLIGHT,
    "graffiti": IssueCategory.GRAFFITI,
    "vandalism": IssueCategory.GRAFFITI,
    "flytipping": IssueCategory.FLY_TIPPING,
    "dumping": IssueCategory.FLY_TIPPING,
    "illegaldumping": IssueCategory.FLY_TIPPING,
    "garbage": IssueCategory.FLY_TIPPING,
    "damagedsign": IssueCategory.DAMAGED_SIGN,
    "damagedroadsign": IssueCategory.DAMAGED_SIGN,
    "brokensign": IssueCategory.DAMAGED_SIGN,
    "roadsign": IssueCategory.DAMAGED_SIGN,
}


def _tokens(raw: str | None, qualifiers: Iterable[str]) -> list[str]:
    if not raw:
        return []
    skip = {q.lower() for q in qualifiers}
    return [t for t in _SEPARATORS.split(raw.strip()) if t and t.lower() not in skip]


def normalize_label(raw: str | None, qualifiers: Iterable[str] | None = None) -> str:
    """분류 문자열을 표시용 라벨로 변환합니다.

    Strip locale qualifiers, collapse separators to single spaces,
    and title-case each word.

    Args:
        raw: 분류기 원본 문자열 (Raw classifier string, may be None)
        qualifiers: 제거할 지역 한정자 (Locale qualifiers; defaults to settings)

    Returns:
        str: 표시용 라벨, 비어 있으면 "Unknown Issue"
             (Display label, or "Unknown Issue" when nothing remains)
    """
    if qualifiers is None:
        qualifiers = settings.CATEGORY_LOCALE_QUALIFIERS
    words = _tokens(raw, qualifiers)
    if not words:
        return UNKNOWN_LABEL
    return " ".join(w[0].upper() + w[1:].lower() for w in words)


def classify(raw: str | None, qualifiers: Iterable[str] | None = None) -> IssueCategory:
    """분류 문자열을 고정 분류 값으로 매핑합니다. 알 수 없으면 OTHER."""
    if qualifiers is None:
        qualifiers = settings.CATEGORY_LOCALE_QUALIFIERS
    key = "".join(_tokens(raw, qualifiers)).lower()
    if not key:
        return IssueCategory.OTHER
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return IssueCategory(key)
    except ValueError:
        return IssueCategory.OTHER

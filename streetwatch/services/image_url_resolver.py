"""이미지 URL 해석기.

Image URL resolver: turns a stored image path into an absolute URL.
Absolute ``http(s)`` URLs pass through; relative paths are joined to the
configured API base.
"""


class ImageUrlResolver:

    def __init__(self, base_url: str) -> None:
        self._base_url: str = base_url.rstrip("/")

    def resolve(self, raw_path: str | None) -> str | None:
        if not raw_path:
            return None
        if raw_path.startswith(("http://", "https://")):
            return raw_path
        # 앞쪽 슬래시 제거 후 결합 (Strip leading slash, then join)
        return f"{self._base_url}/{raw_path.lstrip('/')}"

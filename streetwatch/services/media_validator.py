"""이미지 검증 서비스.

Media validator: enforces type and size limits on a selected image
before any location lookup or network call happens.
"""

from streetwatch.config import Settings, settings as default_settings
from streetwatch.schemas.submission import ImageUpload, ValidatedImage
from streetwatch.utils.exceptions import InvalidMediaError


class MediaValidator:
    """이미지 형식/크기 검증기.

    Synchronous, side-effect free. Raises ``InvalidMediaError`` on rejection.
    """

    def __init__(self, config: Settings | None = None) -> None:
        config = config or default_settings
        self.max_bytes: int = config.MAX_IMAGE_BYTES
        self.allowed_types: frozenset[str] = frozenset(t.lower() for t in config.ALLOWED_IMAGE_TYPES)

    def validate(self, upload: ImageUpload | None) -> ValidatedImage:
        """업로드 이미지를 검증합니다.

        Validate a selected image.

        Args:
            upload: 사용자가 선택한 이미지 (Selected image, None if nothing chosen)

        Returns:
            ValidatedImage: 검증된 이미지 (Image usable for preview and upload)

        Raises:
            InvalidMediaError: 이미지 없음, 허용되지 않는 형식, 크기 초과
                               (Missing image, disallowed type, or too large)
        """
        if upload is None or not upload.content:
            raise InvalidMediaError("Invalid image file")

        content_type = (upload.content_type or "").split(";", 1)[0].strip().lower()
        if content_type not in self.allowed_types:
            raise InvalidMediaError("Only JPG, JPEG, and PNG images are allowed")

        if len(upload.content) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise InvalidMediaError(f"Image file size must be less than {limit_mb}MB")

        return ValidatedImage(
            filename=upload.filename,
            content_type=content_type,
            content=upload.content,
        )

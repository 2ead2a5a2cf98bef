"""위치 확인 서비스.

GeoLocator: resolves the device position with a bounded wait and a
configured fallback coordinate. ``resolve()`` never raises.
"""

import asyncio
from typing import Awaitable, Callable

from pydantic import ValidationError

from streetwatch.config import Settings, settings as default_settings
from streetwatch.schemas.issue import Location, LocationSource
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)

# 기기 위치 제공자: (위도, 경도)를 반환하는 비동기 호출
# Device position provider: async callable returning (latitude, longitude).
# Raises PermissionError when the user denies access.
PositionProvider = Callable[[], Awaitable[tuple[float, float]]]


class GeoLocator:
    """기기 좌표를 한 번 요청하고, 실패하면 기본 좌표를 반환합니다.

    Single request per call, no retry loop. A denied permission is
    remembered so the prompt is not raised again.
    """

    def __init__(
        self,
        provider: PositionProvider | None = None,
        config: Settings | None = None,
    ) -> None:
        config = config or default_settings
        self._provider: PositionProvider | None = provider
        self._timeout: float = config.GEOLOCATION_TIMEOUT_SECONDS
        self._fallback: Location = Location(
            latitude=config.FALLBACK_LATITUDE,
            longitude=config.FALLBACK_LONGITUDE,
            source=LocationSource.DEFAULT,
        )
        self._permission_denied: bool = False

    @property
    def fallback(self) -> Location:
        return self._fallback

    @property
    def permission_denied(self) -> bool:
        return self._permission_denied

    async def resolve(self) -> Location:
        """현재 위치를 확인합니다.

        Resolve the current position.

        Returns:
            Location: 기기 좌표(source=device) 또는 기본 좌표(source=default)
                      (Device coordinates, or the fallback tagged ``default``)
        """
        if self._provider is None:
            logger.info("Geolocation unsupported; using default location")
            return self._fallback
        if self._permission_denied:
            return self._fallback

        try:
            lat, lng = await asyncio.wait_for(self._provider(), timeout=self._timeout)
            return Location(latitude=lat, longitude=lng, source=LocationSource.DEVICE)
        except PermissionError:
            self._permission_denied = True
            logger.info("Geolocation permission denied; using default location")
        except asyncio.TimeoutError:
            logger.warning("Geolocation timed out after %.1fs; using default location", self._timeout)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Geolocation returned an invalid position (%s); using default location", exc)
        except Exception as exc:  # 제공자 오류는 기본 좌표로 대체 (Provider failure → fallback)
            logger.warning("Geolocation failed: %s: %s; using default location", type(exc).__name__, exc)
        return self._fallback


def static_position(latitude: float | None, longitude: float | None) -> PositionProvider:
    """클라이언트가 보고한 좌표를 제공자로 감쌉니다.

    Wrap coordinates reported by the client (e.g. the browser's geolocation
    result forwarded with the upload). Missing coordinates mean the client
    could not or would not share its position.
    """

    async def _provide() -> tuple[float, float]:
        if latitude is None or longitude is None:
            raise PermissionError("Position not shared by the client")
        return latitude, longitude

    return _provide

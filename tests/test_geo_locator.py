"""위치 확인 테스트.

GeoLocator tests: device position, fallback, bounded wait.
"""

from streetwatch.schemas.issue import LocationSource
from streetwatch.services.geo_locator import GeoLocator, static_position
from tests.conftest import FakePositionProvider


class TestGeoLocator:

    async def test_device_position(self, config):
        provider = FakePositionProvider((12.9716, 77.5946))
        location = await GeoLocator(provider, config).resolve()

        assert (location.latitude, location.longitude) == (12.9716, 77.5946)
        assert location.source is LocationSource.DEVICE
        assert provider.calls == 1

    async def test_permission_denied_falls_back_and_is_remembered(self, config):
        """거부 후에는 다시 묻지 않음."""
        provider = FakePositionProvider(error=PermissionError("denied"))
        locator = GeoLocator(provider, config)

        first = await locator.resolve()
        second = await locator.resolve()

        assert first.source is LocationSource.DEFAULT
        assert (first.latitude, first.longitude) == (51.505, -0.09)
        assert second == first
        assert provider.calls == 1
        assert locator.permission_denied

    async def test_timeout_falls_back(self, config):
        provider = FakePositionProvider(delay=5)
        location = await GeoLocator(provider, config).resolve()

        assert location.source is LocationSource.DEFAULT

    async def test_timeout_does_not_block_next_request(self, config):
        provider = FakePositionProvider(delay=5)
        locator = GeoLocator(provider, config)
        await locator.resolve()

        provider.delay = 0
        location = await locator.resolve()
        assert location.source is LocationSource.DEVICE
        assert provider.calls == 2

    async def test_unsupported_falls_back(self, config):
        location = await GeoLocator(None, config).resolve()
        assert location.source is LocationSource.DEFAULT

    async def test_provider_error_falls_back(self, config):
        provider = FakePositionProvider(error=RuntimeError("gps unavailable"))
        location = await GeoLocator(provider, config).resolve()
        assert location.source is LocationSource.DEFAULT

    async def test_out_of_range_position_falls_back(self, config):
        provider = FakePositionProvider((123.0, 10.0))
        location = await GeoLocator(provider, config).resolve()
        assert location.source is LocationSource.DEFAULT

    async def test_static_position(self, config):
        shared = await GeoLocator(static_position(40.0, -3.7), config).resolve()
        withheld = await GeoLocator(static_position(None, None), config).resolve()

        assert shared.source is LocationSource.DEVICE
        assert withheld.source is LocationSource.DEFAULT

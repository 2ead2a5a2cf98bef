"""이슈 백엔드 HTTP 클라이언트 테스트.

Issue backend client tests against an httpx.MockTransport.
"""

import json

import httpx
import pytest

from streetwatch.clients.issue_api_client import IssueApiClient
from streetwatch.schemas.issue import IssueStatus
from streetwatch.schemas.submission import ValidatedImage
from streetwatch.services.session_context import SessionContext
from streetwatch.utils.exceptions import TransportError


def _image() -> ValidatedImage:
    return ValidatedImage(filename="photo.jpg", content_type="image/jpeg", content=b"\xff\xd8jpeg")


def _client(config, handler, session: SessionContext | None = None) -> IssueApiClient:
    return IssueApiClient(
        session or SessionContext("token-123", "Asha"),
        config,
        transport=httpx.MockTransport(handler),
    )


class TestSubmitReport:

    async def test_multipart_request_and_receipt(self, config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                json={"issueId": "srv-9", "category": "pot_hole_india", "confidence": 0.8, "imageUrl": "/uploads/9.jpg"},
            )

        client = _client(config, handler)
        receipt = await client.submit_report(_image(), 28.7041, 77.1025)
        await client.aclose()

        assert receipt.issue_id == "srv-9"
        assert receipt.category == "pot_hole_india"
        assert receipt.image_url == "/uploads/9.jpg"

        request = seen[0]
        assert request.method == "POST"
        assert request.url == "http://backend.test/api/issues/report"
        assert request.headers["Authorization"] == "Bearer token-123"
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="image"; filename="photo.jpg"' in body
        assert b'name="latitude"' in body and b"28.7041" in body
        assert b'name="longitude"' in body and b"77.1025" in body

    async def test_wrapped_receipt(self, config):
        def handler(request):
            return httpx.Response(200, json={"message": "ok", "issue": {"_id": 12, "issue": "graffiti"}})

        client = _client(config, handler)
        receipt = await client.submit_report(_image(), 1.0, 2.0)
        await client.aclose()

        assert receipt.issue_id == "12"
        assert receipt.category == "graffiti"

    async def test_error_message_is_verbatim(self, config):
        """서버 오류 메시지를 그대로 전달."""
        def handler(request):
            return httpx.Response(500, json={"message": "Classifier unavailable"})

        client = _client(config, handler)
        with pytest.raises(TransportError) as exc_info:
            await client.submit_report(_image(), 1.0, 2.0)
        await client.aclose()

        assert exc_info.value.detail == "Classifier unavailable"
        assert exc_info.value.code == "transport"

    @pytest.mark.parametrize(
        "response, expected",
        [
            (httpx.Response(400, json={"error": "Bad image"}), "Bad image"),
            (httpx.Response(400, json={"detail": "ignored"}), "An error occurred"),
            (httpx.Response(502, text="Bad gateway"), "Bad gateway"),
            (httpx.Response(503, text=""), "An error occurred"),
        ],
    )
    async def test_error_message_fallbacks(self, config, response, expected):
        client = _client(config, lambda request: response)
        with pytest.raises(TransportError) as exc_info:
            await client.submit_report(_image(), 1.0, 2.0)
        await client.aclose()

        assert exc_info.value.detail == expected

    async def test_network_failure(self, config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(config, handler)
        with pytest.raises(TransportError) as exc_info:
            await client.submit_report(_image(), 1.0, 2.0)
        await client.aclose()

        assert exc_info.value.detail == "connection refused"

    async def test_malformed_receipt(self, config):
        client = _client(config, lambda request: httpx.Response(200, json={"category": "graffiti"}))
        with pytest.raises(TransportError):
            await client.submit_report(_image(), 1.0, 2.0)
        await client.aclose()


class TestReads:

    async def test_list_reports_skips_malformed(self, config):
        payload = [
            {"_id": "a", "issue": "graffiti", "location": {"latitude": 1.0, "longitude": 2.0}},
            {"issue": "no id"},
            {"_id": "b", "issue": "pothole", "latitude": 3.0, "longitude": 4.0},
        ]
        client = _client(config, lambda request: httpx.Response(200, json=payload))

        records = await client.list_reports()
        await client.aclose()

        assert [r.id for r in records] == ["a", "b"]
        assert records[0].coordinates() == (1.0, 2.0)

    async def test_list_map_data_accepts_envelope(self, config):
        def handler(request):
            assert request.url.path == "/api/issues/map"
            return httpx.Response(200, json={"issues": [{"id": "m", "latitude": 1.0, "longitude": 1.0}]})

        client = _client(config, handler)
        records = await client.list_map_data()
        await client.aclose()

        assert [r.id for r in records] == ["m"]

    async def test_non_list_payload(self, config):
        client = _client(config, lambda request: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(TransportError):
            await client.list_reports()
        await client.aclose()

    async def test_nearby_query(self, config):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        client = _client(config, handler)
        assert await client.list_nearby(12.5, 77.25, radius=1000) == []
        await client.aclose()

        params = seen[0].url.params
        assert (params["latitude"], params["longitude"], params["radius"]) == ("12.5", "77.25", "1000")

    async def test_no_token_no_auth_header(self, config):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        client = _client(config, handler, session=SessionContext())
        await client.list_reports()
        await client.aclose()

        assert "Authorization" not in seen[0].headers


class TestUpdateStatus:

    async def test_patch_body(self, config):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"issue": {"_id": "a", "status": "completed"}})

        client = _client(config, handler)
        record = await client.update_status("a", IssueStatus.COMPLETED)
        await client.aclose()

        assert seen[0].method == "PATCH"
        assert seen[0].url.path == "/api/issues/a/status"
        assert json.loads(seen[0].content) == {"status": "completed"}
        assert record.status == "completed"

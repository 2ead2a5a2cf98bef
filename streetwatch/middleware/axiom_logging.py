"""Axiom 요청 로깅 미들웨어.

Axiom request logging for the reporting host.
One event per request: method, path, status, duration, masked JSON body or
query, the error reason for 4xx/5xx, and where the reporting session stood
afterwards (signed in, submission state, collection version). Image bytes
are never logged; uploads are recorded by size only.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from streetwatch.config import Settings, settings as default_settings
from streetwatch.utils.logging import get_logger

logger = get_logger(__name__)

# 마스킹 대상 키 (Keys whose values never leave the process)
_SENSITIVE_KEYS = re.compile(r"(token|authorization|secret|credential|api_?key)", re.IGNORECASE)

_UNLOGGED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})
_MAX_ERROR_CHARS = 500


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감한 키를 재귀적으로 "***"로 치환합니다."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(k) else _mask_dict(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    return data


async def _request_payload(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    payload: dict[str, Any] = {}
    if request.query_params:
        payload["query_params"] = _mask_dict(dict(request.query_params))
    if content_type.startswith("multipart/"):
        payload["upload_bytes"] = int(request.headers.get("content-length", 0))
    elif "application/json" in content_type:
        raw = await request.body()
        if raw:
            try:
                payload["request_body"] = _mask_dict(json.loads(raw))
            except (json.JSONDecodeError, UnicodeDecodeError):
                payload["request_body"] = "(invalid json)"
    return payload


def _error_reason(body: bytes) -> str:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:_MAX_ERROR_CHARS]
    detail = data.get("detail", data) if isinstance(data, dict) else data
    return str(detail)[:_MAX_ERROR_CHARS]


def _session_fields(request: Request) -> dict[str, Any]:
    context = getattr(request.app.state, "context", None)
    if context is None:
        return {}
    return {
        "authenticated": context.session.is_authenticated(),
        "submission_state": context.pipeline.state.value,
        "collection_version": context.collection.version,
    }


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """리포팅 호스트의 요청을 Axiom에 기록하는 미들웨어.

    Ships one structured event per request to the configured Axiom dataset.
    Without an Axiom token and dataset every request passes straight through.
    """

    def __init__(self, app: Any, config: Settings | None = None) -> None:
        super().__init__(app)
        config = config or default_settings
        self._dataset: str = config.AXIOM_DATASET
        self._client: AxiomClient | None = None
        if config.AXIOM_API_TOKEN and config.AXIOM_DATASET:
            self._client = AxiomClient(token=config.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path, "status_code": 500}
        event.update(await _request_payload(request))

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                # 본문을 읽었으므로 새 응답으로 다시 감쌈 (Body consumed, re-wrap it)
                body = b"".join([
                    chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                    async for chunk in response.body_iterator
                ])
                event["error"] = _error_reason(body)
                response = Response(
                    content=body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            event.update(_session_fields(request))
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:
            logger.debug("Axiom ingest failed: %s", exc)

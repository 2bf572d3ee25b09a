"""ASGI middleware that logs every HTTP request and its outcome."""

import logging
import time
import uuid

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

MAX_LOGGED_BODY = 10_000
_TEXTUAL_MARKERS = ("json", "xml", "text", "form")


def should_log_body(content_type: str | None, content_length: int | None) -> bool:
    if content_length is not None and content_length > MAX_LOGGED_BODY:
        return False
    if not content_type:
        return False
    lowered = content_type.lower()
    return any(marker in lowered for marker in _TEXTUAL_MARKERS)


def client_ip(scope: Scope, headers: Headers) -> str:
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    client = scope.get("client")
    return client[0] if client else "Unknown"


class RequestLoggingMiddleware:
    """Logs request metadata on arrival and status plus duration on completion."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:8]
        headers = Headers(scope=scope)
        content_type = headers.get("content-type")
        raw_length = headers.get("content-length")
        content_length = int(raw_length) if raw_length and raw_length.isdigit() else None
        log_body = should_log_body(content_type, content_length)
        started = time.perf_counter()
        status_code = 500
        body = bytearray()

        logger.info(
            "REQUEST START %s %s",
            scope.get("method"),
            scope.get("path"),
            extra={
                "request_id": request_id,
                "query_string": scope.get("query_string", b"").decode("latin-1"),
                "content_type": content_type,
                "content_length": content_length,
                "client_ip": client_ip(scope, headers),
                "user_agent": headers.get("user-agent", ""),
            },
        )

        async def receive_wrapper() -> Message:
            message = await receive()
            if log_body and message["type"] == "http.request":
                room = MAX_LOGGED_BODY - len(body)
                if room > 0:
                    body.extend(message.get("body", b"")[:room])
                if not message.get("more_body", False) and body:
                    logger.debug(
                        "REQUEST BODY %s",
                        body.decode("utf-8", errors="replace"),
                        extra={"request_id": request_id},
                    )
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            level = logging.WARNING if status_code >= 400 else logging.INFO
            logger.log(
                level,
                "RESPONSE END %s %s -> %s (%.1f ms)",
                scope.get("method"),
                scope.get("path"),
                status_code,
                elapsed_ms,
                extra={"request_id": request_id},
            )

from __future__ import annotations

from typing import Any, Callable

import structlog


class ResponseWriter:
    """Write-through ASGI response.

    The status line goes out lazily with the first body write, so a status can
    only be changed while ``headers_sent`` is False.
    """

    def __init__(self, send: Callable[..., Any], headers: list[tuple[bytes, bytes]] | None = None) -> None:
        self._send = send
        self._headers = list(headers or [])
        self.status_code = 200
        self.headers_sent = False
        self.bytes_written = 0
        self.closed = False

    async def _send_start(self) -> None:
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": list(self._headers),
            }
        )
        self.headers_sent = True

    async def write(self, data: bytes) -> int:
        if not self.headers_sent:
            await self._send_start()
        await self._send({"type": "http.response.body", "body": data, "more_body": True})
        self.bytes_written += len(data)
        return len(data)

    async def write_header(self, status_code: int) -> bool:
        logger = structlog.get_logger("http")
        if self.headers_sent:
            logger.debug("superfluous write_header call", status_code=status_code, sent_status=self.status_code)
            return False
        self.status_code = status_code
        try:
            await self._send_start()
        except Exception as exc:  # noqa: BLE001
            logger.warning("failed to send response status", status_code=status_code, error=str(exc))
            return False
        return True

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            if not self.headers_sent:
                await self._send_start()
            await self._send({"type": "http.response.body", "body": b"", "more_body": False})
        except Exception as exc:  # noqa: BLE001
            structlog.get_logger("http").warning("failed to finish response", error=str(exc))

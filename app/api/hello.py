from __future__ import annotations

from typing import Any, Callable

import structlog
from fastapi import APIRouter, Depends, Response

from app.api.responses import ResponseWriter
from app.observability.trace_context import TraceContextSnapshot, annotate, request_trace_context


HELLO_BODY = b"Hello World!\n"

router = APIRouter(tags=["hello"])


def get_request_logger() -> Any:
    return structlog.get_logger("hello")


class HelloResponse(Response):
    """Writes the hello body itself and logs how the write went.

    Write failures never propagate: they are logged and answered with a 500
    when the status line has not gone out yet.
    """

    media_type = "text/plain"

    def __init__(self, logger: Any, body: bytes = HELLO_BODY) -> None:
        super().__init__(media_type=self.media_type)
        self.logger = logger
        self.payload = body

    def _response_headers(self) -> list[tuple[bytes, bytes]]:
        return [(name, value) for name, value in self.raw_headers if name != b"content-length"]

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        writer = ResponseWriter(send, headers=self._response_headers())
        try:
            written = await writer.write(self.payload)
        except Exception as exc:  # noqa: BLE001
            await writer.write_header(500)
            self.logger.error("failed to write request response", error=str(exc), exc_info=True)
        else:
            self.logger.info("request handled", response_bytes=written)
        await writer.close()

        if self.background is not None:
            await self.background()


@router.get("/hello")
async def hello(
    trace_context: TraceContextSnapshot = Depends(request_trace_context),
    logger: Any = Depends(get_request_logger),
) -> HelloResponse:
    logger.info("request context logged", **trace_context.log_fields())
    return HelloResponse(logger=annotate(logger, trace_context))

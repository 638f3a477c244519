"""Request protection middleware.

Runs every request through the verification engine and rejects the ones
that are limited or banned. This layer also owns the fail-open/fail-closed
decision for when Redis is unavailable.
"""

from typing import Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rateguard.app.core.config import settings
from rateguard.app.core.logging import get_log_context, get_logger
from rateguard.app.exceptions import StoreUnavailableError
from rateguard.app.middleware.client_address import (
    ClientAddressResolver,
    ForwardedClientAddressResolver,
)
from rateguard.app.services.protect import VerificationEngine

logger = get_logger(__name__)

HTTP_TEXT = {
    418: "I'm a teapot",
    429: "Too Many Requests",
    503: "Service Unavailable",
}

RESPONSE_FORMATS = ("empty", "text", "json")


def render_rejection(http_code: int, response_format: str = "empty") -> Response:
    """Build the response for a rejected request.

    Args:
        http_code: Status code to respond with
        response_format: empty (no body), text or json

    Returns:
        Starlette response
    """
    message = HTTP_TEXT.get(http_code, "")

    if response_format == "text":
        return PlainTextResponse(f"{http_code} {message}", status_code=http_code)

    if response_format == "json":
        return JSONResponse(
            status_code=http_code,
            content={
                "error": {
                    "type": "HTTP",
                    "code": http_code,
                    "message": message,
                }
            },
        )

    return Response(status_code=http_code)


class ProtectMiddleware(BaseHTTPMiddleware):
    """Middleware to verify every request against the engine.

    SAFE requests continue down the stack; LIMITED and BANNED requests are
    answered with the verdict's code. If Redis is unavailable the request is
    let through (fail-open) unless fail_closed is set, in which case it is
    answered with 503.

    Usage:
        app.add_middleware(ProtectMiddleware, engine=engine, response_format="json")
    """

    def __init__(
        self,
        app,
        engine: VerificationEngine,
        response_format: Optional[str] = None,
        fail_closed: Optional[bool] = None,
        resolver: Optional[ClientAddressResolver] = None,
    ):
        super().__init__(app)
        self.engine = engine
        self.response_format = response_format or settings.response_format
        if self.response_format not in RESPONSE_FORMATS:
            raise ValueError(
                f"response_format must be one of: {', '.join(RESPONSE_FORMATS)}"
            )
        self.fail_closed = settings.fail_closed if fail_closed is None else fail_closed
        self.resolver = resolver or ForwardedClientAddressResolver()

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request with verification."""
        client_ip = self.resolver.resolve(request)

        try:
            result = await self.engine.verify(client_ip)
        except StoreUnavailableError as e:
            context = get_log_context(
                client_ip=client_ip,
                path=request.url.path,
                method=request.method,
            )
            if self.fail_closed:
                logger.warning(
                    f"Protection fail-closed triggered: {e.message}. Request denied.",
                    extra=context,
                )
                return render_rejection(e.status_code, self.response_format)

            logger.warning(
                f"Protection fail-open triggered: {e.message}. "
                "Request allowed without verification.",
                extra=context,
            )
            return await call_next(request)

        if result.is_safe:
            return await call_next(request)

        logger.debug(
            "Request rejected",
            extra=get_log_context(
                client_ip=client_ip,
                status=result.status.name,
                http_code=result.http_code,
                path=request.url.path,
                method=request.method,
            ),
        )
        return render_rejection(result.http_code, self.response_format)

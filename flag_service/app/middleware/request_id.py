"""Request ID middleware for per-request log correlation.

This middleware:
1. Takes the request ID from the X-Request-ID header, or generates a UUID
2. Stores it in request.state.request_id
3. Adds it to the logging context for every record emitted while handling
4. Echoes it in the X-Request-ID response header
5. Clears the logging context once the request completes
"""

from __future__ import annotations

from flag_service.app.middleware.base import HeaderContextMiddleware, generate_uuid


class RequestIDMiddleware(HeaderContextMiddleware):
    """Attach a request ID to every HTTP request.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)
    """

    header_name = "x-request-id"
    state_key = "request_id"
    log_context_key = "request_id"
    should_clear_context_on_finish = True

    def generate_value(self) -> str:
        return generate_uuid()

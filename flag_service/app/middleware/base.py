"""Base middleware for header-based context propagation.

Reads a value from a request header (or generates one), stores it in
``request.state``, binds it into the logging context and echoes it on the
response.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

from flag_service.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class HeaderContextMiddleware(ABC):
    """Pure ASGI middleware propagating one header value through a request.

    Subclasses define:
    - header_name: HTTP header to read and write (lowercase)
    - state_key: key in ``scope["state"]``
    - log_context_key: key in the logging context
    - generate_value(): value to use when the header is missing
    """

    header_name: str
    state_key: str
    log_context_key: str

    should_clear_context_on_finish: bool = False

    # Incoming values longer than this are replaced with a generated one
    max_length: int = 128

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    @abstractmethod
    def generate_value(self) -> str:
        """Generate a new value when the header is absent."""
        ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        value = self._extract_or_generate(scope)

        state = scope.setdefault("state", {})
        state[self.state_key] = value
        set_log_context(**{self.log_context_key: value})

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[self.header_name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            if self.should_clear_context_on_finish:
                clear_log_context()

    def _extract_or_generate(self, scope: Scope) -> str:
        for name, raw in scope.get("headers", []):
            if name == self.header_name.encode("latin-1"):
                value = raw.decode("latin-1").strip()
                if value and len(value) <= self.max_length:
                    return value
                break
        return self.generate_value()


def generate_uuid() -> str:
    """Generate a new UUID v4 string."""
    return str(uuid.uuid4())

from typing import Any, MutableMapping, Optional, Union
from urllib.parse import urlencode

from msgspec import Struct
from msgspec.json import decode as json_decode
from msgspec.json import encode as json_encode

from apibind.interface import HTTP_METHODS, ASGIApp, Base


class RequestResult(Base):
    """Represents the result of a request made to an ASGI application."""

    status_code: int
    headers: dict[str, str]
    body_chunks: list[bytes] = []
    _body: Optional[bytes] = None

    async def body(self) -> bytes:
        """Return the complete response body."""
        if self._body is None:
            self._body = b"".join(self.body_chunks)
            self.body_chunks = []
        return self._body

    async def text(self) -> str:
        body = await self.body()
        return body.decode("utf-8")

    async def json(self) -> Any:
        """Return the response body as parsed JSON."""
        result = await self.body()
        return json_decode(result)


class LocalClient:
    """Drive an ASGI application in process, without a server."""

    def __init__(self, headers: dict[str, str] | None = None):
        self.base_headers: dict[str, str] = {
            "user-agent": "apibind-test-client",
        }
        if headers:
            self.base_headers.update(headers)

    async def request(
        self,
        app: ASGIApp,
        method: HTTP_METHODS = "POST",
        path: str = "/",
        query_params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        body: Optional[Union[bytes, str, dict[str, Any], Struct]] = None,
        state: Optional[dict[str, Any]] = None,
    ) -> RequestResult:
        """
        `state` becomes the ASGI request state,
        the way an authentication middleware would leave it.
        """
        query_string = b""
        if query_params:
            query_string = urlencode(query_params).encode("utf-8")

        request_headers = self.base_headers.copy()
        if headers:
            request_headers.update(headers)

        asgi_headers = [
            (k.lower().encode("utf-8"), v.encode("utf-8"))
            for k, v in request_headers.items()
        ]

        if body is None:
            body_bytes = b""
        elif isinstance(body, bytes):
            body_bytes = body
        elif isinstance(body, str):
            body_bytes = body.encode("utf-8")
        else:
            body_bytes = json_encode(body)

        scope = {
            "type": "http",
            "method": method.upper(),
            "path": path,
            "query_string": query_string,
            "headers": asgi_headers,
            "client": ("127.0.0.1", 12345),
            "server": ("testserver", 80),
            "asgi": {"spec_version": "2.4"},
            "state": dict(state or {}),
        }

        response_status = None
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_chunks: list[bytes] = []
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if body_sent:
                return {"type": "http.disconnect"}
            body_sent = True
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        async def send(message: MutableMapping[str, Any]) -> None:
            nonlocal response_status, response_headers

            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = message.get("headers", [])
            elif message["type"] == "http.response.body":
                chunk = message.get("body", b"")
                if chunk:
                    response_body_chunks.append(chunk)

        await app(scope, receive, send)

        headers_dict: dict[str, str] = {}
        for name, value in response_headers:
            headers_dict[name.decode("latin1").lower()] = value.decode("latin1")

        return RequestResult(
            status_code=response_status or 500,
            headers=headers_dict,
            body_chunks=response_body_chunks,
        )

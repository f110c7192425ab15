from types import MappingProxyType
from typing import Any, Mapping
from uuid import uuid4

from apibind.interface import Record
from apibind.vendors import Request

REQUEST_ID_HEADER = "x-request-id"


class Context(Record):
    """
    Per-request values every bound function receives as its first argument.

    `values` is a read-only view of the ASGI request state, where upstream
    middlewares (authentication, tracing) leave what they resolved.
    """

    request_id: str
    method: str
    path: str
    values: Mapping[str, Any]

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @classmethod
    def from_request(cls, req: Request) -> "Context":
        state: dict[str, Any] = req.scope.get("state") or {}
        request_id = req.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        return cls(
            request_id=request_id,
            method=req.method,
            path=req.url.path,
            values=MappingProxyType(state),
        )

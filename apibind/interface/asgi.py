from typing import Any, Awaitable, Callable, Literal, MutableMapping

IScope = MutableMapping[str, Any]
IMessage = MutableMapping[str, Any]

IReceive = Callable[[], Awaitable[IMessage]]
ISend = Callable[[IMessage], Awaitable[None]]

ASGIApp = Callable[[IScope, IReceive, ISend], Awaitable[None]]

HTTP_METHODS = Literal[
    "GET", "POST", "HEAD", "OPTIONS", "TRACE", "PUT", "DELETE", "PATCH", "CONNECT"
]

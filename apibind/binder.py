from concurrent.futures.thread import ThreadPoolExecutor
from logging import Logger
from typing import Any, Callable, Sequence

from apibind.config import BinderConfig
from apibind.context import Context
from apibind.errors import SignatureError
from apibind.handler import BoundHandler
from apibind.identity import (
    IFeatureFlags,
    IIdentityResolver,
    StaticFeatureFlags,
    select_identity_resolver,
)
from apibind.interface import HTTP_METHODS
from apibind.log import get_logger
from apibind.responder import Responder
from apibind.signature import parse_signature
from apibind.vendors import Request, Response, Route


class Binder:
    """
    Turn typed functions into request handlers.

    ```python
    binder = Binder(BinderConfig(is_dev=True))

    async def create_order(ctx: Context, owner: UUID, req: NewOrder) -> tuple[Order, Exception | None]:
        ...

    app = Starlette(routes=[binder.route("/orders", create_order)])
    ```

    Signatures are checked at bind time, a function that breaks a rule
    raises `SignatureError` before any request is served.
    """

    def __init__(
        self,
        config: BinderConfig | None = None,
        *,
        identity_resolver: IIdentityResolver | None = None,
        flags: IFeatureFlags | None = None,
        logger: Logger | None = None,
        workers: ThreadPoolExecutor | None = None,
    ):
        self._config = config or BinderConfig()
        self._logger = logger or get_logger()
        if identity_resolver is None:
            identity_resolver = select_identity_resolver(
                flags or StaticFeatureFlags(), self._config
            )
        self._identity_resolver = identity_resolver
        self._workers = workers
        self._responder = Responder(self._config, self._logger)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(identity_resolver={self._identity_resolver!r})"

    @property
    def config(self) -> BinderConfig:
        return self._config

    @property
    def identity_resolver(self) -> IIdentityResolver:
        return self._identity_resolver

    def bind(self, func: Callable[..., Any]) -> BoundHandler:
        sig = parse_signature(func)
        return BoundHandler(
            func,
            sig,
            config=self._config,
            responder=self._responder,
            identity_resolver=self._identity_resolver,
            workers=self._workers,
        )

    def bind_all(self, *funcs: Callable[..., Any]) -> list[BoundHandler]:
        """
        Bind every function, report all invalid signatures at once
        in an `ExceptionGroup` of `SignatureError`.
        """
        handlers: list[BoundHandler] = []
        errors: list[SignatureError] = []
        for func in funcs:
            try:
                handlers.append(self.bind(func))
            except SignatureError as exc:
                errors.append(exc)
        if errors:
            raise ExceptionGroup(f"{len(errors)} invalid handler signature(s)", errors)
        return handlers

    def route(
        self,
        path: str,
        func: Callable[..., Any],
        methods: Sequence[HTTP_METHODS] = ("POST",),
        name: str | None = None,
    ) -> Route:
        handler = self.bind(func)
        return Route(path, handler, methods=list(methods), name=name or handler.name)

    def send_error(
        self, req: Request, exc: BaseException, ctx: Context | None = None
    ) -> Response:
        return self._responder.send_error(req, exc, ctx)

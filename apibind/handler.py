from concurrent.futures.thread import ThreadPoolExecutor
from typing import Any, Callable

from apibind.config import BinderConfig
from apibind.context import Context
from apibind.errors import InvalidReturnError
from apibind.identity import IIdentityResolver
from apibind.injector import RequestInjector
from apibind.interface import IReceive, IScope, ISend
from apibind.responder import Responder
from apibind.signature import FuncSignature
from apibind.utils.threading import async_wrapper
from apibind.vendors import Request, Response


class BoundHandler:
    """
    An ASGI app that calls one bound function per request.

    request -> inject arguments -> call -> encode value, or classify the error.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        sig: FuncSignature,
        *,
        config: BinderConfig,
        responder: Responder,
        identity_resolver: IIdentityResolver,
        workers: ThreadPoolExecutor | None = None,
    ):
        self._unwrapped_func = func
        self._func = async_wrapper(func, threaded=config.to_thread, workers=workers)
        self._sig = sig
        self._responder = responder
        self._injector = RequestInjector(sig, identity_resolver)
        self.__name__ = sig.name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._sig!r})"

    @property
    def sig(self) -> FuncSignature:
        return self._sig

    @property
    def name(self) -> str:
        return self._sig.name

    @property
    def unwrapped_func(self) -> Callable[..., Any]:
        return self._unwrapped_func

    def return_to_response(self, req: Request, ctx: Context, raw_return: Any) -> Response:
        responder = self._responder
        shape = self._sig.output_shape

        if shape == "nothing":
            return responder.send_empty()

        if shape == "error":
            err = raw_return
            if err is None:
                return responder.send_empty()
        else:
            if not (isinstance(raw_return, tuple) and len(raw_return) == 2):
                err = InvalidReturnError(self.name, raw_return, "a (value, error) pair")
                return responder.send_error(req, err, ctx)
            value, err = raw_return
            if err is None:
                return responder.send_json(req, 200, value, ctx)

        if not isinstance(err, BaseException):
            err = InvalidReturnError(self.name, err, "an exception or None")
        return responder.send_error(req, err, ctx)

    async def handle(self, req: Request) -> Response:
        ctx = Context.from_request(req)
        try:
            args = await self._injector.inject(req, ctx)
            raw_return = await self._func(*args)
        except Exception as exc:
            return self._responder.send_error(req, exc, ctx)
        return self.return_to_response(req, ctx, raw_return)

    async def __call__(self, scope: IScope, receive: IReceive, send: ISend) -> None:
        req = Request(scope, receive, send)
        response = await self.handle(req)
        await response(scope, receive, send)

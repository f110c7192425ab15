from typing import Any

from msgspec import DecodeError, ValidationError

from apibind.context import Context
from apibind.errors import NoIdentityError
from apibind.identity import IIdentityResolver
from apibind.interface import IBodyDecoder
from apibind.problems import APIError
from apibind.signature import FuncSignature
from apibind.utils.json import StrictDecoder
from apibind.vendors import Request

EMPTY_BODY_MESSAGE = "expected empty request body"


async def ensure_empty_body(req: Request) -> None:
    """
    Reject on the first non-empty chunk without buffering the rest of the body.
    """
    async for chunk in req.stream():
        if chunk:
            raise APIError(400, EMPTY_BODY_MESSAGE)
    # the stream is drained, cache it so `req.body()` still works
    req._body = b""


class RequestInjector:
    """
    Assemble the positional arguments of one call:
    context, [request], [identity], [input].
    """

    def __init__(
        self,
        sig: FuncSignature,
        identity_resolver: IIdentityResolver,
        decoder: IBodyDecoder[Any] | None = None,
    ):
        self._sig = sig
        self._accepts_request = sig.accepts_request
        self._accepts_identity = sig.accepts_identity
        self._accepts_input = sig.accepts_input
        self._resolver = identity_resolver
        if self._accepts_input and decoder is None:
            decoder = StrictDecoder(sig.input_type)
        self._decoder = decoder

    async def resolve_identity(self, ctx: Context) -> Any:
        try:
            return await self._resolver.resolve(ctx)
        except NoIdentityError as exc:
            raise APIError(401, str(exc)) from exc

    async def decode_body(self, req: Request) -> Any:
        assert self._decoder is not None
        body = await req.body()
        try:
            return self._decoder(body)
        except (DecodeError, ValidationError) as exc:
            raise APIError(400, str(exc)) from exc

    async def inject(self, req: Request, ctx: Context) -> list[Any]:
        args: list[Any] = [ctx]
        if self._accepts_request:
            args.append(req)
        if self._accepts_identity:
            args.append(await self.resolve_identity(ctx))
        if self._accepts_input:
            args.append(await self.decode_body(req))
        else:
            await ensure_empty_body(req)
        return args

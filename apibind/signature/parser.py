from inspect import Parameter, Signature, signature
from typing import Any, Callable, Sequence, get_args, get_origin

from msgspec.json import Decoder as JsonDecoder

from apibind.context import Context
from apibind.errors import SignatureError
from apibind.identity import IDENTITY_TYPE
from apibind.interface import MISSING, InputShape, OutputShape
from apibind.utils.typing import (
    deannotate,
    is_none_type,
    lenient_issubclass,
    non_none_args,
)
from apibind.vendors import Request

from .signature import FuncSignature

VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


def is_context_type(annt: Any) -> bool:
    return deannotate(annt) is Context


def is_request_type(annt: Any) -> bool:
    return lenient_issubclass(deannotate(annt), Request)


def is_identity_type(annt: Any) -> bool:
    return deannotate(annt) is IDENTITY_TYPE


def is_error_type(annt: Any) -> bool:
    """
    is_error_type(Exception) -> True
    is_error_type(NotFound | None) -> True
    is_error_type(str | None) -> False
    """
    if annt is Parameter.empty:
        return False
    members = non_none_args(deannotate(annt))
    return bool(members) and all(lenient_issubclass(m, Exception) for m in members)


def return_values(annt: Any) -> Sequence[Any]:
    """
    `None` or no annotation returns nothing,
    `tuple[A, B]` returns two values,
    anything else returns a single value.
    """
    annt = deannotate(annt)
    if annt is Parameter.empty or is_none_type(annt):
        return ()
    if get_origin(annt) is tuple:
        return get_args(annt)
    return (annt,)


class SignatureParser:
    """
    Validate a function against the binding rules and produce its `FuncSignature`.

    A function takes a `Context` first, then optionally a `Request`,
    then zero, one or two of (identity, input), and returns nothing,
    an error, or a value followed by an error.
    """

    def __init__(self, func: Callable[..., Any]):
        self.func = func

    def fail(self, reason: str) -> SignatureError:
        return SignatureError(self.func, reason)

    def _signature(self) -> Signature:
        if not callable(self.func):
            raise self.fail("must be a function")
        try:
            return signature(self.func, eval_str=True)
        except NameError as exc:
            raise self.fail(f"unresolvable annotation: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise self.fail("must be a function") from exc

    def check_decodable(self, input_type: Any) -> None:
        try:
            JsonDecoder(input_type)
        except TypeError as exc:
            raise self.fail(f"unsupported input type: {exc}") from exc

    def parse_input(
        self, params: Sequence[Parameter]
    ) -> tuple[InputShape, bool, Any]:
        for param in params:
            if param.kind in VARIADIC_KINDS:
                raise self.fail("must not be variadic")
            if param.kind is Parameter.KEYWORD_ONLY:
                raise self.fail("must not accept keyword-only arguments")

        cnt = len(params)
        offset = 0
        accepts_request = False
        if cnt > 1 and is_request_type(params[1].annotation):
            accepts_request = True
            offset += 1

        input_shape: InputShape
        input_type: Any = MISSING
        extra = params[offset + 1 :]

        match cnt - offset:
            case 1:
                input_shape = "context"
            case 2:
                if is_identity_type(extra[0].annotation):
                    input_shape = "identity"
                else:
                    input_shape = "input"
                    input_type = extra[0].annotation
            case 3:
                if not is_identity_type(extra[0].annotation):
                    raise self.fail(
                        f"second argument must be identity ({IDENTITY_TYPE.__name__})"
                    )
                input_shape = "identity_input"
                input_type = extra[1].annotation
            case _:
                raise self.fail("must accept 1, 2, or 3 logical arguments")

        if not is_context_type(params[0].annotation):
            raise self.fail(f"first argument must be {Context.__name__}")

        if input_type is Parameter.empty:
            raise self.fail("input argument must be annotated")
        if input_shape in ("input", "identity_input"):
            self.check_decodable(input_type)

        return input_shape, accepts_request, input_type

    def parse_output(self, return_annt: Any) -> tuple[OutputShape, Any]:
        values = return_values(return_annt)
        match len(values):
            case 0:
                return "nothing", MISSING
            case 1:
                if not is_error_type(values[0]):
                    raise self.fail("single return value must be an error")
                return "error", MISSING
            case 2:
                if not is_error_type(values[1]):
                    raise self.fail("second return value must be an error")
                return "value_error", values[0]
            case _:
                raise self.fail("must return 0, 1 or 2 values")

    def parse(self) -> FuncSignature:
        sig = self._signature()
        params = tuple(sig.parameters.values())
        input_shape, accepts_request, input_type = self.parse_input(params)
        output_shape, output_type = self.parse_output(sig.return_annotation)

        return FuncSignature(
            name=getattr(self.func, "__name__", type(self.func).__name__),
            input_shape=input_shape,
            output_shape=output_shape,
            accepts_request=accepts_request,
            input_type=input_type,
            output_type=output_type,
        )


def parse_signature(func: Callable[..., Any]) -> FuncSignature:
    return SignatureParser(func).parse()

from typing import Any, Callable


class ApibindError(Exception):
    __slots__ = ()
    ...


def func_name(func: Any) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


class SignatureError(ApibindError):
    "A function can't be bound because its signature breaks a binding rule"

    def __init__(self, func: Callable[..., Any] | Any, reason: str):
        self.func = func
        self.reason = reason
        super().__init__(f"error binding API function {func_name(func)}: {reason}")


class UnserializableResponseError(ApibindError):
    def __init__(self, ret: Any):
        super().__init__(f"Cannot serialize response of type: {type(ret)}")


class ConfigurationError(ApibindError): ...


class IdentityError(ApibindError):
    "identity could not be resolved from the request context"


class NoIdentityError(IdentityError):
    def __init__(self, msg: str = "no identity in context"):
        super().__init__(msg)


class InvalidIdentityError(IdentityError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"invalid identity value of type {type(value).__name__}")


class InvalidReturnError(ApibindError):
    def __init__(self, func_name: str, ret: Any, expected: str):
        self.ret = ret
        super().__init__(
            f"{func_name} returned {type(ret).__name__}, expected {expected}"
        )

from dataclasses import dataclass
from typing import Any, Literal

from apibind.interface.asgi import HTTP_METHODS as HTTP_METHODS
from apibind.interface.asgi import ASGIApp as ASGIApp
from apibind.interface.asgi import IReceive as IReceive
from apibind.interface.asgi import IScope as IScope
from apibind.interface.asgi import ISend as ISend
from apibind.interface.struct import Base as Base
from apibind.interface.struct import IBodyDecoder as IBodyDecoder
from apibind.interface.struct import IDecoder as IDecoder
from apibind.interface.struct import Payload as Payload
from apibind.interface.struct import Record as Record

InputShape = Literal["context", "identity", "input", "identity_input"]
OutputShape = Literal["nothing", "error", "value_error"]

StrDict = dict[str, Any]


@dataclass(frozen=True, repr=False)
class _Missed:

    __slots__ = ()

    __name__ = "apibind.MISSING"

    def __repr__(self):
        return "<apibind.MISSING>"

    def __bool__(self) -> Literal[False]:
        return False


MISSING = _Missed()

from typing import Generic, Protocol, TypeVar

from msgspec import Struct
from typing_extensions import dataclass_transform

T = TypeVar("T")

DI = TypeVar("DI", contravariant=True)
DT = TypeVar("DT", covariant=True)


class IDecoder(Protocol, Generic[DI, DT]):
    def __call__(self, content: DI, /) -> DT: ...


IBodyDecoder = IDecoder[bytes, T]


class Base(Struct):
    "Base Model for all internal struct"


@dataclass_transform(frozen_default=True)
class Record(Base, frozen=True, gc=False, cache_hash=True): ...  # type: ignore


@dataclass_transform(frozen_default=True)
class Payload(Record, frozen=True, gc=False):
    """
    a pre-configured struct for request and response bodies, frozen and gc free
    """

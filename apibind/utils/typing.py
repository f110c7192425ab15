from types import NoneType, UnionType
from typing import Annotated, Any, TypeGuard, TypeVar, Union, get_args
from typing import get_origin as ty_get_origin

from typing_extensions import TypeAliasType

T = TypeVar("T")


def is_union_type(t: Any) -> bool:
    return ty_get_origin(t) in (Union, UnionType)


def lenient_issubclass(cls: Any, parent: type[T] | tuple[type, ...]) -> TypeGuard[type[T]]:
    try:
        return isinstance(cls, type) and issubclass(cls, parent)
    except TypeError:
        return False


def deannotate(annt: Any) -> Any:
    """
    strip `Annotated` and type alias wrappers

    deannotate(Annotated[Annotated[int, "a"], "b"]) -> int
    """
    while True:
        if isinstance(annt, TypeAliasType):
            annt = annt.__value__
        elif ty_get_origin(annt) is Annotated:
            annt = get_args(annt)[0]
        else:
            return annt


def is_none_type(t: Any) -> bool:
    return t is None or t is NoneType


def non_none_args(t: Any) -> tuple[Any, ...]:
    """
    non_none_args(int | str | None) -> (int, str)
    non_none_args(int) -> (int,)
    """
    if not is_union_type(t):
        return (t,)
    return tuple(deannotate(a) for a in get_args(t) if not is_none_type(a))

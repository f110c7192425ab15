from functools import lru_cache
from typing import Any, Callable, Generic, TypeVar

from msgspec import ValidationError
from msgspec import inspect as mi
from msgspec.json import Decoder as JsonDecoder
from msgspec.json import Encoder as JsonEncoder
from msgspec.json import decode as json_decode
from msgspec.json import format as json_format

T = TypeVar("T")

EncHook = Callable[[Any], Any] | None

_OBJECT_TYPES = (mi.StructType, mi.DataclassType, mi.TypedDictType)


def encode_json(content: Any, *, pretty: bool = False, enc_hook: EncHook = None) -> bytes:
    """
    encode `content` as a json document terminated by a newline,
    `pretty` indents nested values with two spaces.
    """
    data = _encoder_for(enc_hook).encode(content)
    if pretty:
        data = json_format(data, indent=2)
    return data + b"\n"


@lru_cache(16)
def _encoder_for(enc_hook: EncHook) -> JsonEncoder:
    return JsonEncoder(enc_hook=enc_hook)


def _unwrap_meta(info: mi.Type) -> mi.Type:
    while isinstance(info, mi.Metadata):
        info = info.type
    return info


def _contains_objects(info: mi.Type, seen: set[int] | None = None) -> bool:
    if seen is None:
        seen = set()
    info = _unwrap_meta(info)
    if id(info) in seen:
        return False
    seen.add(id(info))

    if isinstance(info, mi.StructType):
        return not info.array_like or any(
            _contains_objects(f.type, seen) for f in info.fields
        )
    if isinstance(info, (mi.DataclassType, mi.TypedDictType)):
        return True
    if isinstance(info, mi.CollectionType):
        return _contains_objects(info.item_type, seen)
    if isinstance(info, mi.TupleType):
        return any(_contains_objects(t, seen) for t in info.item_types)
    if isinstance(info, mi.DictType):
        return _contains_objects(info.value_type, seen)
    if isinstance(info, mi.UnionType):
        return any(_contains_objects(t, seen) for t in info.types)
    return False


def _match_union(data: dict[str, Any], info: mi.UnionType) -> mi.Type | None:
    members = [_unwrap_meta(t) for t in info.types]
    candidates = [
        t
        for t in members
        if isinstance(t, (*_OBJECT_TYPES, mi.DictType))
        and not (isinstance(t, mi.StructType) and t.array_like)
    ]
    if len(candidates) == 1:
        return candidates[0]
    for t in candidates:
        if isinstance(t, mi.StructType) and t.tag_field is not None:
            if data.get(t.tag_field) == t.tag:
                return t
    return None


def find_unknown_field(
    data: Any, info: mi.Type, path: str = "$"
) -> tuple[str, str] | None:
    """
    walk decoded json alongside its target type,
    return the first key that the type does not declare, with its location.
    """
    info = _unwrap_meta(info)

    if isinstance(info, mi.UnionType):
        if not isinstance(data, dict):
            for t in info.types:
                t = _unwrap_meta(t)
                if isinstance(t, (mi.CollectionType, mi.TupleType)) or (
                    isinstance(t, mi.StructType) and t.array_like
                ):
                    return find_unknown_field(data, t, path)
            return None
        matched = _match_union(data, info)
        if matched is None:
            return None
        return find_unknown_field(data, matched, path)

    if isinstance(info, mi.StructType) and info.array_like:
        if isinstance(data, list):
            # a tagged array_like struct leads with its tag
            start = 0 if info.tag_field is None else 1
            for idx, (item, field) in enumerate(zip(data[start:], info.fields), start):
                if found := find_unknown_field(item, field.type, f"{path}[{idx}]"):
                    return found
        return None

    if isinstance(info, _OBJECT_TYPES):
        if not isinstance(data, dict):
            return None
        known = {f.encode_name: f for f in info.fields}
        tag_field = info.tag_field if isinstance(info, mi.StructType) else None
        for key, value in data.items():
            field = known.get(key)
            if field is None:
                if key == tag_field:
                    continue
                return key, path
            if found := find_unknown_field(value, field.type, f"{path}.{key}"):
                return found
        return None

    if isinstance(info, mi.CollectionType):
        if isinstance(data, list):
            for idx, item in enumerate(data):
                if found := find_unknown_field(item, info.item_type, f"{path}[{idx}]"):
                    return found
        return None

    if isinstance(info, mi.TupleType):
        if isinstance(data, list):
            for idx, (item, item_type) in enumerate(zip(data, info.item_types)):
                if found := find_unknown_field(item, item_type, f"{path}[{idx}]"):
                    return found
        return None

    if isinstance(info, mi.DictType):
        if isinstance(data, dict):
            for value in data.values():
                if found := find_unknown_field(value, info.value_type, f"{path}[...]"):
                    return found
        return None

    return None


class StrictDecoder(Generic[T]):
    """
    A json decoder that rejects any object key the target type does not declare,
    at every depth, regardless of how the type itself is configured.
    """

    def __init__(self, type_: type[T] | Any):
        self._type = type_
        self._decoder = JsonDecoder(type_, strict=True)
        self._info = mi.type_info(type_)
        self._check_fields = _contains_objects(self._info)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._type!r})"

    @property
    def type_(self) -> Any:
        return self._type

    def __call__(self, content: bytes, /) -> T:
        if self._check_fields:
            raw = json_decode(content)
            if found := find_unknown_field(raw, self._info):
                key, path = found
                msg = f"Object contains unknown field `{key}`"
                if path != "$":
                    msg += f" - at `{path}`"
                raise ValidationError(msg)
        return self._decoder.decode(content)


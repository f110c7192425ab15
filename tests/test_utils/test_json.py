from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypedDict
from uuid import UUID, uuid4

import pytest
from msgspec import DecodeError, Struct, ValidationError
from msgspec.inspect import type_info
from msgspec.json import decode, encode

from apibind.utils.json import StrictDecoder, encode_json, find_unknown_field


class Address(Struct):
    city: str
    zip_code: str | None = None


class User(Struct):
    id: UUID
    name: str
    age: int
    score: float
    active: bool
    joined: datetime
    addresses: list[Address] = []
    labels: dict[str, Address] = {}


class Camel(Struct, rename="camel"):
    user_name: str


class Cat(Struct, tag=True):
    name: str


class Dog(Struct, tag=True):
    name: str
    good: bool = True


class Strict(Struct, forbid_unknown_fields=True):
    a: int


class Row(Struct, array_like=True):
    label: str
    home: Address


class TaggedRow(Struct, array_like=True, tag=True):
    home: Address


@dataclass
class Point:
    x: int
    y: int


class Span(TypedDict):
    start: int
    end: int


def make_user() -> User:
    return User(
        id=uuid4(),
        name="amy",
        age=30,
        score=9.5,
        active=True,
        joined=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        addresses=[Address("paris", "75001"), Address("lyon")],
        labels={"home": Address("nice")},
    )


def test_encode_json_compact():
    assert encode_json({"a": [1, 2]}) == b'{"a":[1,2]}\n'
    assert encode_json(None) == b"null\n"


def test_encode_json_pretty():
    assert encode_json({"a": 1, "b": "x"}, pretty=True) == b'{\n  "a": 1,\n  "b": "x"\n}\n'


def test_encode_json_enc_hook():
    class Money:
        def __init__(self, cents: int):
            self.cents = cents

    def hook(obj: Any) -> Any:
        if isinstance(obj, Money):
            return obj.cents
        raise NotImplementedError

    assert encode_json({"price": Money(150)}, enc_hook=hook) == b'{"price":150}\n'
    with pytest.raises(TypeError):
        encode_json({"price": Money(150)})


def test_struct_round_trip():
    user = make_user()
    decoder = StrictDecoder(User)
    assert decoder(encode_json(user)) == user
    assert decoder(encode_json(user, pretty=True)) == user


def test_primitive_round_trip():
    assert StrictDecoder(int)(encode_json(42)) == 42
    assert StrictDecoder(list[str])(encode_json(["a"])) == ["a"]


@pytest.mark.parametrize(
    "body, field, path",
    [
        (b'{"city": "x", "country": "fr"}', "country", "$"),
        (b'{"zip_code": null, "city": "x", "extra": 1}', "extra", "$"),
    ],
)
def test_unknown_field_top_level(body: bytes, field: str, path: str):
    with pytest.raises(ValidationError) as exc_info:
        StrictDecoder(Address)(body)
    assert str(exc_info.value) == f"Object contains unknown field `{field}`"


@pytest.mark.parametrize(
    "mutate, path",
    [
        (lambda d: d.update(nickname="a"), None),
        (lambda d: d["addresses"][1].update(street="b"), "$.addresses[1]"),
        (lambda d: d["labels"]["home"].update(street="b"), "$.labels[...]"),
    ],
)
def test_unknown_field_any_depth(mutate: Any, path: str | None):
    data = decode(encode(make_user()))
    mutate(data)
    with pytest.raises(ValidationError) as exc_info:
        StrictDecoder(User)(encode(data))
    msg = str(exc_info.value)
    assert msg.startswith("Object contains unknown field")
    if path:
        assert msg.endswith(f"at `{path}`")


@pytest.mark.parametrize(
    "type_, body, path",
    [
        (Row, b'["a", {"city": "x", "extra": 1}]', "$[1]"),
        (TaggedRow, b'["TaggedRow", {"city": "x", "extra": 1}]', "$[1]"),
        (list[Row], b'[["a", {"city": "x"}], ["b", {"city": "y", "extra": 1}]]', "$[1][1]"),
        (Row | None, b'["a", {"city": "x", "extra": 1}]', "$[1]"),
    ],
)
def test_unknown_field_inside_array_like(type_: Any, body: bytes, path: str):
    with pytest.raises(ValidationError) as exc_info:
        StrictDecoder(type_)(body)
    assert str(exc_info.value) == f"Object contains unknown field `extra` - at `{path}`"


def test_array_like_known_fields():
    assert StrictDecoder(Row)(b'["a", {"city": "x"}]') == Row("a", Address("x"))
    assert StrictDecoder(TaggedRow)(b'["TaggedRow", {"city": "x"}]') == TaggedRow(
        Address("x")
    )


def test_renamed_fields():
    decoder = StrictDecoder(Camel)
    assert decoder(b'{"userName": "a"}') == Camel("a")
    with pytest.raises(ValidationError, match="unknown field `user_name`"):
        decoder(b'{"user_name": "a"}')


def test_tagged_union():
    decoder = StrictDecoder(list[Cat | Dog])
    assert decoder(b'[{"type": "Cat", "name": "tom"}]') == [Cat("tom")]
    with pytest.raises(ValidationError, match=r"unknown field `bark` - at `\$\[0\]`"):
        decoder(b'[{"type": "Dog", "name": "rex", "bark": true}]')


def test_optional_struct():
    decoder = StrictDecoder(Address | None)
    assert decoder(b"null") is None
    with pytest.raises(ValidationError, match="unknown field `x`"):
        decoder(b'{"city": "a", "x": 1}')


def test_dataclass_and_typeddict():
    assert StrictDecoder(Point)(b'{"x": 1, "y": 2}') == Point(1, 2)
    with pytest.raises(ValidationError, match="unknown field `z`"):
        StrictDecoder(Point)(b'{"x": 1, "y": 2, "z": 3}')

    assert StrictDecoder(Span)(b'{"start": 1, "end": 2}') == {"start": 1, "end": 2}
    with pytest.raises(ValidationError, match="unknown field `step`"):
        StrictDecoder(Span)(b'{"start": 1, "end": 2, "step": 1}')


def test_forbid_unknown_struct_same_message():
    with pytest.raises(ValidationError, match="unknown field `b`"):
        StrictDecoder(Strict)(b'{"a": 1, "b": 2}')


def test_dict_of_primitives_allows_any_key():
    assert StrictDecoder(dict[str, int])(b'{"anything": 1}') == {"anything": 1}


def test_type_errors_still_reported():
    with pytest.raises(ValidationError, match="Expected `int`"):
        StrictDecoder(Strict)(b'{"a": "x"}')
    with pytest.raises(DecodeError):
        StrictDecoder(Address)(b"{")


def test_find_unknown_field_skips_non_objects():
    assert find_unknown_field([1, 2], type_info(Address)) is None
    assert find_unknown_field({"city": "x"}, type_info(Address)) is None

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from hypercopy.errors import JsonParseError
from hypercopy.records import Address, TokenId, camel_case, from_wire, to_wire

USER = "0x" + "AB" * 20


@dataclass
class Inner:
    coin_name: str
    size: float


@dataclass
class Outer:
    type_string: str = field(metadata={"wire": "type"})
    start_time: int
    inner: Inner
    items: list[Inner]
    pair: tuple[int, int]
    mids: dict[str, str]
    user: Address
    note: str | None
    flag: bool


@dataclass
class Shared:
    mark_px: str
    mid_px: str | None


@dataclass
class Wide:
    shared: Shared = field(metadata={"flatten": True})
    funding: str


@dataclass
class Either:
    value: int | str


@dataclass
class WithToken:
    token_id: TokenId


SAMPLE = {
    "type": "kind",
    "startTime": 17,
    "inner": {"coinName": "ETH", "size": 1.5},
    "items": [{"coinName": "BTC", "size": 2.5}],
    "pair": [1, 2],
    "mids": {"ETH": "3000.1"},
    "user": USER,
    "flag": True,
}


@pytest.mark.parametrize(
    "name, expected",
    [("start_time", "startTime"), ("sz_decimals", "szDecimals"), ("coin", "coin")],
)
def test_camel_case(name, expected):
    assert camel_case(name) == expected


def test_from_wire_reads_fields():
    record = from_wire(Outer, SAMPLE)
    assert record.type_string == SAMPLE["type"]
    assert record.start_time == SAMPLE["startTime"]
    assert record.inner == Inner("ETH", 1.5)
    assert record.items == [Inner("BTC", 2.5)]
    assert record.pair == (1, 2)
    assert record.mids == SAMPLE["mids"]
    assert record.flag is True


def test_missing_optional_becomes_none():
    assert from_wire(Outer, SAMPLE).note is None


def test_address_is_lowercased():
    assert from_wire(Outer, SAMPLE).user == USER.lower()


def test_round_trip():
    expected = dict(SAMPLE, user=USER.lower(), note=None)
    assert to_wire(from_wire(Outer, SAMPLE)) == expected


def test_extra_keys_are_ignored():
    record = from_wire(Inner, {"coinName": "ETH", "size": 1, "extra": 5})
    assert record == Inner("ETH", 1.0)


@pytest.mark.parametrize("key", ["type", "startTime", "inner", "items", "pair", "user", "flag"])
def test_missing_required_field_raises(key):
    data = {k: v for k, v in SAMPLE.items() if k != key}
    with pytest.raises(JsonParseError, match=key):
        from_wire(Outer, data)


@pytest.mark.parametrize(
    "key, bad",
    [
        ("startTime", "17"),
        ("startTime", True),
        ("flag", 1),
        ("pair", [1, 2, 3]),
        ("user", "0x1234"),
        ("user", "AB" * 21),
        ("user", "0x" + "zz" * 20),
        ("mids", ["ETH"]),
        ("items", {"coinName": "BTC"}),
    ],
)
def test_wrong_types_raise(key, bad):
    with pytest.raises(JsonParseError):
        from_wire(Outer, dict(SAMPLE, **{key: bad}))


def test_non_object_raises():
    with pytest.raises(JsonParseError):
        from_wire(Inner, ["ETH", 1.0])


def test_float_accepts_integer():
    record = from_wire(Inner, {"coinName": "ETH", "size": 2})
    assert record.size == 2.0
    assert isinstance(record.size, float)


def test_flattened_field_round_trip():
    data = {"markPx": "10", "midPx": None, "funding": "0.01"}
    record = from_wire(Wide, data)
    assert record.shared == Shared("10", None)
    assert to_wire(record) == data


def test_union_tries_each_variant():
    assert from_wire(Either, {"value": 3}).value == 3
    assert from_wire(Either, {"value": "x"}).value == "x"
    with pytest.raises(JsonParseError):
        from_wire(Either, {"value": 1.5})


def test_token_id_length_is_checked():
    good = "0x" + "0F" * 16
    assert from_wire(WithToken, {"tokenId": good}).token_id == good.lower()
    with pytest.raises(JsonParseError):
        from_wire(WithToken, {"tokenId": "0x" + "0F" * 20})
import json

import pytest

from hypercopy.meta import SpotMeta
from hypercopy.records import from_wire
from hypercopy.utils import format_adjust_price, info_init

SPOT_META = {
    "universe": [{"tokens": [1, 0], "name": "PURR/USDC", "index": 0, "isCanonical": True}],
    "tokens": [
        {
            "name": "USDC",
            "szDecimals": 8,
            "weiDecimals": 8,
            "index": 0,
            "tokenId": "0x" + "0123456789abcdef" * 2,
            "isCanonical": True,
        },
        {
            "name": "PURR",
            "szDecimals": 0,
            "weiDecimals": 5,
            "index": 1,
            "tokenId": "0x" + "fedcba9876543210" * 2,
            "isCanonical": False,
        },
    ],
}


class FakeInfoClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    async def spot_meta(self):
        self.calls += 1
        return from_wire(SpotMeta, self.payload)


def test_documented_example():
    assert format_adjust_price("123.45", 1.05) == 129.62


@pytest.mark.parametrize("price", ["123.45", "0.001", "42", "7.5", "1000.125"])
def test_unit_factor_keeps_price(price):
    assert format_adjust_price(price, 1.0) == float(price)


@pytest.mark.parametrize("price,factor", [("123.45", 1.05), ("0.0123", 0.97), ("88.1", 1.3)])
def test_keeps_decimal_places(price, factor):
    decimals = len(price.split(".")[1])
    result = format_adjust_price(price, factor)
    assert round(result, decimals) == result


def test_integer_price_rounds_to_whole():
    result = format_adjust_price("100", 1.234)
    assert result == float(int(result))


def test_halves_round_away_from_zero():
    assert format_adjust_price("1", 2.5) == 3.0
    assert format_adjust_price("-1", 2.5) == -3.0


def test_invalid_price_raises():
    with pytest.raises(ValueError):
        format_adjust_price("abc", 1.0)


@pytest.mark.asyncio
async def test_info_init_writes_spot_meta(tmp_path):
    client = FakeInfoClient(SPOT_META)
    path = await info_init(client, tmp_path / "info")
    assert path == tmp_path / "info" / "spot-meta.json"
    text = path.read_text(encoding="utf-8")
    assert json.loads(text) == SPOT_META
    assert text.startswith('{\n  "universe"')
    assert client.calls == 1


@pytest.mark.asyncio
async def test_info_init_accepts_existing_directory(tmp_path):
    target = tmp_path / "info"
    target.mkdir()
    (target / "spot-meta.json").write_text("old", encoding="utf-8")
    path = await info_init(FakeInfoClient(SPOT_META), target)
    assert json.loads(path.read_text(encoding="utf-8")) == SPOT_META


@pytest.mark.asyncio
async def test_info_init_needs_parent_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        await info_init(FakeInfoClient(SPOT_META), tmp_path / "missing" / "info")
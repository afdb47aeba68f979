"""Perpetual and spot market metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import JsonParseError
from .records import TokenId, from_wire

SPOT_INDEX_OFFSET = 10000


@dataclass
class AssetMeta:
    name: str
    sz_decimals: int


@dataclass
class Meta:
    universe: list[AssetMeta]


@dataclass
class SpotAssetMeta:
    tokens: tuple[int, int]
    name: str
    index: int
    is_canonical: bool


@dataclass
class TokenInfo:
    name: str
    sz_decimals: int
    wei_decimals: int
    index: int
    token_id: TokenId
    is_canonical: bool


@dataclass
class SpotMeta:
    universe: list[SpotAssetMeta]
    tokens: list[TokenInfo]

    def add_pair_and_name_to_index_map(self, coin_to_asset: dict[str, int]) -> dict[str, int]:
        """Return a copy of ``coin_to_asset`` extended with every spot pair.

        Each pair is entered both as ``"BASE/QUOTE"`` and under its own name,
        mapped to its asset number ``10000 + index``. Pairs whose tokens are
        unknown are skipped.
        """
        result = dict(coin_to_asset)
        index_to_name = {info.index: info.name for info in self.tokens}
        for asset in self.universe:
            spot_index = SPOT_INDEX_OFFSET + asset.index
            base, quote = asset.tokens
            if base not in index_to_name or quote not in index_to_name:
                continue
            result[f"{index_to_name[base]}/{index_to_name[quote]}"] = spot_index
            result[asset.name] = spot_index
        return result


@dataclass
class SpotAssetContext:
    day_ntl_vlm: str
    mark_px: str
    mid_px: str | None
    prev_day_px: str
    circulating_supply: str
    coin: str


def parse_spot_meta_and_asset_ctxs(data: Any) -> list[SpotMeta | list[SpotAssetContext]]:
    """Decode the mixed list returned by the spot meta-and-contexts query."""
    if not isinstance(data, list):
        raise JsonParseError(f"expected a list, got {data!r}")
    result: list[SpotMeta | list[SpotAssetContext]] = []
    for item in data:
        if isinstance(item, dict):
            result.append(from_wire(SpotMeta, item))
        elif isinstance(item, list):
            result.append([from_wire(SpotAssetContext, ctx) for ctx in item])
        else:
            raise JsonParseError(f"data did not match any variant: {item!r}")
    return result
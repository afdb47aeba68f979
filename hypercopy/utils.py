"""Start-up helpers and price adjustment."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from .records import to_wire

SPOT_META_FILE = "spot-meta.json"


async def info_init(info_client: Any, directory: str | Path = "info") -> Path:
    """Fetch the spot metadata and save it as pretty JSON in ``directory``.

    The directory is created if missing (its parent must exist). Returns the
    path of the written file.
    """
    spot_meta = await info_client.spot_meta()
    text = json.dumps(to_wire(spot_meta), indent=2, ensure_ascii=False)
    target = Path(directory)
    target.mkdir(exist_ok=True)
    path = target / SPOT_META_FILE
    path.write_text(text, encoding="utf-8")
    return path


def _round_half_away(value: float) -> float:
    whole = math.trunc(value)
    if abs(value - whole) >= 0.5:
        whole += math.copysign(1, value)
    return float(whole)


def format_adjust_price(original_price: str, adjustment_factor: float) -> float:
    """Scale a price by ``adjustment_factor``, keeping its number of decimals.

    ``format_adjust_price("123.45", 1.05)`` gives ``129.62``. Halves round
    away from zero. Raises ``ValueError`` if the price is not a number.
    """
    price = float(original_price)
    adjusted = price * adjustment_factor
    decimals = len(original_price.split(".")[-1]) if "." in original_price else 0
    scale = 10.0**decimals
    return _round_half_away(adjusted * scale) / scale
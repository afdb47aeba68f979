"""Small numeric, nonce and endpoint helpers."""

from __future__ import annotations

import enum
import logging
import math
import secrets
import threading
import time
import uuid

from .errors import RandGenError

logger = logging.getLogger(__name__)

EPSILON = 1e-9
INF_BPS = 10_001
LOCAL_API_URL = "http://localhost:3001"
MAINNET_API_URL = "https://api.hyperliquid.xyz"
TESTNET_API_URL = "https://api.hyperliquid-testnet.xyz"

WIRE_DECIMALS = 8
_U64_MAX = 2**64 - 1
_U16_MAX = 2**16 - 1


class BaseUrl(enum.Enum):
    """The API endpoints a client can talk to."""

    LOCALHOST = LOCAL_API_URL
    TESTNET = TESTNET_API_URL
    MAINNET = MAINNET_API_URL

    def url(self) -> str:
        return self.value


def now_timestamp_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class _NonceCounter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = now_timestamp_ms()

    def next(self) -> int:
        with self._lock:
            nonce = self._current
            self._current += 1
            now_ms = now_timestamp_ms()
            if nonce > now_ms + 1000:
                logger.info("nonce progressed too far ahead %s %s", nonce, now_ms)
            # more than 300 seconds behind
            if nonce + 300_000 < now_ms:
                self._current = max(self._current, now_ms)
            return nonce


_NONCES = _NonceCounter()


def next_nonce() -> int:
    """Return a process-wide, strictly increasing nonce near the current time."""
    return _NONCES.next()


def float_to_string_for_hashing(x: float) -> str:
    """Format a float with at most eight decimals and no trailing zeros."""
    text = f"{x:.{WIRE_DECIMALS}f}".rstrip("0").removesuffix(".")
    return "0" if text == "-0" else text


def uuid_to_hex_string(value: uuid.UUID) -> str:
    """Render a UUID as a 0x-prefixed lowercase hex string."""
    return "0x" + value.bytes.hex()


def generate_random_key() -> bytes:
    """Return 32 cryptographically random bytes."""
    try:
        return secrets.token_bytes(32)
    except (NotImplementedError, OSError) as exc:
        raise RandGenError(str(exc)) from exc


def _saturate(value: float, upper: int) -> int:
    if math.isnan(value):
        return 0
    if value <= 0:
        return 0
    if value >= upper:
        return upper
    return int(value)


def truncate_float(value: float, decimals: int, round_up: bool) -> float:
    """Truncate to ``decimals`` places, optionally bumping up by one unit."""
    pow10 = float(10**decimals)
    scaled = _saturate(value * pow10, _U64_MAX)
    if round_up:
        scaled += 1
    return scaled / pow10


def bps_diff(x: float, y: float) -> int:
    """Relative difference of ``y`` from ``x`` in basis points."""
    if abs(x) < EPSILON:
        return INF_BPS
    return _saturate(abs(y - x) / x * 10_000.0, _U16_MAX)
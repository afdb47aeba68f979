"""Client for the read-only info endpoint and the websocket feeds."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Callable

import aiohttp

from .errors import JsonParseError
from .helpers import BaseUrl
from .info_types import (
    CandlesSnapshotResponse,
    FundingHistoryResponse,
    L2SnapshotResponse,
    OpenOrdersResponse,
    OrderInfo,
    OrderStatusResponse,
    RecentTradesResponse,
    ReferralResponse,
    UserFeesResponse,
    UserFillsResponse,
    UserFundingResponse,
    UserStateResponse,
    UserTokenBalanceResponse,
)
from .meta import Meta, SpotAssetContext, SpotMeta, parse_spot_meta_and_asset_ctxs
from .records import Address, camel_case, from_wire
from .transport import HttpClient
from .ws_manager import WsManager
from .ws_types import Subscription

_U64_MAX = 2**64 - 1

# Wire ``type`` tag of each info request and the fields it carries, in order.
_REQUEST_FIELDS: dict[str, tuple[str, ...]] = {
    "clearinghouseState": ("user",),
    "batchClearinghouseStates": ("users",),
    "spotClearinghouseState": ("user",),
    "userFees": ("user",),
    "openOrders": ("user",),
    "orderStatus": ("user", "oid"),
    "meta": (),
    "spotMeta": (),
    "spotMetaAndAssetCtxs": (),
    "allMids": (),
    "userFills": ("user",),
    "fundingHistory": ("coin", "start_time", "end_time"),
    "userFunding": ("user", "start_time", "end_time"),
    "l2Book": ("coin",),
    "recentTrades": ("coin",),
    "candleSnapshot": ("coin", "interval", "start_time", "end_time"),
    "referral": ("user",),
    "historicalOrders": ("user",),
}

_NULLABLE = frozenset({("fundingHistory", "end_time"), ("userFunding", "end_time")})


@dataclass
class _User:
    user: Address


def _address(value: Any) -> str:
    return from_wire(_User, {"user": value}).user


def _uint(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"`{name}` must be an unsigned 64-bit integer, got {value!r}")
    return value


def _normalize(name: str, value: Any) -> Any:
    if name == "user":
        return _address(value)
    if name == "users":
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"`users` must be a list of addresses, got {value!r}")
        return [_address(item) for item in value]
    if name in ("coin", "interval"):
        if not isinstance(value, str):
            raise ValueError(f"`{name}` must be a string, got {value!r}")
        return value
    return _uint(name, value)


def build_info_request(kind: str, **kwargs: Any) -> dict[str, Any]:
    """Build the JSON body of an info request tagged ``kind``.

    Field arguments are given in snake_case; ``end_time`` may be left out
    of the funding history queries, where it is sent as ``null``.
    """
    fields = _REQUEST_FIELDS.get(kind)
    if fields is None:
        raise ValueError(f"unknown info request type {kind!r}")
    unexpected = sorted(set(kwargs) - set(fields))
    if unexpected:
        raise TypeError(f"{kind} request got unexpected field(s): {', '.join(unexpected)}")
    body: dict[str, Any] = {}
    for name in fields:
        nullable = (kind, name) in _NULLABLE
        if name not in kwargs and not nullable:
            raise TypeError(f"{kind} request needs `{name}`")
        value = kwargs.get(name)
        body[camel_case(name)] = None if value is None and nullable else _normalize(name, value)
    request: dict[str, Any] = {"type": kind}
    if kind == "candleSnapshot":
        request["req"] = body
    else:
        request.update(body)
    return request


def _one(cls: type) -> Callable[[Any], Any]:
    return lambda data: from_wire(cls, data)


def _many(cls: type) -> Callable[[Any], list]:
    def parse(data: Any) -> list:
        if not isinstance(data, list):
            raise JsonParseError(f"expected a list of {cls.__name__}, got {data!r}")
        return [from_wire(cls, item) for item in data]

    return parse


def _string_map(data: Any) -> dict[str, str]:
    if not isinstance(data, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in data.items()
    ):
        raise JsonParseError(f"expected an object of strings, got {data!r}")
    return dict(data)


class InfoClient:
    """Queries the info endpoint and manages websocket subscriptions."""

    def __init__(
        self,
        base_url: BaseUrl | str | None = None,
        session: aiohttp.ClientSession | None = None,
        reconnect: bool = False,
    ) -> None:
        if base_url is None:
            base_url = BaseUrl.MAINNET
        url = base_url.url() if isinstance(base_url, BaseUrl) else base_url
        self.http_client = HttpClient(url, session)
        self._session = session
        self._reconnect = reconnect
        self._ws_manager: WsManager | None = None

    async def _manager(self) -> WsManager:
        if self._ws_manager is None:
            url = f"ws{self.http_client.base_url[4:]}/ws"
            self._ws_manager = await WsManager.connect(url, self._reconnect, self._session)
        return self._ws_manager

    async def subscribe(self, subscription: Subscription, queue: asyncio.Queue) -> int:
        """Deliver the messages of ``subscription`` to ``queue``; return its id."""
        manager = await self._manager()
        return await manager.add_subscription(subscription.to_json(), queue)

    async def unsubscribe(self, subscription_id: int) -> None:
        manager = await self._manager()
        await manager.remove_subscription(subscription_id)

    async def _request(self, parse: Callable[[Any], Any], kind: str, **kwargs: Any) -> Any:
        data = json.dumps(build_info_request(kind, **kwargs), separators=(",", ":"))
        text = await self.http_client.post("/info", data)
        try:
            decoded = json.loads(text)
        except ValueError as exc:
            raise JsonParseError(str(exc)) from exc
        return parse(decoded)

    async def open_orders(self, address: str) -> list[OpenOrdersResponse]:
        return await self._request(_many(OpenOrdersResponse), "openOrders", user=address)

    async def user_state(self, address: str) -> UserStateResponse:
        return await self._request(_one(UserStateResponse), "clearinghouseState", user=address)

    async def user_states(self, addresses: list[str]) -> list[UserStateResponse]:
        return await self._request(
            _many(UserStateResponse), "batchClearinghouseStates", users=addresses
        )

    async def user_token_balances(self, address: str) -> UserTokenBalanceResponse:
        return await self._request(
            _one(UserTokenBalanceResponse), "spotClearinghouseState", user=address
        )

    async def user_fees(self, address: str) -> UserFeesResponse:
        return await self._request(_one(UserFeesResponse), "userFees", user=address)

    async def meta(self) -> Meta:
        return await self._request(_one(Meta), "meta")

    async def spot_meta(self) -> SpotMeta:
        return await self._request(_one(SpotMeta), "spotMeta")

    async def spot_meta_and_asset_contexts(self) -> list[SpotMeta | list[SpotAssetContext]]:
        return await self._request(parse_spot_meta_and_asset_ctxs, "spotMetaAndAssetCtxs")

    async def all_mids(self) -> dict[str, str]:
        return await self._request(_string_map, "allMids")

    async def user_fills(self, address: str) -> list[UserFillsResponse]:
        return await self._request(_many(UserFillsResponse), "userFills", user=address)

    async def funding_history(
        self, coin: str, start_time: int, end_time: int | None = None
    ) -> list[FundingHistoryResponse]:
        return await self._request(
            _many(FundingHistoryResponse),
            "fundingHistory",
            coin=coin,
            start_time=start_time,
            end_time=end_time,
        )

    async def user_funding_history(
        self, user: str, start_time: int, end_time: int | None = None
    ) -> list[UserFundingResponse]:
        return await self._request(
            _many(UserFundingResponse),
            "userFunding",
            user=user,
            start_time=start_time,
            end_time=end_time,
        )

    async def recent_trades(self, coin: str) -> list[RecentTradesResponse]:
        return await self._request(_many(RecentTradesResponse), "recentTrades", coin=coin)

    async def l2_snapshot(self, coin: str) -> L2SnapshotResponse:
        return await self._request(_one(L2SnapshotResponse), "l2Book", coin=coin)

    async def candles_snapshot(
        self, coin: str, interval: str, start_time: int, end_time: int
    ) -> list[CandlesSnapshotResponse]:
        return await self._request(
            _many(CandlesSnapshotResponse),
            "candleSnapshot",
            coin=coin,
            interval=interval,
            start_time=start_time,
            end_time=end_time,
        )

    async def query_order_by_oid(self, address: str, oid: int) -> OrderStatusResponse:
        return await self._request(_one(OrderStatusResponse), "orderStatus", user=address, oid=oid)

    async def query_referral_state(self, address: str) -> ReferralResponse:
        return await self._request(_one(ReferralResponse), "referral", user=address)

    async def historical_orders(self, address: str) -> list[OrderInfo]:
        return await self._request(_many(OrderInfo), "historicalOrders", user=address)

    async def close(self) -> None:
        """Close the websocket, if one was opened, and the HTTP session."""
        manager, self._ws_manager = self._ws_manager, None
        if manager is not None:
            await manager.close()
        await self.http_client.close()

    async def __aenter__(self) -> InfoClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"InfoClient(base_url={self.http_client.base_url!r})"
"""Websocket subscriptions, channel messages and the records they carry."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from .errors import JsonParseError
from .records import Address, from_wire


def _wire(name: str):
    return field(metadata={"wire": name})


def _flatten():
    return field(metadata={"flatten": True})


def _compact(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


@dataclass
class Trade:
    coin: str
    side: str
    px: str
    sz: str
    time: int
    hash: str
    tid: int


@dataclass
class BookLevel:
    px: str
    sz: str
    n: int


@dataclass
class L2BookData:
    coin: str
    time: int
    levels: list[list[BookLevel]]


@dataclass
class AllMidsData:
    mids: dict[str, str]


@dataclass
class TradeInfo:
    """One fill of an order.

    ``side`` is ``"B"`` for a bid (buy) and ``"A"`` for an ask (sell);
    a negative ``fee`` is a rebate and ``crossed`` marks a taker fill.
    """

    coin: str
    px: str
    sz: str
    side: str
    time: int
    start_position: str
    hash: str
    oid: int
    crossed: bool
    fee: str
    tid: int
    cloid: str | None
    fee_token: str
    closed_pnl: str
    dir: str


@dataclass
class UserFillsData:
    is_snapshot: bool | None
    user: Address
    fills: list[TradeInfo]


@dataclass
class Liquidation:
    lid: int
    liquidator: str
    liquidated_user: str = _wire("liquidated_user")
    liquidated_ntl_pos: str = _wire("liquidated_ntl_pos")
    liquidated_account_value: str = _wire("liquidated_account_value")


@dataclass
class NonUserCancel:
    coin: str
    oid: int


@dataclass
class UserFunding:
    time: int
    coin: str
    usdc: str
    szi: str
    funding_rate: str


@dataclass
class UserData:
    """A user event: ``kind`` is one of fills, funding, liquidation, nonUserCancel."""

    kind: str
    value: Union[list[TradeInfo], UserFunding, Liquidation, list[NonUserCancel]]


@dataclass
class CandleData:
    time_close: int = _wire("T")
    close: str = _wire("c")
    high: str = _wire("h")
    interval: str = _wire("i")
    low: str = _wire("l")
    num_trades: int = _wire("n")
    open: str = _wire("o")
    coin: str = _wire("s")
    time_open: int = _wire("t")
    volume: str = _wire("v")


@dataclass
class BasicOrder:
    coin: str
    side: str
    limit_px: str
    sz: str
    oid: int
    timestamp: int
    orig_sz: str
    cloid: str | None


@dataclass
class OrderUpdate:
    order: BasicOrder
    status: str
    status_timestamp: int


@dataclass
class UserFundingsData:
    is_snapshot: bool | None
    user: Address
    fundings: list[UserFunding]


@dataclass
class Deposit:
    usdc: str


@dataclass
class Withdraw:
    usdc: str
    nonce: int
    fee: str


@dataclass
class InternalTransfer:
    usdc: str
    user: Address
    destination: Address
    fee: str


@dataclass
class SubAccountTransfer:
    usdc: str
    user: Address
    destination: Address


@dataclass
class LiquidatedPosition:
    coin: str
    szi: str


@dataclass
class LedgerLiquidation:
    account_value: int
    leverage_type: str
    liquidated_positions: list[LiquidatedPosition]


@dataclass
class VaultDelta:
    vault: Address
    usdc: str


@dataclass
class VaultWithdraw:
    vault: Address
    user: Address
    requested_usd: str
    commission: str
    closing_cost: str
    basis: str
    net_withdrawn_usd: str


@dataclass
class VaultLeaderCommission:
    user: Address
    usdc: str


@dataclass
class AccountClassTransfer:
    usdc: str
    to_perp: bool


@dataclass
class SpotTransfer:
    token: str
    amount: str
    usdc_value: str
    user: Address
    destination: Address
    fee: str


@dataclass
class SpotGenesis:
    token: str
    amount: str


_LEDGER_KINDS: dict[str, type] = {
    "deposit": Deposit,
    "withdraw": Withdraw,
    "internalTransfer": InternalTransfer,
    "subAccountTransfer": SubAccountTransfer,
    "ledgerLiquidation": LedgerLiquidation,
    "vaultDeposit": VaultDelta,
    "vaultCreate": VaultDelta,
    "vaultDistribution": VaultDelta,
    "vaultWithdraw": VaultWithdraw,
    "vaultLeaderCommission": VaultLeaderCommission,
    "accountClassTransfer": AccountClassTransfer,
    "spotTransfer": SpotTransfer,
    "spotGenesis": SpotGenesis,
}


@dataclass
class LedgerUpdate:
    """A non-funding ledger change; ``kind`` is its wire ``type`` tag."""

    kind: str
    detail: Any


@dataclass
class LedgerUpdateData:
    time: int
    hash: str
    delta: LedgerUpdate


@dataclass
class UserNonFundingLedgerUpdatesData:
    is_snapshot: bool | None
    user: Address
    non_funding_ledger_updates: list[LedgerUpdateData]


@dataclass
class NotificationData:
    notification: str


@dataclass
class WebData2Data:
    user: Address


@dataclass
class SharedAssetCtx:
    day_ntl_vlm: str
    prev_day_px: str
    mark_px: str
    mid_px: str | None


@dataclass
class PerpsAssetCtx:
    shared: SharedAssetCtx = _flatten()
    funding: str = _wire("funding")
    open_interest: str = _wire("openInterest")
    oracle_px: str = _wire("oraclePx")


@dataclass
class SpotAssetCtx:
    shared: SharedAssetCtx = _flatten()
    circulating_supply: str = _wire("circulatingSupply")


@dataclass
class ActiveAssetCtxData:
    coin: str
    ctx: PerpsAssetCtx | SpotAssetCtx


@dataclass
class _LedgerHeader:
    time: int
    hash: str


@dataclass
class _LedgerUpdatesHeader:
    is_snapshot: bool | None
    user: Address


def _parse_ledger_update(data: Any) -> LedgerUpdate:
    if not isinstance(data, dict):
        raise JsonParseError(f"expected an object for a ledger update, got {data!r}")
    if "type" not in data:
        raise JsonParseError("missing field `type` for a ledger update")
    kind = data["type"]
    cls = _LEDGER_KINDS.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise JsonParseError(f"unknown ledger update type {kind!r}")
    return LedgerUpdate(kind, from_wire(cls, data))


def _parse_ledger_update_data(data: Any) -> LedgerUpdateData:
    header = from_wire(_LedgerHeader, data)
    if "delta" not in data:
        raise JsonParseError("missing field `delta` for LedgerUpdateData")
    return LedgerUpdateData(header.time, header.hash, _parse_ledger_update(data["delta"]))


def _parse_ledger_updates(data: Any) -> UserNonFundingLedgerUpdatesData:
    header = from_wire(_LedgerUpdatesHeader, data)
    updates = data.get("nonFundingLedgerUpdates")
    if not isinstance(updates, list):
        raise JsonParseError("missing or invalid field `nonFundingLedgerUpdates`")
    return UserNonFundingLedgerUpdatesData(
        header.is_snapshot, header.user, [_parse_ledger_update_data(item) for item in updates]
    )


def _list_of(cls: type) -> Callable[[Any], list]:
    def parse(data: Any) -> list:
        if not isinstance(data, list):
            raise JsonParseError(f"expected a list of {cls.__name__}, got {data!r}")
        return [from_wire(cls, item) for item in data]

    return parse


_USER_DATA_PARSERS: dict[str, Callable[[Any], Any]] = {
    "fills": _list_of(TradeInfo),
    "funding": lambda data: from_wire(UserFunding, data),
    "liquidation": lambda data: from_wire(Liquidation, data),
    "nonUserCancel": _list_of(NonUserCancel),
}


def parse_user_data(data: Any) -> UserData:
    """Decode a user event: an object with exactly one variant key."""
    if not isinstance(data, dict) or len(data) != 1:
        raise JsonParseError(f"expected an object with one key for user data, got {data!r}")
    ((kind, value),) = data.items()
    parser = _USER_DATA_PARSERS.get(kind)
    if parser is None:
        raise JsonParseError(f"unknown user data variant {kind!r}")
    return UserData(kind, parser(value))


def parse_asset_ctx(data: Any) -> PerpsAssetCtx | SpotAssetCtx:
    """Decode an asset context, trying the perpetual shape before the spot one."""
    for cls in (PerpsAssetCtx, SpotAssetCtx):
        try:
            return from_wire(cls, data)
        except JsonParseError:
            continue
    raise JsonParseError(f"data did not match any asset context variant: {data!r}")


_SUBSCRIPTION_FIELDS: dict[str, tuple[str, ...]] = {
    "allMids": (),
    "notification": ("user",),
    "webData2": ("user",),
    "candle": ("coin", "interval"),
    "l2Book": ("coin",),
    "trades": ("coin",),
    "orderUpdates": ("user",),
    "userEvents": ("user",),
    "userFills": ("user",),
    "userFundings": ("user",),
    "userNonFundingLedgerUpdates": ("user",),
    "activeAssetCtx": ("coin",),
}

_SUBSCRIPTION_ATTRS = ("user", "coin", "interval")


@dataclass(frozen=True)
class _SubscriptionFields:
    user: Address | None
    coin: str | None
    interval: str | None


@dataclass(frozen=True)
class Subscription:
    """A websocket feed; ``kind`` is its wire ``type`` tag."""

    kind: str
    user: str | None = None
    coin: str | None = None
    interval: str | None = None

    def __post_init__(self) -> None:
        required = _SUBSCRIPTION_FIELDS.get(self.kind)
        if required is None:
            raise ValueError(f"unknown subscription type {self.kind!r}")
        present = {}
        for name in _SUBSCRIPTION_ATTRS:
            value = getattr(self, name)
            if name in required:
                if value is None:
                    raise ValueError(f"{self.kind} subscription needs `{name}`")
                present[name] = value
            elif value is not None:
                raise ValueError(f"{self.kind} subscription takes no `{name}`")
        try:
            checked = from_wire(_SubscriptionFields, present)
        except JsonParseError as exc:
            raise ValueError(str(exc)) from None
        if checked.user is not None:
            object.__setattr__(self, "user", checked.user)

    def to_json(self) -> str:
        """Serialize as the compact JSON identifier sent to the server."""
        payload: dict[str, Any] = {"type": self.kind}
        payload.update((name, getattr(self, name)) for name in _SUBSCRIPTION_FIELDS[self.kind])
        return _compact(payload)

    @staticmethod
    def from_json(text: str) -> Subscription:
        """Parse a subscription identifier; extra keys are ignored."""
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise JsonParseError(str(exc)) from exc
        if not isinstance(data, dict):
            raise JsonParseError(f"expected an object for a subscription, got {data!r}")
        if "type" not in data:
            raise JsonParseError("missing field `type` for a subscription")
        kind = data["type"]
        required = _SUBSCRIPTION_FIELDS.get(kind) if isinstance(kind, str) else None
        if required is None:
            raise JsonParseError(f"unknown subscription type {kind!r}")
        missing = [name for name in required if name not in data]
        if missing:
            raise JsonParseError(f"missing field `{missing[0]}` for {kind} subscription")
        parsed = from_wire(_SubscriptionFields, {name: data[name] for name in required})
        return Subscription(kind, **{name: getattr(parsed, name) for name in required})


def subscription_entry_key(identifier: str) -> str:
    """Key under which subscribers of ``identifier`` are grouped.

    User events and order updates are grouped under a fixed name because
    their messages do not say which user they belong to.
    """
    kind = Subscription.from_json(identifier).kind
    if kind in ("userEvents", "orderUpdates"):
        return kind
    return identifier


class Channel(enum.Enum):
    NO_DATA = "noData"
    HYPERLIQUID_ERROR = "hyperliquidError"
    ALL_MIDS = "allMids"
    TRADES = "trades"
    L2_BOOK = "l2Book"
    USER = "user"
    USER_FILLS = "userFills"
    CANDLE = "candle"
    SUBSCRIPTION_RESPONSE = "subscriptionResponse"
    ORDER_UPDATES = "orderUpdates"
    USER_FUNDINGS = "userFundings"
    USER_NON_FUNDING_LEDGER_UPDATES = "userNonFundingLedgerUpdates"
    NOTIFICATION = "notification"
    WEB_DATA2 = "webData2"
    ACTIVE_ASSET_CTX = "activeAssetCtx"
    PONG = "pong"


@dataclass
class Message:
    """A message from the websocket; ``data`` depends on the channel."""

    channel: Channel
    data: Any = None


_UNIT_CHANNELS = frozenset({Channel.NO_DATA, Channel.SUBSCRIPTION_RESPONSE, Channel.PONG})

_CHANNEL_PARSERS: dict[Channel, Callable[[Any], Any]] = {
    Channel.ALL_MIDS: lambda data: from_wire(AllMidsData, data),
    Channel.TRADES: _list_of(Trade),
    Channel.L2_BOOK: lambda data: from_wire(L2BookData, data),
    Channel.USER: parse_user_data,
    Channel.USER_FILLS: lambda data: from_wire(UserFillsData, data),
    Channel.CANDLE: lambda data: from_wire(CandleData, data),
    Channel.ORDER_UPDATES: _list_of(OrderUpdate),
    Channel.USER_FUNDINGS: lambda data: from_wire(UserFundingsData, data),
    Channel.USER_NON_FUNDING_LEDGER_UPDATES: _parse_ledger_updates,
    Channel.NOTIFICATION: lambda data: from_wire(NotificationData, data),
    Channel.WEB_DATA2: lambda data: from_wire(WebData2Data, data),
    Channel.ACTIVE_ASSET_CTX: lambda data: from_wire(ActiveAssetCtxData, data),
}


def parse_message(text: str) -> Message:
    """Decode one websocket text frame tagged by its ``channel`` key."""
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise JsonParseError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise JsonParseError(f"expected an object for a message, got {payload!r}")
    if "channel" not in payload:
        raise JsonParseError("missing field `channel` for a message")
    tag = payload["channel"]
    try:
        channel = Channel(tag)
    except (ValueError, TypeError):
        raise JsonParseError(f"unknown channel {tag!r}") from None
    if channel in _UNIT_CHANNELS:
        return Message(channel)
    if channel is Channel.HYPERLIQUID_ERROR:
        raise JsonParseError("hyperliquidError messages cannot be decoded from the wire")
    if "data" not in payload:
        raise JsonParseError(f"missing field `data` for {tag} message")
    return Message(channel, _CHANNEL_PARSERS[channel](payload["data"]))


def message_identifier(message: Message) -> str:
    """Identifier of the subscription a message is delivered to; empty for none."""
    data = message.data
    match message.channel:
        case Channel.ALL_MIDS:
            return Subscription("allMids").to_json()
        case Channel.USER:
            return "userEvents"
        case Channel.USER_FILLS:
            return Subscription("userFills", user=data.user).to_json()
        case Channel.TRADES:
            if not data:
                return ""
            return Subscription("trades", coin=data[0].coin).to_json()
        case Channel.L2_BOOK:
            return Subscription("l2Book", coin=data.coin).to_json()
        case Channel.CANDLE:
            return Subscription("candle", coin=data.coin, interval=data.interval).to_json()
        case Channel.ORDER_UPDATES:
            return "orderUpdates"
        case Channel.USER_FUNDINGS:
            return Subscription("userFundings", user=data.user).to_json()
        case Channel.USER_NON_FUNDING_LEDGER_UPDATES:
            return Subscription("userNonFundingLedgerUpdates", user=data.user).to_json()
        case Channel.NOTIFICATION:
            return "notification"
        case Channel.WEB_DATA2:
            return Subscription("webData2", user=data.user).to_json()
        case Channel.ACTIVE_ASSET_CTX:
            return Subscription("activeAssetCtx", coin=data.coin).to_json()
        case Channel.SUBSCRIPTION_RESPONSE | Channel.PONG:
            return "pong"
        case Channel.NO_DATA:
            return ""
        case Channel.HYPERLIQUID_ERROR:
            return f"hyperliquid error: {json.dumps(str(data), ensure_ascii=False)}"
    raise ValueError(f"unknown channel {message.channel!r}")
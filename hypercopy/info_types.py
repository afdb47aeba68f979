"""Records returned by the info endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field

from .records import Address


def _wire(name: str):
    return field(metadata={"wire": name})


@dataclass
class Leverage:
    type_string: str = _wire("type")
    value: int
    raw_usd: str | None


@dataclass
class CumulativeFunding:
    all_time: str
    since_open: str
    since_change: str


@dataclass
class PositionData:
    coin: str
    entry_px: str | None
    leverage: Leverage
    liquidation_px: str | None
    margin_used: str
    position_value: str
    return_on_equity: str
    szi: str
    unrealized_pnl: str
    max_leverage: int
    cum_funding: CumulativeFunding


@dataclass
class AssetPosition:
    position: PositionData
    type_string: str = _wire("type")


@dataclass
class MarginSummary:
    account_value: str
    total_margin_used: str
    total_ntl_pos: str
    total_raw_usd: str


@dataclass
class Level:
    n: int
    px: str
    sz: str


@dataclass
class Delta:
    type_string: str = _wire("type")
    coin: str
    usdc: str
    szi: str
    funding_rate: str


@dataclass
class DailyUserVlm:
    date: str
    exchange: str
    user_add: str
    user_cross: str


@dataclass
class Mm:
    add: str
    maker_fraction_cutoff: str


@dataclass
class Vip:
    add: str
    cross: str
    ntl_cutoff: str


@dataclass
class Tiers:
    mm: list[Mm]
    vip: list[Vip]


@dataclass
class FeeSchedule:
    add: str
    cross: str
    referral_discount: str
    tiers: Tiers


@dataclass
class UserTokenBalance:
    coin: str
    hold: str
    total: str


@dataclass
class BasicOrderInfo:
    coin: str
    side: str
    limit_px: str
    sz: str
    oid: int
    timestamp: int
    trigger_condition: str
    is_trigger: bool
    trigger_px: str
    is_position_tpsl: bool
    reduce_only: bool
    order_type: str
    orig_sz: str
    tif: str
    cloid: str | None


@dataclass
class OrderInfo:
    order: BasicOrderInfo
    status: str
    status_timestamp: int


@dataclass
class Referrer:
    referrer: Address
    code: str


@dataclass
class ReferrerData:
    required: str


@dataclass
class ReferrerState:
    stage: str
    data: ReferrerData


@dataclass
class UserStateResponse:
    asset_positions: list[AssetPosition]
    cross_margin_summary: MarginSummary
    margin_summary: MarginSummary
    withdrawable: str


@dataclass
class UserTokenBalanceResponse:
    balances: list[UserTokenBalance]


@dataclass
class UserFeesResponse:
    active_referral_discount: str
    daily_user_vlm: list[DailyUserVlm]
    fee_schedule: FeeSchedule
    user_add_rate: str
    user_cross_rate: str


@dataclass
class OpenOrdersResponse:
    coin: str
    limit_px: str
    oid: int
    side: str
    sz: str
    timestamp: int


@dataclass
class UserFillsResponse:
    closed_pnl: str
    coin: str
    crossed: bool
    dir: str
    hash: str
    oid: int
    px: str
    side: str
    start_position: str
    sz: str
    time: int
    fee: str


@dataclass
class FundingHistoryResponse:
    coin: str
    funding_rate: str
    premium: str
    time: int


@dataclass
class UserFundingResponse:
    time: int
    hash: str
    delta: Delta


@dataclass
class L2SnapshotResponse:
    coin: str
    levels: list[list[Level]]
    time: int


@dataclass
class RecentTradesResponse:
    coin: str
    side: str
    px: str
    sz: str
    time: int
    hash: str


@dataclass
class CandlesSnapshotResponse:
    time_open: int = _wire("t")
    time_close: int = _wire("T")
    coin: str = _wire("s")
    candle_interval: str = _wire("i")
    open: str = _wire("o")
    close: str = _wire("c")
    high: str = _wire("h")
    low: str = _wire("l")
    vlm: str = _wire("v")
    num_trades: int = _wire("n")


@dataclass
class OrderStatusResponse:
    status: str
    order: OrderInfo | None = None
    """``None`` if the order is not found."""


@dataclass
class ReferralResponse:
    referred_by: Referrer | None
    cum_vlm: str
    unclaimed_rewards: str
    claimed_rewards: str
    referrer_state: ReferrerState
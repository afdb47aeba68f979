import copy

import pytest

from hypercopy.errors import JsonParseError
from hypercopy.info_types import (
    CandlesSnapshotResponse,
    FundingHistoryResponse,
    L2SnapshotResponse,
    OrderStatusResponse,
    ReferralResponse,
    UserFeesResponse,
    UserFundingResponse,
    UserStateResponse,
)
from hypercopy.records import from_wire, to_wire

SUMMARY = {
    "accountValue": "1000.0",
    "totalMarginUsed": "10.0",
    "totalNtlPos": "100.0",
    "totalRawUsd": "900.0",
}

USER_STATE = {
    "assetPositions": [
        {
            "position": {
                "coin": "ETH",
                "entryPx": "2000.0",
                "leverage": {"type": "cross", "value": 20, "rawUsd": None},
                "liquidationPx": None,
                "marginUsed": "10.0",
                "positionValue": "100.0",
                "returnOnEquity": "0.1",
                "szi": "0.05",
                "unrealizedPnl": "1.0",
                "maxLeverage": 50,
                "cumFunding": {"allTime": "1", "sinceOpen": "0.5", "sinceChange": "0.2"},
            },
            "type": "oneWay",
        }
    ],
    "crossMarginSummary": SUMMARY,
    "marginSummary": SUMMARY,
    "withdrawable": "890.0",
}

ORDER = {
    "order": {
        "coin": "BTC",
        "side": "B",
        "limitPx": "30000",
        "sz": "0.1",
        "oid": 77,
        "timestamp": 1690393044548,
        "triggerCondition": "N/A",
        "isTrigger": False,
        "triggerPx": "0.0",
        "isPositionTpsl": False,
        "reduceOnly": False,
        "orderType": "Limit",
        "origSz": "0.1",
        "tif": "Gtc",
        "cloid": None,
    },
    "status": "open",
    "statusTimestamp": 1690393044549,
}


def test_user_state_fields():
    state = from_wire(UserStateResponse, USER_STATE)
    position = state.asset_positions[0]
    assert position.type_string == "oneWay"
    assert position.position.leverage.type_string == "cross"
    assert position.position.leverage.value == 20
    assert position.position.liquidation_px is None
    assert position.position.cum_funding.since_open == "0.5"
    assert state.withdrawable == "890.0"


def test_user_state_round_trip():
    assert to_wire(from_wire(UserStateResponse, USER_STATE)) == USER_STATE


def test_user_state_missing_field_raises():
    data = copy.deepcopy(USER_STATE)
    del data["assetPositions"][0]["position"]["szi"]
    with pytest.raises(JsonParseError, match="szi"):
        from_wire(UserStateResponse, data)


def test_candles_use_single_letter_keys():
    wire = {
        "t": 1,
        "T": 2,
        "s": "ETH",
        "i": "1m",
        "o": "10",
        "c": "11",
        "h": "12",
        "l": "9",
        "v": "100",
        "n": 4,
    }
    candle = from_wire(CandlesSnapshotResponse, wire)
    assert (candle.time_open, candle.time_close, candle.coin) == (1, 2, "ETH")
    assert candle.candle_interval == "1m"
    assert candle.num_trades == 4
    assert to_wire(candle) == wire


def test_order_status_without_order():
    status = from_wire(OrderStatusResponse, {"status": "unknownOid"})
    assert status.status == "unknownOid"
    assert status.order is None


def test_order_status_with_order():
    status = from_wire(OrderStatusResponse, {"status": "order", "order": ORDER})
    assert status.order.order.oid == 77
    assert status.order.order.cloid is None
    assert status.order.status_timestamp == ORDER["statusTimestamp"]
    assert to_wire(status) == {"status": "order", "order": ORDER}


def test_fees_round_trip():
    wire = {
        "activeReferralDiscount": "0.0",
        "dailyUserVlm": [
            {"date": "2024-01-01", "exchange": "1", "userAdd": "2", "userCross": "3"}
        ],
        "feeSchedule": {
            "add": "0.0002",
            "cross": "0.0005",
            "referralDiscount": "0.04",
            "tiers": {
                "mm": [{"add": "-0.00001", "makerFractionCutoff": "0.005"}],
                "vip": [{"add": "0.00016", "cross": "0.0004", "ntlCutoff": "5000000"}],
            },
        },
        "userAddRate": "0.0002",
        "userCrossRate": "0.0005",
    }
    fees = from_wire(UserFeesResponse, wire)
    assert fees.fee_schedule.tiers.mm[0].maker_fraction_cutoff == "0.005"
    assert to_wire(fees) == wire


def test_l2_snapshot_levels():
    wire = {
        "coin": "ETH",
        "levels": [[{"n": 2, "px": "100", "sz": "1"}], [{"n": 1, "px": "101", "sz": "2"}]],
        "time": 5,
    }
    book = from_wire(L2SnapshotResponse, wire)
    assert [len(side) for side in book.levels] == [1, 1]
    assert book.levels[1][0].px == "101"


def test_user_funding_delta_type_key():
    wire = {
        "time": 3,
        "hash": "0xabc",
        "delta": {
            "type": "funding",
            "coin": "ETH",
            "usdc": "-1.0",
            "szi": "0.1",
            "fundingRate": "0.0001",
        },
    }
    funding = from_wire(UserFundingResponse, wire)
    assert funding.delta.type_string == "funding"
    assert funding.delta.funding_rate == "0.0001"


def test_funding_history_rejects_string_time():
    with pytest.raises(JsonParseError):
        from_wire(
            FundingHistoryResponse,
            {"coin": "ETH", "fundingRate": "0.1", "premium": "0", "time": "soon"},
        )


def test_referral_with_and_without_referrer():
    base = {
        "referredBy": None,
        "cumVlm": "0",
        "unclaimedRewards": "0",
        "claimedRewards": "0",
        "referrerState": {"stage": "ready", "data": {"required": "10000"}},
    }
    plain = from_wire(ReferralResponse, base)
    assert plain.referred_by is None
    assert plain.referrer_state.data.required == "10000"

    referrer = "0x" + "CD" * 20
    referred = from_wire(
        ReferralResponse, dict(base, referredBy={"referrer": referrer, "code": "CODE"})
    )
    assert referred.referred_by.referrer == referrer.lower()
    assert referred.referred_by.code == "CODE"
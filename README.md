# hypercopy

An asyncio client for the Hyperliquid exchange: typed queries against the
`/info` HTTP endpoint, websocket subscriptions delivered to `asyncio.Queue`
objects, and a few numeric helpers used when mirroring another account's
trades.

## Installation

```
pip install hypercopy
```

For running the test suite:

```
pip install "hypercopy[test]"
pytest
```

## Querying market and account data

```python
import asyncio

from hypercopy.helpers import BaseUrl
from hypercopy.info_client import InfoClient


async def main():
    async with InfoClient(base_url=BaseUrl.TESTNET) as client:
        mids = await client.all_mids()
        print(mids.get("ETH"))

        spot = await client.spot_meta()
        index = spot.add_pair_and_name_to_index_map({})
        print(index)

        book = await client.l2_snapshot("ETH")
        print(book.levels[0][:3])


asyncio.run(main())
```

`InfoClient` takes a `BaseUrl` (`MAINNET`, the default, `TESTNET` or
`LOCALHOST`) or a plain URL string, and optionally an existing
`aiohttp.ClientSession`. Besides the calls above it offers `open_orders`,
`user_state`, `user_states`, `user_token_balances`, `user_fees`, `meta`,
`spot_meta_and_asset_contexts`, `user_fills`, `funding_history`,
`user_funding_history`, `recent_trades`, `candles_snapshot`,
`query_order_by_oid`, `query_referral_state` and `historical_orders`.
Each returns dataclasses from `hypercopy.info_types` or `hypercopy.meta`
(or a plain `dict` for `all_mids`). Addresses are given as
`0x`-prefixed 40-digit hex strings.

`hypercopy.info_client.build_info_request` builds the JSON body of any of
these requests without sending it.

HTTP failures are raised as exceptions from `hypercopy.errors`:
`ClientRequestError` for 4xx answers, `ServerRequestError` for 5xx,
`GenericRequestError` for transport problems and `JsonParseError` for
bodies that cannot be decoded. All of them derive from `HyperliquidError`.

## Websocket subscriptions

```python
import asyncio

from hypercopy.info_client import InfoClient
from hypercopy.ws_types import Subscription


async def watch():
    client = InfoClient(reconnect=True)
    queue = asyncio.Queue()
    sub_id = await client.subscribe(Subscription("allMids"), queue)
    try:
        for _ in range(5):
            message = await queue.get()
            print(message.channel, message.data)
    finally:
        await client.unsubscribe(sub_id)
        await client.close()


asyncio.run(watch())
```

A `Subscription` is made from its wire type and the fields that type
needs, for example `Subscription("l2Book", coin="ETH")`,
`Subscription("candle", coin="ETH", interval="1m")` or
`Subscription("userFills", user="0x" + "00" * 20)`. Each queued item is a
`hypercopy.ws_types.Message` whose `channel` is a `Channel` member and
whose `data` is the decoded record for that channel.

Only one `userEvents` subscription may be active at a time; a second one
raises `UserEventsError`. Pongs are delivered to every queue. When the
connection drops, every queue receives a `Message` on `Channel.NO_DATA`;
clients created with `reconnect=True` reconnect after a second and
resubscribe. The connection itself is managed by
`hypercopy.ws_manager.WsManager`, which sends a ping every 15 seconds.

## Helpers

```python
from hypercopy.helpers import bps_diff, float_to_string_for_hashing, truncate_float
from hypercopy.utils import format_adjust_price

format_adjust_price("123.45", 1.05)        # 129.62, same decimals as the input
truncate_float(1.23456, 2, False)          # 1.23
bps_diff(100.0, 101.0)                     # 100
float_to_string_for_hashing(0.00076000)    # "0.00076"
```

`hypercopy.helpers` also provides `next_nonce`, `now_timestamp_ms`,
`uuid_to_hex_string` and `generate_random_key`.

`hypercopy.utils.info_init(client, directory="info")` fetches the spot
metadata, creates the directory if needed and writes it as
pretty-printed JSON to `spot-meta.json` there, returning the file path.

`hypercopy.records` holds the generic `from_wire` / `to_wire` conversion
between camelCase JSON objects and the package's dataclasses.

## What this package does not do

It only reads: it queries the info endpoint and listens to websocket
feeds. It does not place, modify or cancel orders, does not sign actions
with a wallet, and has no command-line program or copy-trading loop of
its own; those have to be built on top of it.
"""Websocket connection that fans channel messages out to subscribers."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from .errors import (
    HyperliquidError,
    SubscriptionNotFoundError,
    UserEventsError,
    WebsocketError,
    WsSendError,
)
from .ws_types import (
    Channel,
    Message,
    message_identifier,
    parse_message,
    subscription_entry_key,
)

logger = logging.getLogger(__name__)

PING_INTERVAL = 15.0
RECONNECT_DELAY = 1.0
_GROUPED_KEYS = ("userEvents", "orderUpdates")


@dataclass
class _Subscriber:
    queue: asyncio.Queue
    subscription_id: int
    identifier: str


def _subscription_payload(method: str, identifier: str) -> str:
    try:
        subscription = json.loads(identifier)
    except ValueError as exc:
        from .errors import JsonParseError

        raise JsonParseError(str(exc)) from exc
    return json.dumps(
        {"method": method, "subscription": subscription},
        separators=(",", ":"),
        sort_keys=True,
        ensure_ascii=False,
    )


class WsManager:
    """Owns one websocket, keeps it alive and routes its messages to queues.

    Messages are delivered to every queue registered for the subscription
    they belong to; pongs and connection events reach every queue.
    """

    def __init__(
        self,
        url: str,
        socket: Any,
        *,
        reconnect: bool = False,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self._socket = socket
        self._reconnect = reconnect
        self._session = session
        self._owns_session = False
        self._stopped = False
        self._write_lock = asyncio.Lock()
        self._subscription_lock = asyncio.Lock()
        self._subscriptions: dict[str, list[_Subscriber]] = {}
        self._identifiers: dict[int, str] = {}
        self._next_id = 0
        self._tasks: list[asyncio.Task] = []

    @classmethod
    async def connect(
        cls,
        url: str,
        reconnect: bool = False,
        session: aiohttp.ClientSession | None = None,
    ) -> WsManager:
        """Open a websocket to ``url`` and start the reader and ping tasks."""
        owns_session = session is None
        if session is None:
            session = aiohttp.ClientSession()
        try:
            socket = await cls._open(session, url)
        except WebsocketError:
            if owns_session:
                await session.close()
            raise
        manager = cls(url, socket, reconnect=reconnect, session=session)
        manager._owns_session = owns_session
        manager._tasks = [
            asyncio.create_task(manager._read_loop()),
            asyncio.create_task(manager._ping_loop()),
        ]
        return manager

    @staticmethod
    async def _open(session: aiohttp.ClientSession, url: str) -> Any:
        try:
            return await session.ws_connect(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as exc:
            raise WebsocketError(str(exc) or type(exc).__name__) from exc

    async def _write(self, payload: str) -> None:
        try:
            await self._socket.send_str(payload)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise WebsocketError(str(exc) or type(exc).__name__) from exc

    async def _send(self, payload: str) -> None:
        async with self._write_lock:
            await self._write(payload)

    async def add_subscription(self, identifier: str, queue: asyncio.Queue) -> int:
        """Register ``queue`` for the subscription ``identifier`` and return its id."""
        async with self._subscription_lock:
            entry_key = subscription_entry_key(identifier)
            subscribers = self._subscriptions.setdefault(entry_key, [])
            if subscribers and entry_key == "userEvents":
                raise UserEventsError()
            if not subscribers:
                await self._send(_subscription_payload("subscribe", identifier))
            subscription_id = self._next_id
            self._identifiers[subscription_id] = identifier
            subscribers.append(_Subscriber(queue, subscription_id, identifier))
            self._next_id += 1
            return subscription_id

    async def remove_subscription(self, subscription_id: int) -> None:
        """Drop a subscription; the feed is unsubscribed when its last queue leaves."""
        async with self._subscription_lock:
            identifier = self._identifiers.get(subscription_id)
            if identifier is None:
                raise SubscriptionNotFoundError()
            entry_key = subscription_entry_key(identifier)
            del self._identifiers[subscription_id]
            subscribers = self._subscriptions.get(entry_key)
            if subscribers is None:
                raise SubscriptionNotFoundError()
            position = next(
                (
                    n
                    for n, subscriber in enumerate(subscribers)
                    if subscriber.subscription_id == subscription_id
                ),
                None,
            )
            if position is None:
                raise SubscriptionNotFoundError()
            del subscribers[position]
            if not subscribers:
                await self._send(_subscription_payload("unsubscribe", identifier))

    @staticmethod
    def _deliver(subscribers: list[_Subscriber], message: Message) -> None:
        failure: WsSendError | None = None
        for subscriber in subscribers:
            try:
                subscriber.queue.put_nowait(message)
            except asyncio.QueueFull as exc:
                failure = WsSendError(f"queue full: {exc}" if str(exc) else "queue full")
        if failure is not None:
            raise failure

    def dispatch_text(self, text: str) -> None:
        """Decode one text frame and hand it to the queues it belongs to."""
        if not text.startswith("{"):
            return
        message = parse_message(text)
        if message.channel is Channel.PONG:
            self.send_to_all(message)
            return
        identifier = message_identifier(message)
        if not identifier:
            return
        self._deliver(list(self._subscriptions.get(identifier, ())), message)

    def send_to_all(self, message: Message) -> None:
        """Put ``message`` on every subscriber's queue."""
        everyone = [s for subscribers in self._subscriptions.values() for s in subscribers]
        self._deliver(everyone, message)

    def _handle_frame(self, frame: Any) -> None:
        if frame.type == aiohttp.WSMsgType.TEXT:
            self.dispatch_text(frame.data)
        elif frame.type == aiohttp.WSMsgType.BINARY:
            try:
                text = bytes(frame.data).decode("utf-8")
            except UnicodeDecodeError as exc:
                self.send_to_all(
                    Message(
                        Channel.HYPERLIQUID_ERROR,
                        f"Reader data conversion failed: {exc}",
                    )
                )
            else:
                self.dispatch_text(text)
        elif frame.type == aiohttp.WSMsgType.ERROR:
            self.send_to_all(
                Message(Channel.HYPERLIQUID_ERROR, f"Generic reader error: {frame.data}")
            )

    async def _read_loop(self) -> None:
        while not self._stopped:
            async for frame in self._socket:
                if self._stopped:
                    break
                try:
                    self._handle_frame(frame)
                except HyperliquidError as exc:
                    logger.error("Error processing data received by WsManager reader: %s", exc)
            if self._stopped:
                break
            logger.warning("WsManager disconnected")
            try:
                self.send_to_all(Message(Channel.NO_DATA))
            except WsSendError as exc:
                logger.warning("Error sending disconnection notification err=%s", exc)
            if not self._reconnect:
                logger.error(
                    "WsManager reconnection disabled. Will not reconnect and exiting reader task."
                )
                break
            await asyncio.sleep(RECONNECT_DELAY)
            logger.info("WsManager attempting to reconnect")
            try:
                await self._reopen()
            except WebsocketError as exc:
                logger.error("Could not connect to websocket %s", exc)
        logger.warning("ws message reader task stopped")

    async def _reopen(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        socket = await self._open(self._session, self.url)
        async with self._write_lock:
            self._socket = socket
            for key, subscribers in list(self._subscriptions.items()):
                identifiers = (
                    [s.identifier for s in subscribers] if key in _GROUPED_KEYS else [key]
                )
                for identifier in identifiers:
                    try:
                        await self._write(_subscription_payload("subscribe", identifier))
                    except HyperliquidError as exc:
                        logger.error("Could not resubscribe %s: %s", identifier, exc)
        logger.info("WsManager reconnect finished")

    async def _ping_loop(self) -> None:
        payload = json.dumps({"method": "ping"}, separators=(",", ":"))
        while not self._stopped:
            logger.debug("ping")
            try:
                await self._send(payload)
            except WebsocketError as exc:
                logger.error("Error pinging server: %s", exc)
            await asyncio.sleep(PING_INTERVAL)
        logger.warning("ws ping task stopped")

    async def close(self) -> None:
        """Stop the background tasks and close the connection."""
        self._stopped = True
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        try:
            await self._socket.close()
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            logger.warning("Error closing websocket: %s", exc)
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> WsManager:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"WsManager(url={self.url!r}, reconnect={self._reconnect!r})"
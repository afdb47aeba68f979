"""Exception hierarchy raised by the client."""

from __future__ import annotations


class HyperliquidError(Exception):
    """Base class for every error raised by this package."""

    default_message = "hyperliquid error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class ClientRequestError(HyperliquidError):
    """The API answered with a 4xx status."""

    def __init__(
        self,
        status_code: int,
        error_message: str,
        error_code: int | None = None,
        error_data: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_message = error_message
        self.error_code = error_code
        self.error_data = error_data
        super().__init__(
            f"Client error: status code: {status_code}, error code: {error_code}, "
            f"error message: {error_message}, error data: {error_data}"
        )


class ServerRequestError(HyperliquidError):
    """The API answered with a 5xx (or other non-client failure) status."""

    def __init__(self, status_code: int, error_message: str) -> None:
        self.status_code = status_code
        self.error_message = error_message
        super().__init__(
            f"Server error: status code: {status_code}, error message: {error_message}"
        )


class GenericRequestError(HyperliquidError):
    """The HTTP request could not be sent or its body could not be read."""

    default_message = "generic request error"


class JsonParseError(HyperliquidError, ValueError):
    """Data did not have the expected JSON shape."""

    default_message = "json parse error"


class WebsocketError(HyperliquidError):
    """The websocket connection failed."""

    default_message = "websocket error"


class WsSendError(HyperliquidError):
    """A message could not be handed to a subscriber."""

    default_message = "websocket send error"


class SubscriptionNotFoundError(HyperliquidError):
    """No subscription exists with the given id."""

    default_message = "subscription not found"


class UserEventsError(HyperliquidError):
    """Only one user events subscription may exist at a time."""

    default_message = "cannot subscribe to multiple user events"


class RandGenError(HyperliquidError):
    """Random bytes could not be generated."""

    default_message = "random generation error"
"""Custom exception hierarchy for pricefeed."""

from typing import Any


class PriceFeedError(Exception):
    """Base exception for all pricefeed errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(PriceFeedError):
    """Invalid or missing configuration.

    Raised by load_config() and read_api_key() during startup. Should be
    treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value (redacted for secrets)
    """


class TransportFailure(PriceFeedError):
    """The provider could not be reached or did not answer with JSON.

    Covers connection errors, timeouts, non-200 statuses and bodies that
    are not valid JSON. Policy: abort the update. The core never retries.

    Context keys:
        symbol: str — the symbol being fetched
        url: str — the request URL with the API key redacted
        status_code: int | None — HTTP status code if a response arrived
    """


class DecodeError(PriceFeedError):
    """A provider response arrived but could not be normalized.

    Policy: abort the whole response. Partial results are never returned.

    Context keys:
        symbol: str — the symbol being fetched (added by the feed)
    """


class UnrecognizedResponseShape(DecodeError):
    """Required envelope fields are absent or have the wrong shape.

    Context keys:
        field: str — the missing or malformed envelope key
        provider_message: str | None — error/note text sent by the provider
    """


class MalformedNumber(DecodeError):
    """A numeric field could not be coerced to its target type.

    Context keys:
        value: Any — the offending wire value
        target: str — "float" or "int"
        field: str — the record field (added by the parser)
        timestamp: str — the record's timestamp key (added by the parser)
    """


class MalformedTimestamp(DecodeError):
    """A timestamp key does not match the ``YYYY-MM-DD HH:MM:SS`` layout.

    Context keys:
        timestamp: str — the offending key
    """


class UnknownTimezone(DecodeError):
    """The declared time zone identifier cannot be resolved.

    Context keys:
        time_zone: str — the offending identifier
    """

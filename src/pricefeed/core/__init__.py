"""pricefeed.core — Config, exceptions, and logging setup."""

from pricefeed.core.config import (
    AlphaVantageConfig,
    Interval,
    LoggingConfig,
    OutputSize,
    PriceFeedConfig,
    load_config,
    read_api_key,
)
from pricefeed.core.exceptions import (
    ConfigError,
    DecodeError,
    MalformedNumber,
    MalformedTimestamp,
    PriceFeedError,
    TransportFailure,
    UnknownTimezone,
    UnrecognizedResponseShape,
)
from pricefeed.core.logging import configure_logging

__all__ = [
    # Config
    "AlphaVantageConfig",
    "Interval",
    "LoggingConfig",
    "OutputSize",
    "PriceFeedConfig",
    "load_config",
    "read_api_key",
    # Exceptions
    "PriceFeedError",
    "ConfigError",
    "TransportFailure",
    "DecodeError",
    "UnrecognizedResponseShape",
    "MalformedNumber",
    "MalformedTimestamp",
    "UnknownTimezone",
    # Logging
    "configure_logging",
]

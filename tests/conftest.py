"""Shared pytest fixtures for pricefeed."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from pricefeed.feeds.models import PricePoint


def _encode(value: float | int, as_string: bool) -> Any:
    return repr(value) if as_string else value


@pytest.fixture
def build_intraday_payload() -> Callable[..., dict]:
    """Encode PricePoints back into Alpha Vantage's intraday wire shape."""

    def _build(
        points: Iterable[PricePoint],
        time_zone: str = "US/Eastern",
        interval: str = "5min",
        symbol: str = "IBM",
        as_strings: bool = True,
    ) -> dict:
        zone = ZoneInfo(time_zone)
        series = {
            p.timestamp.astimezone(zone).strftime("%Y-%m-%d %H:%M:%S"): {
                "1. open": _encode(p.open, as_strings),
                "2. high": _encode(p.high, as_strings),
                "3. low": _encode(p.low, as_strings),
                "4. close": _encode(p.close, as_strings),
                "5. volume": _encode(p.volume, as_strings),
            }
            for p in points
        }
        return {
            "Meta Data": {
                "1. Information": "Intraday (5min) open, high, low, close prices and volume",
                "2. Symbol": symbol,
                "3. Last Refreshed": max(series) if series else "",
                "4. Interval": interval,
                "5. Output Size": "Compact",
                "6. Time Zone": time_zone,
            },
            f"Time Series ({interval})": series,
        }

    return _build


@pytest.fixture
def intraday_payload() -> dict:
    """A realistic IBM response mixing string and number encodings."""
    return {
        "Meta Data": {
            "1. Information": "Intraday (5min) open, high, low, close prices and volume",
            "2. Symbol": "IBM",
            "3. Last Refreshed": "2024-03-08 16:00:00",
            "4. Interval": "5min",
            "5. Output Size": "Compact",
            "6. Time Zone": "US/Eastern",
        },
        "Time Series (5min)": {
            "2024-03-08 16:00:00": {
                "1. open": 196.05,
                "2. high": 196.2,
                "3. low": 195.9,
                "4. close": 196.1,
                "5. volume": 812345,
            },
            "2024-03-08 15:55:00": {
                "1. open": "195.8000",
                "2. high": "196.1000",
                "3. low": "195.7500",
                "4. close": "196.0500",
                "5. volume": "402311",
            },
            "2024-03-08 15:50:00": {
                "1. open": "195.6000",
                "2. high": 195.85,
                "3. low": "195.5500",
                "4. close": 195.8,
                "5. volume": "288100",
            },
        },
    }


@pytest.fixture
def dst_gap_payload() -> dict:
    """Spring-forward day in US/Eastern: 02:30 local does not exist."""
    return {
        "Meta Data": {
            "2. Symbol": "IBM",
            "6. Time Zone": "US/Eastern",
        },
        "Time Series (5min)": {
            "2024-03-10 02:30:00": {
                "1. open": "189.00",
                "2. high": "189.10",
                "3. low": "188.90",
                "4. close": "189.05",
                "5. volume": "100",
            },
            "2024-03-10 09:30:00": {
                "1. open": "190.12",
                "2. high": 191.0,
                "3. low": "189.50",
                "4. close": 190.80,
                "5. volume": "1000000",
            },
        },
    }

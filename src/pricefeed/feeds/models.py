"""Price data models shared by every data feed."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class PricePoint(BaseModel):
    """A single intraday OHLCV sample — the canonical price record.

    Every data feed produces data in this format. ``timestamp`` is an
    absolute instant carrying the provider's time zone.
    """

    model_config = ConfigDict(frozen=True)

    open: float
    high: float
    low: float
    close: float
    volume: int
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_is_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError(f"timestamp must be timezone-aware, got {v!r}")
        return v

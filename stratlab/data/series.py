"""
Core price data structures consumed by the backtesting engine.
"""
from datetime import datetime, timezone
from typing import List

import pandas as pd
from pydantic import BaseModel, Field, model_validator


class PriceBar(BaseModel):
    """
    One sampling interval of OHLCV market data.

    Args:
        date (datetime): The timestamp of the bar.
        open (float): The opening price.
        high (float): The highest traded price.
        low (float): The lowest traded price.
        close (float): The closing price.
        volume (float): The traded volume.
    """
    date: datetime
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "PriceBar":
        if not (self.low <= self.open <= self.high and self.low <= self.close <= self.high):
            raise ValueError(
                f"Bar {self.date.isoformat()} violates low <= open, close <= high "
                f"(o={self.open}, h={self.high}, l={self.low}, c={self.close})"
            )
        return self


class PriceSeries(BaseModel):
    """
    An ordered, non-empty list of bars for a single symbol.

    Args:
        symbol (str): The traded symbol the bars belong to.
        bars (List[PriceBar]): The bars, strictly increasing by date.
    """
    symbol: str = "SYMBOL"
    bars: List[PriceBar]

    @model_validator(mode="after")
    def _check_order(self) -> "PriceSeries":
        if not self.bars:
            raise ValueError("Price series must contain at least one bar.")
        for previous, current in zip(self.bars, self.bars[1:]):
            if current.date <= previous.date:
                raise ValueError(
                    f"Price series dates must be strictly increasing: "
                    f"{current.date.isoformat()} follows {previous.date.isoformat()}"
                )
        return self

    def __len__(self) -> int:
        return len(self.bars)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, symbol: str = "SYMBOL") -> "PriceSeries":
        """
        Builds a series from an OHLCV DataFrame indexed by timestamp.

        Args:
            df (pd.DataFrame): Data with lower-case open/high/low/close/volume
                columns and a DatetimeIndex.
            symbol (str): The symbol to attach to the series.

        Returns:
            PriceSeries: The validated series.
        """
        bars = [
            PriceBar(
                date=timestamp.to_pydatetime(),
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                volume=float(row["volume"]),
            )
            for timestamp, row in df.sort_index().iterrows()
        ]
        return cls(symbol=symbol, bars=bars)

    def to_dataframe(self) -> pd.DataFrame:
        """Returns the bars as an OHLCV DataFrame indexed by date."""
        return bars_to_dataframe(self.bars)


def bars_to_dataframe(bars: List[PriceBar]) -> pd.DataFrame:
    """Converts a list of bars into an OHLCV DataFrame indexed by date."""
    df = pd.DataFrame(
        [bar.model_dump() for bar in bars],
        columns=["date", "open", "high", "low", "close", "volume"],
    )
    return df.set_index(pd.DatetimeIndex(df.pop("date")))


def to_naive_utc(value: datetime) -> datetime:
    """
    Converts a timezone-aware timestamp to naive UTC. Naive timestamps are
    returned unchanged, so aware and naive inputs become comparable.
    """
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

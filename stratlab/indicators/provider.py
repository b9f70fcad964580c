"""
Indicator provider interface and the default pandas-based implementation.

The engine only ever sees an IndicatorSnapshot: one named series per
indicator, computed over the bars up to and including the current one.
"""
import math
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict

from stratlab.data.series import PriceBar, bars_to_dataframe
from stratlab.indicators import factory as indicator_factory


class IndicatorSnapshot(BaseModel):
    """
    Indicator series computed from a price series prefix.

    Each field holds the full series for the prefix, oldest first. Missing
    history is represented by an empty list or NaN entries.
    """
    model_config = ConfigDict(frozen=True)

    sma20: List[float] = []
    sma50: List[float] = []
    ema12: List[float] = []
    ema26: List[float] = []
    rsi: List[float] = []
    macd: List[float] = []
    macd_signal: List[float] = []
    macd_histogram: List[float] = []
    bb_upper: List[float] = []
    bb_middle: List[float] = []
    bb_lower: List[float] = []
    stoch_k: List[float] = []
    stoch_d: List[float] = []

    def series(self, name: str) -> List[float]:
        """
        Returns the series stored under `name`.

        Raises:
            KeyError: If `name` is not one of `INDICATOR_NAMES`.
        """
        if name not in INDICATOR_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def latest(self, name: str) -> Optional[float]:
        """
        Returns the most recent value of an indicator, or None when the
        indicator has no usable value yet.
        """
        return value_at(self.series(name), 0)


INDICATOR_NAMES: FrozenSet[str] = frozenset(IndicatorSnapshot.model_fields.keys())


def value_at(series: Sequence[float], offset: int) -> Optional[float]:
    """
    Returns the value `offset` samples before the last one, or None if the
    series is too short or the value is missing.
    """
    if offset < 0 or len(series) <= offset:
        return None
    value = series[len(series) - 1 - offset]
    if value is None or math.isnan(value):
        return None
    return float(value)


class IndicatorProvider(ABC):
    """
    Abstract base class for indicator providers.

    Implementations must be deterministic: the same bars always yield the
    same snapshot.
    """

    @abstractmethod
    def compute_indicators(self, bars: Sequence[PriceBar]) -> IndicatorSnapshot:
        """
        Computes indicator series over a price series prefix.

        Args:
            bars (Sequence[PriceBar]): All bars up to and including the
                current one, oldest first.

        Returns:
            IndicatorSnapshot: The computed series.
        """
        raise NotImplementedError

    def prefix_snapshots(self, bars: Sequence[PriceBar]) -> "PrefixSnapshots":
        """
        Returns the snapshots for every prefix of `bars`, used by the engine
        for one run. The default recomputes each prefix with
        `compute_indicators`.
        """
        return PrefixSnapshots(self, bars)


class PrefixSnapshots:
    """
    Indicator snapshots for the prefixes of one bar sequence.

    Args:
        provider (IndicatorProvider): The provider computing the snapshots.
        bars (Sequence[PriceBar]): The full bar sequence, oldest first.
    """

    def __init__(self, provider: IndicatorProvider, bars: Sequence[PriceBar]):
        self._provider = provider
        self._bars = bars

    def at(self, end: int) -> IndicatorSnapshot:
        """Snapshot over `bars[:end]`, i.e. up to and including bar `end - 1`."""
        return self._provider.compute_indicators(self._bars[:end])


class _CachedPrefixSnapshots(PrefixSnapshots):
    """
    Computes every indicator once over the full sequence and slices it per
    prefix. Valid because each indicator value only depends on earlier bars.
    """

    def __init__(self, provider: "TechnicalIndicatorProvider", bars: Sequence[PriceBar]):
        super().__init__(provider, bars)
        self._columns: Optional[Dict[str, List[float]]] = None

    def at(self, end: int) -> IndicatorSnapshot:
        if self._columns is None:
            self._columns = self._provider.compute_columns(self._bars)
        required = self._provider.required_lengths()
        return IndicatorSnapshot.model_construct(**{
            name: values[:end] if end >= required[name] else []
            for name, values in self._columns.items()
        })


def _to_list(series: Optional[pd.Series]) -> List[float]:
    if series is None:
        return []
    return [float(v) for v in series.to_numpy(dtype=float)]


class TechnicalIndicatorProvider(IndicatorProvider):
    """
    Computes SMA(20/50), EMA(12/26), RSI, MACD, Bollinger Bands and the
    Stochastic Oscillator with the indicator factory.
    """

    def __init__(
        self,
        rsi_length: int = 14,
        macd_fast: int = 12,
        macd_slow: int = 26,
        macd_signal: int = 9,
        bb_length: int = 20,
        bb_std: float = 2.0,
        stoch_k: int = 14,
        stoch_d: int = 3,
    ):
        self.rsi_length = rsi_length
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.bb_length = bb_length
        self.bb_std = bb_std
        self.stoch_k = stoch_k
        self.stoch_d = stoch_d

    def compute_indicators(self, bars: Sequence[PriceBar]) -> IndicatorSnapshot:
        return IndicatorSnapshot(**self.compute_columns(bars))

    def prefix_snapshots(self, bars: Sequence[PriceBar]) -> PrefixSnapshots:
        return _CachedPrefixSnapshots(self, bars)

    def required_lengths(self) -> Dict[str, int]:
        """Minimum number of bars before each indicator series is produced."""
        macd = self.macd_slow
        return {
            "sma20": 20,
            "sma50": 50,
            "ema12": 12,
            "ema26": 26,
            "rsi": self.rsi_length + 1,
            "macd": macd,
            "macd_signal": macd,
            "macd_histogram": macd,
            "bb_upper": self.bb_length,
            "bb_middle": self.bb_length,
            "bb_lower": self.bb_length,
            "stoch_k": self.stoch_k,
            "stoch_d": self.stoch_k,
        }

    def compute_columns(self, bars: Sequence[PriceBar]) -> Dict[str, List[float]]:
        """
        Computes every indicator series over `bars`.

        Returns:
            Dict[str, List[float]]: One list per indicator name; empty when
            `bars` is shorter than the indicator needs.
        """
        if not bars:
            return {name: [] for name in INDICATOR_NAMES}

        df = bars_to_dataframe(list(bars))
        close = df["close"]

        macd = indicator_factory.macd(close, self.macd_fast, self.macd_slow, self.macd_signal)
        bands = indicator_factory.bollinger_bands(close, self.bb_length, self.bb_std)
        stoch = indicator_factory.stochastic(df["high"], df["low"], close, self.stoch_k, self.stoch_d)

        return {
            "sma20": _to_list(indicator_factory.sma(close, 20)),
            "sma50": _to_list(indicator_factory.sma(close, 50)),
            "ema12": _to_list(indicator_factory.ema(close, 12)),
            "ema26": _to_list(indicator_factory.ema(close, 26)),
            "rsi": _to_list(indicator_factory.rsi(close, self.rsi_length)),
            "macd": _to_list(macd["macd"] if macd is not None else None),
            "macd_signal": _to_list(macd["signal"] if macd is not None else None),
            "macd_histogram": _to_list(macd["histogram"] if macd is not None else None),
            "bb_upper": _to_list(bands["upper"] if bands is not None else None),
            "bb_middle": _to_list(bands["middle"] if bands is not None else None),
            "bb_lower": _to_list(bands["lower"] if bands is not None else None),
            "stoch_k": _to_list(stoch["k"] if stoch is not None else None),
            "stoch_d": _to_list(stoch["d"] if stoch is not None else None),
        }

"""
Abstract base class for backtesting engines.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from stratlab.backtester.results import BacktestResult
from stratlab.config import BacktestSettings, EngineConfig
from stratlab.data.series import PriceBar, PriceSeries
from stratlab.indicators.provider import IndicatorProvider, TechnicalIndicatorProvider
from stratlab.strategy import Strategy


class BaseBacktester(ABC):
    """
    Abstract base class for all backtesting engines.

    It defines the common interface for running a backtest of a strategy
    against a price series. A backtester holds configuration only, so one
    instance can serve any number of runs.
    """

    def __init__(
        self,
        indicator_provider: Optional[IndicatorProvider] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initializes the backtester.

        Args:
            indicator_provider (Optional[IndicatorProvider]): Source of the
                indicator snapshots; defaults to TechnicalIndicatorProvider.
            config (Optional[EngineConfig]): Replay loop configuration.
        """
        self._provider = indicator_provider or TechnicalIndicatorProvider()
        self._config = config or EngineConfig()

    @abstractmethod
    def run(
        self,
        price_series: Union[PriceSeries, Sequence[PriceBar]],
        strategy: Strategy,
        settings: BacktestSettings,
    ) -> BacktestResult:
        """
        Runs a backtest of the given strategy.

        Args:
            price_series: The historical bars to replay.
            strategy (Strategy): The strategy to be backtested.
            settings (BacktestSettings): Capital, costs and date window.

        Returns:
            BacktestResult: An object containing the results of the backtest.
        """
        raise NotImplementedError

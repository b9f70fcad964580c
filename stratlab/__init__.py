"""
This __init__.py file exposes the public API of the StratLab backtesting engine.
"""

from .backtester.engine import EventDrivenBacktester, run_backtest
from .backtester.results import BacktestResult, EquityPoint, PerformanceReport, Trade
from .config import BacktestSettings, Config, EngineConfig
from .data.series import PriceBar, PriceSeries
from .indicators.provider import IndicatorProvider, IndicatorSnapshot, TechnicalIndicatorProvider
from .io import load_config
from .report import generate_report
from .strategy import RiskManagement, Strategy, StrategyRule

__all__ = [
    "BacktestResult",
    "BacktestSettings",
    "Config",
    "EngineConfig",
    "EquityPoint",
    "EventDrivenBacktester",
    "IndicatorProvider",
    "IndicatorSnapshot",
    "PerformanceReport",
    "PriceBar",
    "PriceSeries",
    "RiskManagement",
    "Strategy",
    "StrategyRule",
    "TechnicalIndicatorProvider",
    "Trade",
    "generate_report",
    "load_config",
    "run_backtest",
]

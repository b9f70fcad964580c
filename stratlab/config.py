"""
Configuration models for the StratLab backtesting engine.

This module defines the Pydantic models for validating and managing a
backtest run's configuration, which is typically loaded from a YAML file.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from stratlab.data.series import to_naive_utc
from stratlab.strategy import Strategy


class BacktestSettings(BaseModel):
    """
    Capital, costs and date window of a backtest run.

    Args:
        initial_capital (float): Starting cash.
        commission_fixed (float): Fixed commission charged per order.
        commission_pct (float): Commission charged per order, in percent of
            the order value.
        start_date (datetime): First date that is replayed. Timezone-aware
            values are stored as naive UTC.
        end_date (datetime): Last date that is replayed.
    """
    initial_capital: float = Field(..., gt=0, description="Starting cash.")
    commission_fixed: float = Field(0.0, ge=0, description="Fixed commission per order.")
    commission_pct: float = Field(0.0, ge=0, description="Percent commission per order.")
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _check_window(self) -> "BacktestSettings":
        if self.start_date >= self.end_date:
            raise ValueError(
                f"start_date ({self.start_date.isoformat()}) must be before "
                f"end_date ({self.end_date.isoformat()})"
            )
        return self


class EngineConfig(BaseModel):
    """
    Configuration of the replay loop.

    Args:
        warmup_bars (int): Number of leading bars skipped so that indicators
            have enough history.
    """
    warmup_bars: int = Field(50, ge=0, description="Bars skipped before trading starts.")


class DataConfig(BaseModel):
    """
    Configuration for data loading.

    Args:
        path (str): The file path to the dataset (e.g., './data/aapl.csv').
        format (str): The file format, 'csv' or 'parquet'.
        symbol (str): The symbol the data belongs to (e.g., 'AAPL').
    """
    path: str = Field(..., description="Path to the dataset file.")
    format: Literal["csv", "parquet"] = "csv"
    symbol: str = Field("SYMBOL", description="The symbol the data belongs to.")


class ReportConfig(BaseModel):
    """
    Configuration for report generation.

    Args:
        output_dir (str): Directory the report files are written to.
    """
    output_dir: str = "runs/latest"


class Config(BaseModel):
    """
    Top-level configuration object for a backtest run.

    Exactly one of `strategy` (inline definition) and `strategy_name` (one of
    the bundled sample strategies) must be given.

    Args:
        data (DataConfig): Data loading configuration.
        settings (BacktestSettings): Capital, costs and date window.
        strategy (Optional[Strategy]): An inline strategy definition.
        strategy_name (Optional[str]): Name of a bundled sample strategy.
        engine (EngineConfig): Replay loop configuration.
        report (ReportConfig): Report output configuration.
    """
    data: DataConfig
    settings: BacktestSettings
    strategy: Optional[Strategy] = None
    strategy_name: Optional[str] = None
    engine: EngineConfig = Field(default_factory=EngineConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @model_validator(mode="after")
    def _check_strategy(self) -> "Config":
        if (self.strategy is None) == (self.strategy_name is None):
            raise ValueError("Exactly one of 'strategy' and 'strategy_name' must be set.")
        return self

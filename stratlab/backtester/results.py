"""
Data structures for holding the state and results of a backtest.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """
    A currently open holding.

    Args:
        symbol (str): The traded symbol.
        quantity (int): Number of units held.
        entry_price (float): Fill price of the entry.
        entry_date (datetime): Timestamp of the entry bar.
        entry_commission (float): Commission paid on entry.
        stop_loss_price (Optional[float]): Price at which the position is stopped out.
        take_profit_price (Optional[float]): Price at which profit is taken.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str
    quantity: int = Field(..., gt=0)
    entry_price: float
    entry_date: datetime
    entry_commission: float = 0.0
    stop_loss_price: Optional[float] = None
    take_profit_price: Optional[float] = None

    @property
    def cost_basis(self) -> float:
        """Cash spent to open the position, commission included."""
        return self.quantity * self.entry_price + self.entry_commission


class Trade(BaseModel):
    """
    A closed round-trip.

    Args:
        id (str): Identifier built from symbol, entry and exit dates.
        symbol (str): The traded symbol.
        side (str): Trade direction; only long trades are simulated.
        entry_date (datetime): Timestamp of the entry bar.
        exit_date (datetime): Timestamp of the exit bar.
        entry_price (float): Fill price of the entry.
        exit_price (float): Fill price of the exit.
        quantity (int): Number of units traded.
        commission (float): Total commission paid on entry and exit.
        profit (float): Proceeds minus cost basis, commissions included.
        profit_pct (float): Profit relative to the cost basis, in percent.
        holding_period_days (int): Whole days between entry and exit.
        exit_reason (str): Why the position was closed.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    side: Literal["long"] = "long"
    entry_date: datetime
    exit_date: datetime
    entry_price: float
    exit_price: float
    quantity: int
    commission: float
    profit: float
    profit_pct: float
    holding_period_days: int
    exit_reason: str


class EquityPoint(BaseModel):
    """
    One bar's portfolio valuation.

    Args:
        date (datetime): Timestamp of the bar.
        equity (float): Cash plus open positions marked at the close.
        drawdown_pct (float): Decline from the high-water mark, in percent.
    """
    model_config = ConfigDict(frozen=True)

    date: datetime
    equity: float
    drawdown_pct: float = Field(..., ge=0)


class MonthlyReturn(BaseModel):
    """
    Return of the equity curve within one calendar month.

    Args:
        month (str): The month as 'YYYY-MM'.
        return_pct (float): Last over first equity of the month, in percent.
    """
    model_config = ConfigDict(frozen=True)

    month: str
    return_pct: float


class PerformanceReport(BaseModel):
    """
    Summary statistics of a backtest run. Every metric is finite; degenerate
    inputs yield 0.
    """
    model_config = ConfigDict(frozen=True)

    total_return_pct: float
    annualized_return_pct: float
    sharpe_ratio: float
    max_drawdown_pct: float
    win_rate: float
    profit_factor: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    average_win: float
    average_loss: float
    largest_win: float
    largest_loss: float


class BacktestResult(BaseModel):
    """
    Holds all the results from a single backtest run of a strategy.

    Args:
        strategy_name (str): Name of the strategy that was replayed.
        symbol (str): The traded symbol.
        trades (List[Trade]): All closed trades, in exit order.
        performance (PerformanceReport): Calculated performance metrics.
        equity_curve (List[EquityPoint]): One valuation per replayed bar.
        monthly_returns (List[MonthlyReturn]): Returns per calendar month.
    """
    model_config = ConfigDict(frozen=True)

    strategy_name: str
    symbol: str
    trades: List[Trade] = Field(..., description="A list of all trades executed.")
    performance: PerformanceReport
    equity_curve: List[EquityPoint] = Field(..., description="The portfolio's equity over time.")
    monthly_returns: List[MonthlyReturn]

    @property
    def final_equity(self) -> Optional[float]:
        """Equity of the last curve point, or None for an empty curve."""
        return self.equity_curve[-1].equity if self.equity_curve else None

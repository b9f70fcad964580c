"""
Summary statistics derived from a finished run's trade ledger and equity curve.
"""
from typing import List, Sequence

import pandas as pd

from stratlab import metrics
from stratlab.backtester.results import EquityPoint, MonthlyReturn, PerformanceReport, Trade
from stratlab.config import BacktestSettings


def _equity_series(equity_curve: Sequence[EquityPoint]) -> pd.Series:
    return pd.Series(
        [point.equity for point in equity_curve],
        index=pd.DatetimeIndex([point.date for point in equity_curve]),
        dtype=float,
    )


def summarize(
    trades: Sequence[Trade],
    equity_curve: Sequence[EquityPoint],
    settings: BacktestSettings,
) -> PerformanceReport:
    """
    Builds the performance report of a run.

    Args:
        trades (Sequence[Trade]): The closed trades.
        equity_curve (Sequence[EquityPoint]): One valuation per replayed bar.
        settings (BacktestSettings): The run settings; supplies the initial capital.

    Returns:
        PerformanceReport: The report. Breakeven trades count as neither wins
        nor losses.
    """
    equity = _equity_series(equity_curve)
    final_equity = float(equity.iloc[-1]) if not equity.empty else settings.initial_capital

    total_return = metrics.calculate_total_return(final_equity, settings.initial_capital)
    profits = pd.Series([trade.profit for trade in trades], dtype=float)
    wins = profits[profits > 0]
    losses = profits[profits < 0]

    return PerformanceReport(
        total_return_pct=total_return,
        annualized_return_pct=metrics.calculate_annualized_return(total_return, len(equity)),
        sharpe_ratio=metrics.calculate_sharpe_ratio(metrics.equity_returns(equity)),
        max_drawdown_pct=max((point.drawdown_pct for point in equity_curve), default=0.0),
        win_rate=metrics.calculate_win_rate(profits),
        profit_factor=metrics.calculate_profit_factor(profits),
        total_trades=len(profits),
        winning_trades=len(wins),
        losing_trades=len(losses),
        average_win=float(wins.mean()) if not wins.empty else 0.0,
        average_loss=float(losses.mean()) if not losses.empty else 0.0,
        largest_win=float(wins.max()) if not wins.empty else 0.0,
        largest_loss=float(losses.min()) if not losses.empty else 0.0,
    )


def monthly_returns(equity_curve: Sequence[EquityPoint]) -> List[MonthlyReturn]:
    """
    Buckets the equity curve by calendar month and computes the return from
    the first to the last point of each month, in percent.
    """
    equity = _equity_series(equity_curve)
    if equity.empty:
        return []

    buckets = equity.groupby(equity.index.strftime("%Y-%m"), sort=True)
    first = buckets.first()
    last = buckets.last()

    return [
        MonthlyReturn(
            month=month,
            return_pct=float((last[month] - first[month]) / first[month] * 100) if first[month] else 0.0,
        )
        for month in first.index
    ]

"""
Tests for the performance report and monthly return bucketing.
"""
from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest

from stratlab import metrics
from stratlab.backtester.results import EquityPoint, Trade
from stratlab.config import BacktestSettings
from stratlab.performance import monthly_returns, summarize

START = datetime(2023, 1, 30)


def curve(values):
    peak = values[0]
    points = []
    for i, equity in enumerate(values):
        peak = max(peak, equity)
        points.append(EquityPoint(date=START + timedelta(days=i), equity=equity, drawdown_pct=(peak - equity) / peak * 100))
    return points


def trade(profit: float, day: int = 0) -> Trade:
    entry = START + timedelta(days=day)
    return Trade(
        id=f"X_{day}", symbol="X", entry_date=entry, exit_date=entry + timedelta(days=1),
        entry_price=10, exit_price=10, quantity=1, commission=0,
        profit=profit, profit_pct=profit / 10, holding_period_days=1, exit_reason="test",
    )


@pytest.fixture
def settings() -> BacktestSettings:
    return BacktestSettings(
        initial_capital=1000.0,
        start_date=datetime(2023, 1, 1),
        end_date=datetime(2023, 12, 31),
    )


def test_report_without_trades_uses_equity_curve(settings):
    points = curve([1000.0, 1010.0, 1005.0, 1020.0])

    report = summarize([], points, settings)

    assert report.total_trades == 0
    assert report.win_rate == 0
    assert report.profit_factor == 0
    assert report.average_win == report.average_loss == 0
    assert report.total_return_pct == pytest.approx(2.0)
    assert report.annualized_return_pct == pytest.approx(2.0 * 365 / 4)
    assert report.max_drawdown_pct == pytest.approx(5 / 1010 * 100)

    returns = np.array([1010 / 1000, 1005 / 1010, 1020 / 1005]) - 1
    assert report.sharpe_ratio == pytest.approx(returns.mean() / returns.std() * np.sqrt(252))
    assert report.sharpe_ratio != 0


def test_trade_statistics(settings):
    trades = [trade(100.0, 0), trade(-50.0, 1), trade(0.0, 2), trade(300.0, 3), trade(-150.0, 4)]

    report = summarize(trades, curve([1000.0, 1200.0]), settings)

    assert report.total_trades == 5
    assert report.winning_trades == 2
    assert report.losing_trades == 2
    assert report.win_rate == pytest.approx(40.0)
    assert report.profit_factor == pytest.approx(400 / 200)
    assert report.average_win == pytest.approx(200.0)
    assert report.average_loss == pytest.approx(-100.0)
    assert report.largest_win == 300.0
    assert report.largest_loss == -150.0


def test_empty_curve_report(settings):
    report = summarize([], [], settings)

    assert report.total_return_pct == 0
    assert report.annualized_return_pct == 0
    assert report.sharpe_ratio == 0
    assert report.max_drawdown_pct == 0


def test_flat_curve_has_zero_sharpe(settings):
    assert summarize([], curve([1000.0] * 10), settings).sharpe_ratio == 0
    assert metrics.calculate_sharpe_ratio(metrics.equity_returns(pd.Series([1000.0] * 3))) == 0


def test_monthly_returns():
    # Jan 30 .. Feb 2
    points = curve([1000.0, 1100.0, 1000.0, 1050.0])

    months = monthly_returns(points)

    assert [m.month for m in months] == ["2023-01", "2023-02"]
    assert months[0].return_pct == pytest.approx(10.0)
    assert months[1].return_pct == pytest.approx(5.0)
    assert monthly_returns([]) == []

"""
Tests for the performance metric calculation functions.
"""
import numpy as np
import pandas as pd
import pytest

from stratlab import metrics


@pytest.fixture
def sample_returns() -> pd.Series:
    """
    Provides a sample Series of daily returns.
    """
    return pd.Series([0.01, -0.005, 0.02, 0.015, -0.01, 0.005, 0.01, 0.002])


@pytest.fixture
def sample_trade_profits() -> pd.Series:
    """
    Provides a sample Series of individual trade profits.
    """
    return pd.Series([500.0, -200.0, 1000.0, 0.0, -400.0, 700.0])


def test_equity_returns():
    returns = metrics.equity_returns(pd.Series([100.0, 110.0, 99.0]))
    assert returns.tolist() == pytest.approx([0.1, -0.1])


def test_calculate_sharpe_ratio(sample_returns):
    """
    Tests the Sharpe ratio calculation.
    """
    # Pre-calculated values
    mean_returns = sample_returns.mean()
    std_returns = sample_returns.std(ddof=0)
    expected_sharpe = (mean_returns / std_returns) * np.sqrt(252)

    sharpe = metrics.calculate_sharpe_ratio(sample_returns)
    assert isinstance(sharpe, float)
    assert pytest.approx(sharpe, 0.001) == expected_sharpe

    # Test with zero standard deviation
    zero_std_returns = pd.Series([0.01, 0.01, 0.01])
    assert metrics.calculate_sharpe_ratio(zero_std_returns) == 0.0
    assert metrics.calculate_sharpe_ratio(pd.Series([], dtype=np.float64)) == 0.0


def test_sharpe_ratio_with_risk_free_rate(sample_returns):
    expected = (sample_returns.mean() - 0.05 / 252) / sample_returns.std(ddof=0) * np.sqrt(252)
    assert metrics.calculate_sharpe_ratio(sample_returns, risk_free_rate=0.05) == pytest.approx(expected)


def test_calculate_total_return():
    assert metrics.calculate_total_return(110000, 100000) == pytest.approx(10.0)
    assert metrics.calculate_total_return(90000, 100000) == pytest.approx(-10.0)


def test_calculate_annualized_return():
    """
    Tests the linear annualization of a total return.
    """
    assert metrics.calculate_annualized_return(10.0, 73) == pytest.approx(50.0)
    assert metrics.calculate_annualized_return(10.0, 365) == pytest.approx(10.0)
    assert metrics.calculate_annualized_return(10.0, 0) == 0.0


def test_calculate_win_rate(sample_trade_profits):
    assert metrics.calculate_win_rate(sample_trade_profits) == pytest.approx(50.0)
    assert metrics.calculate_win_rate(pd.Series([], dtype=np.float64)) == 0.0


def test_calculate_profit_factor(sample_trade_profits):
    assert metrics.calculate_profit_factor(sample_trade_profits) == pytest.approx(2200 / 600)

    # Test with only wins
    assert metrics.calculate_profit_factor(pd.Series([100.0, 50.0])) == 0.0
    assert metrics.calculate_profit_factor(pd.Series([], dtype=np.float64)) == 0.0

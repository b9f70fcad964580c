"""
Functions for calculating performance metrics of trading strategies.

Every function returns a plain float and maps degenerate inputs (no data,
zero deviation, no losses) to 0.0 instead of NaN or infinity.
"""
import numpy as np
import pandas as pd


def equity_returns(equity_curve: pd.Series) -> pd.Series:
    """
    Period-over-period returns of an equity curve, `(e[i] - e[i-1]) / e[i-1]`.

    Args:
        equity_curve (pd.Series): The portfolio's equity over time.

    Returns:
        pd.Series: One return per consecutive pair of points.
    """
    return equity_curve.astype(float).pct_change().iloc[1:]


def calculate_sharpe_ratio(
    returns: pd.Series,
    risk_free_rate: float = 0.0,
    periods_per_year: int = 252,
) -> float:
    """
    Calculates the annualized Sharpe ratio from a series of periodic returns.

    The population standard deviation is used.

    Args:
        returns (pd.Series): A Series of periodic returns (e.g., daily).
        risk_free_rate (float): The annualized risk-free rate.
        periods_per_year (int): The number of trading periods in a year.

    Returns:
        float: The calculated annualized Sharpe ratio. Returns 0.0 if there
        are no returns or their standard deviation is zero.
    """
    returns = returns.dropna()
    if returns.empty:
        return 0.0

    std_dev = returns.std(ddof=0)
    if not np.isfinite(std_dev) or np.isclose(std_dev, 0.0, rtol=0.0, atol=1e-12):
        return 0.0

    excess_returns = returns - (risk_free_rate / periods_per_year)
    sharpe_ratio = excess_returns.mean() / std_dev
    annualized_sharpe = sharpe_ratio * np.sqrt(periods_per_year)
    return float(annualized_sharpe)


def calculate_total_return(final_equity: float, initial_capital: float) -> float:
    """Return over the initial capital, in percent."""
    if initial_capital == 0:
        return 0.0
    return float((final_equity - initial_capital) / initial_capital * 100)


def calculate_annualized_return(total_return_pct: float, num_periods: int, days_per_year: int = 365) -> float:
    """
    Linearly annualizes a total return: `total * days_per_year / num_periods`.

    This ignores compounding and treats every period as one calendar day.

    Returns:
        float: The annualized return in percent, 0.0 for no periods.
    """
    if num_periods <= 0:
        return 0.0
    return float(total_return_pct * (days_per_year / num_periods))


def calculate_win_rate(profits: pd.Series) -> float:
    """Share of strictly profitable trades, in percent."""
    if profits.empty:
        return 0.0
    return float((profits > 0).sum() / len(profits) * 100)


def calculate_profit_factor(profits: pd.Series) -> float:
    """
    Gross profit over absolute gross loss.

    Returns:
        float: The profit factor, 0.0 when there are no losing trades.
    """
    gross_profit = profits[profits > 0].sum()
    gross_loss = abs(profits[profits < 0].sum())
    if gross_loss == 0:
        return 0.0
    return float(gross_profit / gross_loss)

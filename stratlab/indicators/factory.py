"""
A factory for creating financial indicators.

This module provides simple, consistent wrappers for calculating
common financial technical indicators.
"""
from typing import Optional

import numpy as np
import pandas as pd


def sma(
    close: pd.Series,
    length: int = 20,
    **kwargs,
) -> Optional[pd.Series]:
    """
    Calculates the Simple Moving Average (SMA).

    Args:
        close (pd.Series): A Series of closing prices.
        length (int): The time period.

    Returns:
        Optional[pd.Series]: A Series containing the SMA, or None if the input
        is not long enough.
    """
    if len(close) < length:
        return None
    return close.rolling(window=length).mean()


def ema(
    close: pd.Series,
    length: int = 12,
    **kwargs,
) -> Optional[pd.Series]:
    """
    Calculates the Exponential Moving Average (EMA), seeded with the SMA of
    the first `length` values.

    Args:
        close (pd.Series): A Series of closing prices.
        length (int): The time period.

    Returns:
        Optional[pd.Series]: A Series containing the EMA, or None if the input
        is not long enough.
    """
    if len(close) < length:
        return None
    seeded = close.astype(float).copy()
    seeded.iloc[: length - 1] = np.nan
    seeded.iloc[length - 1] = close.iloc[:length].mean()
    return seeded.ewm(span=length, adjust=False, ignore_na=True).mean()


def _get_Wilder_SMMA(series: pd.Series, length: int) -> pd.Series:
    """
    Calculates the Wilder's Smoothing Moving Average (SMMA).

    Args:
        series (pd.Series): The input series.
        length (int): The period for the SMMA.

    Returns:
        pd.Series: A Series containing the SMMA.
    """
    return series.ewm(alpha=1/length, adjust=False).mean()


def rsi(
    close: pd.Series,
    length: int = 14,
    **kwargs,
) -> Optional[pd.Series]:
    """
    Calculates the Relative Strength Index (RSI).

    Args:
        close (pd.Series): A Series of closing prices.
        length (int): The time period.

    Returns:
        Optional[pd.Series]: A Series containing the RSI, or None if the input
        is not long enough. The first `length` values are NaN.
    """
    if len(close) <= length:
        return None

    delta = close.astype(float).diff()
    gain = delta.where(delta > 0, 0.0)
    loss = -delta.where(delta < 0, 0.0)

    avg_gain = _get_Wilder_SMMA(gain, length)
    avg_loss = _get_Wilder_SMMA(loss, length)

    # A window without losses saturates at 100
    rs = avg_gain / avg_loss.replace(0, np.nan)
    result = (100 - (100 / (1 + rs))).where(avg_loss != 0, 100.0)
    result.iloc[:length] = np.nan

    return result


def macd(
    close: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
    **kwargs,
) -> Optional[pd.DataFrame]:
    """
    Calculates the Moving Average Convergence Divergence (MACD).

    Args:
        close (pd.Series): A Series of closing prices.
        fast (int): The fast EMA period.
        slow (int): The slow EMA period.
        signal (int): The signal line EMA period.

    Returns:
        Optional[pd.DataFrame]: A DataFrame with `macd`, `signal` and
        `histogram` columns, or None if the input is not long enough.
    """
    if len(close) < slow:
        return None

    line = ema(close, fast) - ema(close, slow)
    valid = line.dropna()
    signal_line = ema(valid, signal)
    if signal_line is None:
        signal_line = pd.Series(np.nan, index=line.index)
    else:
        signal_line = signal_line.reindex(line.index)

    return pd.DataFrame({
        "macd": line,
        "signal": signal_line,
        "histogram": line - signal_line,
    })


def bollinger_bands(
    close: pd.Series,
    length: int = 20,
    num_std: float = 2.0,
    **kwargs,
) -> Optional[pd.DataFrame]:
    """
    Calculates Bollinger Bands around a simple moving average.

    Args:
        close (pd.Series): A Series of closing prices.
        length (int): The time period.
        num_std (float): The band width in population standard deviations.

    Returns:
        Optional[pd.DataFrame]: A DataFrame with `upper`, `middle` and `lower`
        columns, or None if the input is not long enough.
    """
    middle = sma(close, length)
    if middle is None:
        return None
    std = close.rolling(window=length).std(ddof=0)
    return pd.DataFrame({
        "upper": middle + num_std * std,
        "middle": middle,
        "lower": middle - num_std * std,
    })


def stochastic(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    k_length: int = 14,
    d_length: int = 3,
    **kwargs,
) -> Optional[pd.DataFrame]:
    """
    Calculates the Stochastic Oscillator.

    Args:
        high (pd.Series): A Series of high prices.
        low (pd.Series): A Series of low prices.
        close (pd.Series): A Series of closing prices.
        k_length (int): The %K look-back period.
        d_length (int): The %D smoothing period.

    Returns:
        Optional[pd.DataFrame]: A DataFrame with `k` and `d` columns, or None
        if the input is not long enough.
    """
    if len(close) < k_length:
        return None

    highest = high.rolling(window=k_length).max()
    lowest = low.rolling(window=k_length).min()
    span = (highest - lowest).replace(0, np.nan)
    k = (close - lowest) / span * 100
    d = k.rolling(window=d_length).mean()

    return pd.DataFrame({"k": k, "d": d})

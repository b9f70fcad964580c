"""
Tests for the indicator factory functions.
"""
import numpy as np
import pandas as pd
import pytest

from stratlab.indicators import factory


@pytest.fixture
def sample_close_prices() -> pd.Series:
    """
    Provides a sample Series of close prices for testing.
    """
    return pd.Series(
        np.array([
            100.0, 101.0, 102.5, 101.75, 103.0, 104.25, 103.5, 105.0,
            106.5, 105.75, 107.0, 108.5, 107.75, 109.0, 110.0, 111.5,
            112.5, 111.75, 113.25, 114.0, 115.5, 116.0, 115.25, 117.0,
            118.5, 117.75, 119.0, 120.5, 119.75, 121.0, 122.5, 121.75,
            123.0, 124.5, 123.75, 125.0, 126.5, 125.75, 127.0, 128.5
        ]),
        dtype=np.float64
    )


def test_sma_calculation(sample_close_prices):
    """
    Tests the SMA calculation with a known output.
    """
    sma_series = factory.sma(close=sample_close_prices, length=5)
    assert isinstance(sma_series, pd.Series)
    assert sma_series.notna().sum() == (len(sample_close_prices) - 5 + 1)
    # Compare with a pre-calculated value
    assert pytest.approx(sma_series.iloc[-1], 0.001) == 126.55

    assert factory.sma(sample_close_prices.iloc[:4], length=5) is None


def test_ema_is_seeded_with_sma():
    ema = factory.ema(pd.Series([1.0, 2.0, 3.0, 4.0, 5.0]), length=3)

    assert ema.iloc[:2].isna().all()
    assert ema.iloc[2] == pytest.approx(2.0)
    assert ema.iloc[3] == pytest.approx(3.0)
    assert ema.iloc[4] == pytest.approx(4.0)


def test_rsi_calculation():
    """
    Tests the RSI calculation with a known output for a simple dataset.
    """
    # Data: [10, 11, 12, 13, 12, 11, 10, 9, 10, 11, 12]
    # Length: 3
    prices = pd.Series([10, 11, 12, 13, 12, 11, 10, 9, 10, 11, 12])
    rsi_series = factory.rsi(close=prices, length=3)
    assert isinstance(rsi_series, pd.Series)
    # The first `length` values are NaN
    assert rsi_series.iloc[:3].isna().all()
    assert pytest.approx(rsi_series.iloc[-1], abs=0.01) == 75.8035
    assert rsi_series.dropna().between(0, 100).all()


def test_rsi_edge_cases():
    assert factory.rsi(pd.Series([1.0, 2.0, 3.0]), length=3) is None

    rising = factory.rsi(pd.Series(np.arange(1.0, 21.0)), length=14)
    assert rising.iloc[-1] == 100.0


def test_macd_columns_and_warmup(sample_close_prices):
    macd = factory.macd(sample_close_prices)

    assert list(macd.columns) == ["macd", "signal", "histogram"]
    assert macd["macd"].iloc[:25].isna().all()
    assert macd["macd"].iloc[25:].notna().all()
    assert macd["signal"].iloc[:33].isna().all()
    assert macd["signal"].iloc[33:].notna().all()
    valid = macd.dropna()
    np.testing.assert_allclose(valid["histogram"], valid["macd"] - valid["signal"])
    # a steady uptrend keeps the fast average above the slow one
    assert (valid["macd"] > 0).all()

    assert factory.macd(sample_close_prices.iloc[:25]) is None


def test_bollinger_bands():
    bands = factory.bollinger_bands(pd.Series([1.0, 2.0, 3.0, 4.0, 5.0]), length=5, num_std=2.0)

    last = bands.iloc[-1]
    assert last["middle"] == pytest.approx(3.0)
    assert last["upper"] == pytest.approx(3.0 + 2 * np.sqrt(2.0))
    assert last["lower"] == pytest.approx(3.0 - 2 * np.sqrt(2.0))

    flat = factory.bollinger_bands(pd.Series([7.0] * 20))
    assert flat.iloc[-1]["upper"] == pytest.approx(7.0)
    assert flat.iloc[-1]["lower"] == pytest.approx(7.0)


def test_stochastic():
    close = pd.Series(np.arange(1.0, 21.0))
    stoch = factory.stochastic(close + 1, close - 1, close, k_length=14, d_length=3)

    assert list(stoch.columns) == ["k", "d"]
    assert stoch["k"].iloc[:13].isna().all()
    assert stoch["k"].iloc[13] == pytest.approx(14 / 15 * 100)
    assert stoch["d"].iloc[15] == pytest.approx(stoch["k"].iloc[13:16].mean())

    flat = pd.Series([5.0] * 14)
    assert np.isnan(factory.stochastic(flat, flat, flat)["k"].iloc[-1])

"""
Tests for the data provider implementations.
"""
import os

import pandas as pd
import pytest

from stratlab.data.provider import CSVProvider, ParquetProvider, get_provider
from stratlab.data.series import PriceSeries

# Define paths to test data
BASE_DIR = os.path.dirname(__file__)
VALID_CSV = os.path.join(BASE_DIR, 'data', 'sample_data.csv')
BAD_COLS_CSV = os.path.join(BASE_DIR, 'data', 'bad_columns.csv')
BAD_INDEX_CSV = os.path.join(BASE_DIR, 'data', 'bad_index_no_date.csv')
NON_EXISTENT_FILE = 'non_existent.csv'


@pytest.fixture
def valid_parquet(tmp_path) -> str:
    """
    Writes the sample CSV data to a Parquet file.
    """
    path = tmp_path / "sample_data.parquet"
    pd.read_csv(VALID_CSV, index_col=0, parse_dates=True).to_parquet(path)
    return str(path)


def test_csv_loading():
    provider = CSVProvider(path=VALID_CSV, symbol="DEMO")
    df = provider.load_frame()

    assert isinstance(df.index, pd.DatetimeIndex)
    assert 'close' in df.columns  # Check that columns were lowercased

    series = provider.load()
    assert isinstance(series, PriceSeries)
    assert series.symbol == "DEMO"
    assert len(series) == len(df) == 240
    assert series.bars[0].close == 100.0
    assert series.bars[-1].date == pd.Timestamp("2023-08-28").to_pydatetime()


def test_parquet_loading(valid_parquet):
    series = ParquetProvider(path=valid_parquet).load()

    assert series.symbol == "SYMBOL"
    assert series == CSVProvider(path=VALID_CSV).load()


def test_missing_columns_raises_error(tmp_path):
    """
    Tests that a ValueError is raised if the data is missing required columns.
    """
    with pytest.raises(ValueError, match="missing required columns"):
        CSVProvider(path=BAD_COLS_CSV).load()

    bad_path = tmp_path / "bad_columns.parquet"
    pd.read_csv(VALID_CSV, index_col=0, parse_dates=True).drop(columns=["High"]).to_parquet(bad_path)
    with pytest.raises(ValueError, match="missing required columns"):
        ParquetProvider(path=str(bad_path)).load()


def test_csv_invalid_index_raises_error():
    """
    Tests that a ValueError is raised if the data does not have a DatetimeIndex.
    """
    provider = CSVProvider(path=BAD_INDEX_CSV)
    with pytest.raises(ValueError, match="must have a DatetimeIndex"):
        provider.load()


def test_empty_file_raises_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("Date,Open,High,Low,Close,Volume\n")

    with pytest.raises(ValueError):
        CSVProvider(path=str(path)).load()


@pytest.mark.parametrize("provider_class", [CSVProvider, ParquetProvider])
def test_non_existent_file_raises_error(provider_class):
    """
    Tests that a FileNotFoundError is raised for a non-existent file path.
    """
    provider = provider_class(path=NON_EXISTENT_FILE)
    with pytest.raises(FileNotFoundError):
        provider.load()


def test_get_provider():
    assert isinstance(get_provider("csv", VALID_CSV), CSVProvider)
    assert isinstance(get_provider("parquet", "x.parquet"), ParquetProvider)
    with pytest.raises(ValueError, match="Unsupported data format"):
        get_provider("json", "x.json")

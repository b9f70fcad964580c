"""
Data provider interfaces and implementations.

This module defines the abstract interface for price data providers and
concrete implementations that load OHLCV history from CSV and Parquet files
into a validated PriceSeries.
"""
from abc import ABC, abstractmethod
from typing import List

import pandas as pd

from stratlab.data.series import PriceSeries


class DataProvider(ABC):
    """
    Abstract base class for all data providers.

    It defines a common interface for loading data and enforces basic validation
    checks to ensure the data is in the expected format.
    """
    REQUIRED_COLUMNS: List[str] = ["open", "high", "low", "close", "volume"]

    def __init__(self, path: str, symbol: str = "SYMBOL"):
        """
        Initializes the data provider.

        Args:
            path (str): The path to the data source file.
            symbol (str): The symbol the loaded bars belong to.
        """
        self._path = path
        self._symbol = symbol

    @abstractmethod
    def load_frame(self) -> pd.DataFrame:
        """
        Loads the raw data from the source and validates it.

        Returns:
            pd.DataFrame: A validated DataFrame containing the time-series data.
        """
        raise NotImplementedError

    def load(self) -> PriceSeries:
        """
        Loads the data and converts it into a PriceSeries.

        Returns:
            PriceSeries: The bars in chronological order.

        Raises:
            ValueError: If the frame is empty or a bar is inconsistent.
        """
        df = self.load_frame()
        if df.empty:
            raise ValueError(f"No price data found in '{self._path}'.")
        return PriceSeries.from_dataframe(df, symbol=self._symbol)

    def _validate(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Performs validation on the loaded DataFrame.

        - Converts all column names to lowercase.
        - Checks for the presence of required columns (OHLCV).
        - Ensures the DataFrame has a DatetimeIndex.

        Args:
            df (pd.DataFrame): The DataFrame to validate.

        Returns:
            pd.DataFrame: The validated DataFrame.

        Raises:
            ValueError: If validation fails (e.g., missing columns or wrong
                index type).
        """
        df.columns = [col.lower() for col in df.columns]

        if not all(col in df.columns for col in self.REQUIRED_COLUMNS):
            missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
            raise ValueError(f"DataFrame is missing required columns: {missing}")

        if not isinstance(df.index, pd.DatetimeIndex):
            raise ValueError("DataFrame must have a DatetimeIndex.")

        return df


class ParquetProvider(DataProvider):
    """
    A data provider for loading time-series data from a Parquet file.
    """

    def load_frame(self) -> pd.DataFrame:
        """
        Loads data from the specified Parquet file.

        Raises:
            FileNotFoundError: If the file at `self._path` does not exist.
        """
        df = pd.read_parquet(self._path)
        return self._validate(df)


class CSVProvider(DataProvider):
    """
    A data provider for loading time-series data from a CSV file.

    It assumes that the first column of the CSV is the timestamp index.
    """

    def load_frame(self) -> pd.DataFrame:
        """
        Loads data from the specified CSV file.

        Raises:
            FileNotFoundError: If the file at `self._path` does not exist.
        """
        df = pd.read_csv(self._path, index_col=0, parse_dates=True, date_format="%Y-%m-%d")
        return self._validate(df)


PROVIDERS = {
    "csv": CSVProvider,
    "parquet": ParquetProvider,
}


def get_provider(fmt: str, path: str, symbol: str = "SYMBOL") -> DataProvider:
    """
    Instantiates the provider registered for a file format.

    Args:
        fmt (str): The data format, one of the keys of `PROVIDERS`.
        path (str): The path to the data file.
        symbol (str): The symbol the loaded bars belong to.

    Returns:
        DataProvider: The provider instance.
    """
    if fmt not in PROVIDERS:
        raise ValueError(f"Unsupported data format '{fmt}'. Available: {list(PROVIDERS.keys())}")
    return PROVIDERS[fmt](path=path, symbol=symbol)

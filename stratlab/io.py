"""
Input/Output operations for the StratLab engine.

This module provides utility functions for loading framework objects,
such as run configurations and the strategy and data they point to.
"""

import yaml

from stratlab.config import Config
from stratlab.data.provider import get_provider
from stratlab.data.series import PriceSeries
from stratlab.seed_strategies import get_sample_strategy
from stratlab.strategy import Strategy


def load_config(path: str) -> Config:
    """
    Loads a YAML configuration file and parses it into a strongly-typed
    Config object.

    Args:
        path (str): The path to the YAML configuration file.

    Returns:
        Config: A Pydantic Config object with the validated configuration.
    """
    with open(path, 'r') as f:
        raw_config = yaml.safe_load(f)
    return Config(**raw_config)


def resolve_strategy(config: Config) -> Strategy:
    """
    Returns the inline strategy of a configuration, or the bundled sample
    strategy it names.
    """
    if config.strategy is not None:
        return config.strategy
    return get_sample_strategy(config.strategy_name)


def load_price_series(config: Config) -> PriceSeries:
    """
    Loads the price series described by the `data` section of a configuration.
    """
    provider = get_provider(config.data.format, config.data.path, symbol=config.data.symbol)
    return provider.load()

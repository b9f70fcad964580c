"""
Tests for the configuration loading and validation logic.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest
import yaml
from pydantic import ValidationError

from stratlab.config import BacktestSettings, Config, DataConfig, EngineConfig
from stratlab.io import load_config, load_price_series, resolve_strategy

# Path to the test YAML file
TEST_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'config.yaml')
ROOT_DIR = os.path.dirname(os.path.dirname(__file__))


@pytest.fixture
def raw_config() -> dict:
    with open(TEST_CONFIG_PATH, 'r') as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw: dict) -> str:
    path = tmp_path / "config.yaml"
    with open(path, 'w') as f:
        yaml.dump(raw, f)
    return str(path)


def test_load_valid_config():
    """
    Tests that a valid YAML configuration file is loaded correctly into a
    Pydantic Config object.
    """
    config = load_config(TEST_CONFIG_PATH)

    assert isinstance(config, Config)
    assert isinstance(config.data, DataConfig)
    assert isinstance(config.settings, BacktestSettings)
    assert isinstance(config.engine, EngineConfig)

    assert config.data.path == "./tests/data/sample_data.csv"
    assert config.data.symbol == "DEMO"
    assert config.settings.initial_capital == 100000
    assert config.settings.commission_pct == 0.1
    assert config.settings.start_date == datetime(2023, 1, 1)
    assert config.strategy.name == "RSI Mean Reversion"
    assert config.strategy_name is None
    assert config.report.output_dir == "runs/latest"


def test_load_missing_file():
    """
    Tests that trying to load a non-existent file raises a FileNotFoundError.
    """
    with pytest.raises(FileNotFoundError):
        load_config("non_existent_file.yaml")


def test_invalid_config_missing_field(tmp_path, raw_config):
    """
    Tests that a configuration with a missing required field raises a
    ValidationError.
    """
    del raw_config['settings']

    with pytest.raises(ValidationError):
        load_config(write_config(tmp_path, raw_config))


def test_invalid_config_wrong_type(tmp_path, raw_config):
    """
    Tests that a config with an incorrect data type for a field raises a
    ValidationError.
    """
    raw_config['settings']['initial_capital'] = "one hundred thousand"

    with pytest.raises(ValidationError):
        load_config(write_config(tmp_path, raw_config))


def test_strategy_and_strategy_name_are_exclusive(tmp_path, raw_config):
    raw_config['strategy_name'] = "MACD Crossover"
    with pytest.raises(ValidationError, match="Exactly one"):
        load_config(write_config(tmp_path, raw_config))

    del raw_config['strategy']
    del raw_config['strategy_name']
    with pytest.raises(ValidationError, match="Exactly one"):
        load_config(write_config(tmp_path, raw_config))


def test_settings_validation():
    """
    Tests that the validation constraints on BacktestSettings are enforced.
    """
    with pytest.raises(ValidationError, match="must be before"):
        BacktestSettings(initial_capital=1000, start_date=datetime(2023, 6, 1), end_date=datetime(2023, 6, 1))

    with pytest.raises(ValidationError):
        BacktestSettings(initial_capital=0, start_date=datetime(2023, 1, 1), end_date=datetime(2023, 6, 1))

    with pytest.raises(ValidationError):
        BacktestSettings(
            initial_capital=1000, commission_fixed=-1,
            start_date=datetime(2023, 1, 1), end_date=datetime(2023, 6, 1),
        )

    with pytest.raises(ValidationError):
        EngineConfig(warmup_bars=-1)


def test_settings_store_aware_dates_as_naive_utc():
    settings = BacktestSettings(
        initial_capital=1000,
        start_date=datetime(2023, 1, 1, tzinfo=timezone.utc),
        end_date=datetime(2023, 6, 1, 2, tzinfo=timezone(timedelta(hours=2))),
    )

    assert settings.start_date == datetime(2023, 1, 1)
    assert settings.end_date == datetime(2023, 6, 1)
    assert settings.end_date.tzinfo is None

def test_resolve_named_strategy(tmp_path, raw_config):
    del raw_config['strategy']
    raw_config['strategy_name'] = "Stochastic Reversal"

    config = load_config(write_config(tmp_path, raw_config))

    assert resolve_strategy(config).name == "Stochastic Reversal"


def test_load_price_series_from_config(monkeypatch):
    monkeypatch.chdir(ROOT_DIR)
    series = load_price_series(load_config(TEST_CONFIG_PATH))

    assert series.symbol == "DEMO"
    assert len(series) == 240

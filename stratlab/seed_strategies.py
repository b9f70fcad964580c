"""
Sample strategies bundled with StratLab.
These are ready-to-run rule sets that can be referenced by name from a
configuration file.
"""
from typing import Dict, List

from stratlab.strategy import RiskManagement, Strategy, StrategyRule

RSI_MEAN_REVERSION = Strategy(
    name="RSI Mean Reversion",
    description="Buy when RSI is oversold, sell when overbought",
    entry_rules=[StrategyRule(indicator="rsi", condition="less_than", value=30)],
    exit_rules=[StrategyRule(indicator="rsi", condition="greater_than", value=70)],
    risk_management=RiskManagement(
        stop_loss_pct=5,
        take_profit_pct=10,
        position_size_pct=10,
        max_positions=3,
    ),
)

MACD_CROSSOVER = Strategy(
    name="MACD Crossover",
    description="Buy when the MACD line crosses above zero, sell when it crosses back below",
    entry_rules=[StrategyRule(indicator="macd", condition="crosses_above", value=0)],
    exit_rules=[StrategyRule(indicator="macd", condition="crosses_below", value=0)],
    risk_management=RiskManagement(
        stop_loss_pct=3,
        position_size_pct=15,
        max_positions=2,
    ),
)

HISTOGRAM_MOMENTUM = Strategy(
    name="MACD Histogram Momentum",
    description="Buy on a positive MACD histogram with RSI in a neutral band",
    entry_rules=[
        StrategyRule(indicator="macd_histogram", condition="greater_than", value=0),
        StrategyRule(indicator="rsi", condition="between", value=40, value2=65),
    ],
    exit_rules=[StrategyRule(indicator="macd_histogram", condition="less_than", value=0)],
    risk_management=RiskManagement(
        stop_loss_pct=4,
        take_profit_pct=8,
        position_size_pct=20,
        max_positions=1,
    ),
)

STOCHASTIC_REVERSAL = Strategy(
    name="Stochastic Reversal",
    description="Buy when %K leaves the oversold zone, sell when it leaves the overbought zone",
    entry_rules=[StrategyRule(indicator="stoch_k", condition="crosses_above", value=20)],
    exit_rules=[StrategyRule(indicator="stoch_k", condition="crosses_below", value=80)],
    risk_management=RiskManagement(
        stop_loss_pct=5,
        position_size_pct=25,
        max_positions=1,
    ),
)

SAMPLE_STRATEGIES: List[Strategy] = [
    RSI_MEAN_REVERSION,
    MACD_CROSSOVER,
    HISTOGRAM_MOMENTUM,
    STOCHASTIC_REVERSAL,
]

_BY_NAME: Dict[str, Strategy] = {strategy.name: strategy for strategy in SAMPLE_STRATEGIES}


def get_sample_strategy(name: str) -> Strategy:
    """
    Retrieves a bundled sample strategy by name.

    Args:
        name (str): The strategy name, e.g. 'RSI Mean Reversion'.

    Returns:
        Strategy: A copy of the requested strategy.
    """
    if name not in _BY_NAME:
        raise ValueError(f"Strategy '{name}' is not bundled. Available: {list(_BY_NAME.keys())}")
    return _BY_NAME[name].model_copy(deep=True)

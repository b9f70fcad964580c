"""
Core data structures for representing a declarative trading strategy.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

Condition = Literal["greater_than", "less_than", "between", "crosses_above", "crosses_below"]


class StrategyRule(BaseModel):
    """
    One testable condition on an indicator.

    Args:
        indicator (str): The indicator name (e.g. 'rsi', 'sma20') or 'price'
            for the current close.
        condition (Condition): How the indicator is compared to `value`.
        value (float): The threshold, or the lower bound for 'between'.
        value2 (Optional[float]): The upper bound; only allowed for 'between'.
        lookback (Optional[int]): For crossings, how many samples back the
            previous value is taken from. Defaults to one.
    """
    indicator: str = Field(..., min_length=1, description="Indicator name or 'price'.")
    condition: Condition
    value: float
    value2: Optional[float] = None
    lookback: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "StrategyRule":
        if self.value2 is not None and self.condition != "between":
            raise ValueError(f"value2 is only used by 'between', not '{self.condition}'")
        if self.value2 is not None and self.value > self.value2:
            raise ValueError(f"value ({self.value}) must not exceed value2 ({self.value2})")
        return self


class RiskManagement(BaseModel):
    """
    Risk parameters applied to every position opened by a strategy.

    Args:
        stop_loss_pct (Optional[float]): Stop distance below entry, in percent.
        take_profit_pct (Optional[float]): Target distance above entry, in percent.
        position_size_pct (float): Share of equity committed per entry, in percent.
        max_positions (int): Maximum number of simultaneously open positions.
    """
    stop_loss_pct: Optional[float] = Field(None, gt=0, lt=100)
    take_profit_pct: Optional[float] = Field(None, gt=0)
    position_size_pct: float = Field(..., gt=0, le=100)
    max_positions: int = Field(1, ge=1)


class Strategy(BaseModel):
    """
    A tradeable rule set.

    Args:
        name (str): The strategy name.
        description (str): A free-form description.
        entry_rules (List[StrategyRule]): Rules that must all hold to open a position.
        exit_rules (List[StrategyRule]): Rules that must all hold to close it.
        risk_management (RiskManagement): Sizing and risk exits.
        symbol (Optional[str]): The traded symbol; the price series symbol is
            used when omitted.
    """
    name: str
    description: str = ""
    entry_rules: List[StrategyRule] = Field(default_factory=list)
    exit_rules: List[StrategyRule] = Field(default_factory=list)
    risk_management: RiskManagement
    symbol: Optional[str] = None

    @classmethod
    def from_json(cls, json_str: str) -> "Strategy":
        """
        Creates a Strategy instance from a JSON string.

        Args:
            json_str (str): A JSON string representing a Strategy.

        Returns:
            Strategy: A Strategy instance.
        """
        return cls.model_validate_json(json_str)

"""
Position sizing, commission and risk-exit price calculations.

All functions are pure: they only depend on their arguments.
"""
import math
from typing import Literal, Optional

Side = Literal["long", "short"]


def position_size(equity: float, position_size_pct: float, available_cash: float) -> float:
    """
    Currency amount to commit to a new position.

    Args:
        equity (float): Current total equity.
        position_size_pct (float): Share of equity to commit, in percent.
        available_cash (float): Cash that can be spent.

    Returns:
        float: `min(equity * pct / 100, available_cash)`, never negative.
    """
    return max(0.0, min(equity * position_size_pct / 100, available_cash))


def commission(trade_value: float, fixed: float, pct: float) -> float:
    """Commission for one order: a fixed fee plus a percentage of its value."""
    return fixed + trade_value * pct / 100


def stop_loss_price(entry_price: float, pct: Optional[float], side: Side = "long") -> Optional[float]:
    """
    Price at which a position is stopped out, or None when no stop is set.
    """
    if pct is None:
        return None
    if side == "short":
        return entry_price * (1 + pct / 100)
    return entry_price * (1 - pct / 100)


def take_profit_price(entry_price: float, pct: Optional[float], side: Side = "long") -> Optional[float]:
    """
    Price at which profit is taken, or None when no target is set.
    """
    if pct is None:
        return None
    if side == "short":
        return entry_price * (1 - pct / 100)
    return entry_price * (1 + pct / 100)


def affordable_quantity(amount: float, price: float, cash: float, fixed: float, pct: float) -> int:
    """
    Whole units that can be bought for `amount` at `price`, reduced until
    the purchase and its commission fit into `cash`.

    Returns:
        int: The quantity, 0 when not even one unit is affordable.
    """
    if price <= 0:
        return 0
    quantity = math.floor(amount / price)
    if quantity <= 0:
        return 0
    if quantity * price + commission(quantity * price, fixed, pct) > cash:
        quantity = min(quantity, math.floor((cash - fixed) / (price * (1 + pct / 100))))
        # rounding can leave the estimate one unit too high
        while quantity > 0 and quantity * price + commission(quantity * price, fixed, pct) > cash:
            quantity -= 1
    return max(quantity, 0)

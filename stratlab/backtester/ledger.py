"""
Cash and open-position bookkeeping for a single backtest run.

Each symbol moves through flat -> open -> flat. A ledger belongs to exactly
one run and is never shared.
"""
import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Tuple

from stratlab.backtester import risk
from stratlab.backtester.results import Position, Trade
from stratlab.data.series import PriceBar
from stratlab.strategy import RiskManagement

logger = logging.getLogger(__name__)

STOP_LOSS = "Stop loss"
TAKE_PROFIT = "Take profit"
END_OF_BACKTEST = "end of backtest"


def holding_period_days(entry_date: datetime, exit_date: datetime) -> int:
    """Whole days between two timestamps."""
    return (exit_date - entry_date).days


class PositionLedger:
    """
    Tracks cash, open positions and the closed-trade ledger.

    Args:
        initial_cash (float): Starting cash.
        commission_fixed (float): Fixed commission per order.
        commission_pct (float): Percent commission per order.
    """

    def __init__(self, initial_cash: float, commission_fixed: float = 0.0, commission_pct: float = 0.0):
        self.cash = initial_cash
        self.commission_fixed = commission_fixed
        self.commission_pct = commission_pct
        self.positions: Dict[str, Position] = {}
        self.trades: List[Trade] = []

    def is_open(self, symbol: str) -> bool:
        return symbol in self.positions

    def can_open(self, symbol: str, max_positions: int) -> bool:
        """True when `symbol` is flat and the global position limit allows another one."""
        return symbol not in self.positions and len(self.positions) < max_positions

    def _commission(self, value: float) -> float:
        return risk.commission(value, self.commission_fixed, self.commission_pct)

    def open_position(
        self,
        symbol: str,
        bar: PriceBar,
        equity: float,
        risk_management: RiskManagement,
    ) -> Optional[Position]:
        """
        Buys at the bar's close, sized from `equity`.

        Returns:
            Optional[Position]: The new position, or None when the symbol is
            already open, the position limit is reached, or the sizing rounds
            down to zero units.
        """
        if not self.can_open(symbol, risk_management.max_positions):
            return None

        amount = risk.position_size(equity, risk_management.position_size_pct, self.cash)
        quantity = risk.affordable_quantity(
            amount, bar.close, self.cash, self.commission_fixed, self.commission_pct
        )
        if quantity <= 0:
            logger.debug("Skipping %s entry on %s: sizing of %.2f buys no units", symbol, bar.date, amount)
            return None

        entry_commission = self._commission(quantity * bar.close)
        position = Position(
            symbol=symbol,
            quantity=quantity,
            entry_price=bar.close,
            entry_date=bar.date,
            entry_commission=entry_commission,
            stop_loss_price=risk.stop_loss_price(bar.close, risk_management.stop_loss_pct),
            take_profit_price=risk.take_profit_price(bar.close, risk_management.take_profit_pct),
        )
        self.cash -= position.cost_basis
        self.positions[symbol] = position
        logger.debug("Opened %s: %d @ %.4f on %s", symbol, quantity, bar.close, bar.date)
        return position

    @staticmethod
    def risk_exit(position: Position, bar: PriceBar) -> Optional[Tuple[float, str]]:
        """
        Checks the bar's range against the position's stop and target. The
        stop is checked first.

        Returns:
            Optional[Tuple[float, str]]: Fill price and reason, or None.
        """
        if position.stop_loss_price is not None and bar.low <= position.stop_loss_price:
            return position.stop_loss_price, STOP_LOSS
        if position.take_profit_price is not None and bar.high >= position.take_profit_price:
            return position.take_profit_price, TAKE_PROFIT
        return None

    def close_position(self, symbol: str, bar: PriceBar, price: float, reason: str) -> Optional[Trade]:
        """
        Sells the whole position at `price` and records the trade.

        Returns:
            Optional[Trade]: The closed trade, or None if `symbol` is flat.
        """
        position = self.positions.pop(symbol, None)
        if position is None:
            return None

        exit_commission = self._commission(position.quantity * price)
        proceeds = position.quantity * price - exit_commission
        cost_basis = position.cost_basis
        profit = proceeds - cost_basis

        trade = Trade(
            id=f"{symbol}_{position.entry_date.isoformat()}_{bar.date.isoformat()}",
            symbol=symbol,
            entry_date=position.entry_date,
            exit_date=bar.date,
            entry_price=position.entry_price,
            exit_price=price,
            quantity=position.quantity,
            commission=position.entry_commission + exit_commission,
            profit=profit,
            profit_pct=profit / cost_basis * 100 if cost_basis else 0.0,
            holding_period_days=holding_period_days(position.entry_date, bar.date),
            exit_reason=reason,
        )
        self.cash += proceeds
        self.trades.append(trade)
        logger.debug("Closed %s: %d @ %.4f on %s (%s), profit %.2f", symbol, position.quantity, price, bar.date, reason, profit)
        return trade

    def close_all(self, bar: PriceBar, reason: str = END_OF_BACKTEST) -> List[Trade]:
        """Closes every open position at the bar's close."""
        return [
            self.close_position(symbol, bar, bar.close, reason)
            for symbol in sorted(self.positions)
        ]

    def equity(self, prices: Mapping[str, float]) -> float:
        """
        Cash plus open positions marked at `prices`. Positions without a price
        are marked at their entry price.
        """
        market_value = sum(
            position.quantity * prices.get(symbol, position.entry_price)
            for symbol, position in self.positions.items()
        )
        return self.cash + market_value

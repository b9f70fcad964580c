"""
A bar-by-bar, event-driven backtesting engine.

Every bar is processed in order: indicators are computed over the history up
to and including the bar, open positions are checked for exits (stop loss,
take profit, then exit rules), entries are checked only while flat, and the
portfolio is marked to market at the close.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from stratlab.backtester.base import BaseBacktester
from stratlab.backtester.ledger import PositionLedger
from stratlab.backtester.results import BacktestResult, EquityPoint
from stratlab.backtester.rules import RuleEvaluator
from stratlab.config import BacktestSettings, EngineConfig
from stratlab.data.series import PriceBar, PriceSeries, to_naive_utc
from stratlab.indicators.provider import IndicatorProvider, IndicatorSnapshot, PrefixSnapshots
from stratlab.performance import monthly_returns, summarize
from stratlab.strategy import Strategy

logger = logging.getLogger(__name__)


@dataclass
class _RunContext:
    """Mutable state of one run; created fresh for every call to `run`."""
    ledger: PositionLedger
    evaluator: RuleEvaluator
    snapshots: PrefixSnapshots
    equity: float
    high_water_mark: float
    equity_curve: List[EquityPoint] = field(default_factory=list)


class EventDrivenBacktester(BaseBacktester):
    """
    An event-driven backtesting engine for rule-based, path-dependent strategies.
    """

    def run(
        self,
        price_series: Union[PriceSeries, Sequence[PriceBar]],
        strategy: Strategy,
        settings: BacktestSettings,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> BacktestResult:
        """
        Replays the price series for the given strategy.

        Args:
            price_series: The historical bars to replay.
            strategy (Strategy): The strategy to be backtested.
            settings (BacktestSettings): Capital, costs and date window.
            should_stop (Optional[Callable[[], bool]]): Polled before each bar;
                when it returns True the run settles at the last processed bar.

        Returns:
            BacktestResult: An object containing the results of the backtest.

        Raises:
            ValueError: If the series is empty or no bar falls inside the
                settings' date window.
        """
        series = price_series if isinstance(price_series, PriceSeries) else PriceSeries(bars=list(price_series))
        bars = series.bars
        symbol = strategy.symbol or series.symbol

        # Aware and naive timestamps are compared as naive UTC
        start, end = to_naive_utc(settings.start_date), to_naive_utc(settings.end_date)
        dates = [to_naive_utc(bar.date) for bar in bars]

        if not any(start <= date <= end for date in dates):
            raise ValueError(
                f"No bars between {start.isoformat()} and {end.isoformat()}; "
                f"series covers {dates[0].isoformat()} to {dates[-1].isoformat()}."
            )

        ctx = _RunContext(
            ledger=PositionLedger(settings.initial_capital, settings.commission_fixed, settings.commission_pct),
            evaluator=RuleEvaluator(),
            snapshots=self._provider.prefix_snapshots(bars),
            equity=settings.initial_capital,
            high_water_mark=settings.initial_capital,
        )

        logger.info(
            "Backtesting '%s' on %s: %d bars, %d warm-up",
            strategy.name, symbol, len(bars), self._config.warmup_bars,
        )

        last_bar: Optional[PriceBar] = None
        for index in range(self._config.warmup_bars, len(bars)):
            bar = bars[index]
            if dates[index] < start:
                continue
            if dates[index] > end:
                break
            if should_stop is not None and should_stop():
                logger.info("Backtest '%s' stopped before %s", strategy.name, bar.date)
                break
            self._process_bar(ctx, bars, index, strategy, symbol)
            last_bar = bar

        if last_bar is not None and ctx.ledger.positions:
            ctx.ledger.close_all(last_bar)
            self._settle_last_point(ctx)

        trades = list(ctx.ledger.trades)
        result = BacktestResult(
            strategy_name=strategy.name,
            symbol=symbol,
            trades=trades,
            performance=summarize(trades, ctx.equity_curve, settings),
            equity_curve=ctx.equity_curve,
            monthly_returns=monthly_returns(ctx.equity_curve),
        )
        logger.info(
            "Backtest '%s' finished: %d trades, total return %.2f%%",
            strategy.name, len(trades), result.performance.total_return_pct,
        )
        return result

    def _process_bar(
        self,
        ctx: _RunContext,
        bars: List[PriceBar],
        index: int,
        strategy: Strategy,
        symbol: str,
    ):
        bar = bars[index]
        history = bars[: index + 1]
        snapshot = self._indicators(ctx, index + 1, bar)

        exited = self._check_exit(ctx, snapshot, bar, history, strategy, symbol)
        # No re-entry on the bar that closed the position
        if not exited and snapshot is not None:
            self._check_entry(ctx, snapshot, bar, history, strategy, symbol)

        self._mark(ctx, bar, symbol)

    @staticmethod
    def _indicators(ctx: _RunContext, end: int, bar: PriceBar) -> Optional[IndicatorSnapshot]:
        try:
            return ctx.snapshots.at(end)
        except Exception:
            logger.warning("Indicator computation failed at %s; no decision this bar", bar.date, exc_info=True)
            return None

    @staticmethod
    def _check_exit(
        ctx: _RunContext,
        snapshot: Optional[IndicatorSnapshot],
        bar: PriceBar,
        history: List[PriceBar],
        strategy: Strategy,
        symbol: str,
    ) -> bool:
        position = ctx.ledger.positions.get(symbol)
        if position is None:
            return False

        risk_exit = ctx.ledger.risk_exit(position, bar)
        if risk_exit is not None:
            price, reason = risk_exit
            ctx.ledger.close_position(symbol, bar, price, reason)
            return True

        if snapshot is None:
            return False

        signal = ctx.evaluator.evaluate_rule_set(strategy.exit_rules, snapshot, bar, history)
        if signal.should_trigger:
            ctx.ledger.close_position(symbol, bar, bar.close, signal.reason)
            return True
        return False

    @staticmethod
    def _check_entry(
        ctx: _RunContext,
        snapshot: IndicatorSnapshot,
        bar: PriceBar,
        history: List[PriceBar],
        strategy: Strategy,
        symbol: str,
    ):
        if not ctx.ledger.can_open(symbol, strategy.risk_management.max_positions):
            return

        signal = ctx.evaluator.evaluate_rule_set(strategy.entry_rules, snapshot, bar, history)
        if signal.should_trigger:
            ctx.ledger.open_position(symbol, bar, ctx.equity, strategy.risk_management)

    @staticmethod
    def _drawdown_pct(high_water_mark: float, equity: float) -> float:
        if high_water_mark <= 0:
            return 0.0
        return max(0.0, (high_water_mark - equity) / high_water_mark) * 100

    def _mark(self, ctx: _RunContext, bar: PriceBar, symbol: str):
        ctx.equity = ctx.ledger.equity({symbol: bar.close})
        ctx.high_water_mark = max(ctx.high_water_mark, ctx.equity)
        ctx.equity_curve.append(EquityPoint(
            date=bar.date,
            equity=ctx.equity,
            drawdown_pct=self._drawdown_pct(ctx.high_water_mark, ctx.equity),
        ))

    def _settle_last_point(self, ctx: _RunContext):
        """Re-marks the final point after the end-of-run closure so it equals settled cash."""
        last = ctx.equity_curve[-1]
        ctx.equity = ctx.ledger.cash
        ctx.high_water_mark = max(ctx.high_water_mark, ctx.equity)
        ctx.equity_curve[-1] = EquityPoint(
            date=last.date,
            equity=ctx.equity,
            drawdown_pct=self._drawdown_pct(ctx.high_water_mark, ctx.equity),
        )


def run_backtest(
    price_series: Union[PriceSeries, Sequence[PriceBar]],
    strategy: Strategy,
    settings: BacktestSettings,
    indicator_provider: Optional[IndicatorProvider] = None,
    warmup_bars: int = 50,
) -> BacktestResult:
    """
    Convenience wrapper running a single backtest with a fresh engine.
    """
    engine = EventDrivenBacktester(indicator_provider, EngineConfig(warmup_bars=warmup_bars))
    return engine.run(price_series, strategy, settings)

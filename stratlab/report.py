"""
Static report generation for a finished backtest.
"""
import logging
import os

import matplotlib.pyplot as plt
import pandas as pd

from stratlab.backtester.results import BacktestResult

logger = logging.getLogger(__name__)


def generate_report(result: BacktestResult, output_dir: str):
    """
    Writes a collection of static report files (tables, a plot and a JSON
    summary) to the specified output directory.
    """
    os.makedirs(output_dir, exist_ok=True)

    with open(os.path.join(output_dir, "summary.json"), 'w') as f:
        f.write(result.model_dump_json(include={"strategy_name", "symbol", "performance"}, indent=2))

    _save_table(result.trades, os.path.join(output_dir, "trades.csv"))
    _save_table(result.equity_curve, os.path.join(output_dir, "equity_curve.csv"))
    _save_table(result.monthly_returns, os.path.join(output_dir, "monthly_returns.csv"))
    _plot_equity_curve(result, output_dir)

    logger.info("Report for '%s' written to '%s'", result.strategy_name, output_dir)


def _save_table(records, path: str):
    frame = pd.DataFrame([record.model_dump() for record in records])
    frame.to_csv(path, index=False)


def _plot_equity_curve(result: BacktestResult, output_dir: str):
    """Plots equity and drawdown over time."""
    if not result.equity_curve:
        return

    dates = [point.date for point in result.equity_curve]
    fig, (ax_equity, ax_drawdown) = plt.subplots(
        2, 1, figsize=(10, 7), sharex=True, gridspec_kw={"height_ratios": [3, 1]}
    )
    ax_equity.plot(dates, [point.equity for point in result.equity_curve], linestyle='-')
    for trade in result.trades:
        ax_equity.axvspan(trade.entry_date, trade.exit_date, color='green' if trade.profit > 0 else 'red', alpha=0.1)
    ax_equity.set_ylabel("Equity")
    ax_equity.set_title(f"{result.strategy_name} ({result.symbol})")
    ax_equity.grid(True)

    ax_drawdown.fill_between(dates, [-point.drawdown_pct for point in result.equity_curve], 0, color='red', alpha=0.4)
    ax_drawdown.set_ylabel("Drawdown (%)")
    ax_drawdown.grid(True)

    fig.tight_layout()
    plt.savefig(os.path.join(output_dir, "equity_curve.png"))
    plt.close(fig)

"""
Main entry point for running a StratLab backtest.
"""
import argparse
import logging
import os
import sys

# Ensure the project root is in the python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

import stratlab
from stratlab.io import load_price_series, resolve_strategy

logger = logging.getLogger("stratlab")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Backtest a rule-based trading strategy.")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML run configuration.")
    parser.add_argument("--output", default=None, help="Report directory; overrides report.output_dir.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Main execution function.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        # 1. Load configuration, strategy and data
        config = stratlab.load_config(args.config)
        strategy = resolve_strategy(config)
        series = load_price_series(config)
        logger.info("Loaded %d bars of %s from '%s'", len(series), series.symbol, config.data.path)

        # 2. Run the backtest
        engine = stratlab.EventDrivenBacktester(config=config.engine)
        result = engine.run(series, strategy, config.settings)
    except (ValueError, FileNotFoundError) as e:
        logger.error("Backtest rejected: %s", e)
        return 1

    # 3. Generate the report
    report_dir = args.output or config.report.output_dir
    stratlab.generate_report(result, report_dir)

    perf = result.performance
    print(f"--- {result.strategy_name} on {result.symbol} ---")
    print(f"Trades:        {perf.total_trades} ({perf.winning_trades} won, {perf.losing_trades} lost)")
    print(f"Total return:  {perf.total_return_pct:.2f}%")
    print(f"Sharpe ratio:  {perf.sharpe_ratio:.2f}")
    print(f"Max drawdown:  {perf.max_drawdown_pct:.2f}%")
    print(f"Report generated in '{report_dir}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

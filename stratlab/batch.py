"""
Batch execution for running many independent backtests.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from stratlab.backtester.engine import EventDrivenBacktester
from stratlab.backtester.results import BacktestResult
from stratlab.config import BacktestSettings, EngineConfig
from stratlab.data.series import PriceSeries
from stratlab.indicators.provider import IndicatorProvider
from stratlab.report import generate_report
from stratlab.strategy import Strategy

logger = logging.getLogger(__name__)


@dataclass
class BatchJob:
    """One backtest to run as part of a batch."""
    name: str
    price_series: PriceSeries
    strategy: Strategy
    settings: BacktestSettings


@dataclass
class BatchRunResult:
    """Result from a single job of a batch."""
    name: str
    result: Optional[BacktestResult]
    error: Optional[str] = None


def _run_job(
    job: BatchJob,
    indicator_provider: Optional[IndicatorProvider],
    engine_config: Optional[EngineConfig],
) -> BatchRunResult:
    try:
        engine = EventDrivenBacktester(indicator_provider, engine_config)
        result = engine.run(job.price_series, job.strategy, job.settings)
        return BatchRunResult(name=job.name, result=result)
    except Exception as e:
        logger.exception("Batch job '%s' failed", job.name)
        return BatchRunResult(name=job.name, result=None, error=str(e))


class BatchResults:
    """
    Aggregates results from multiple backtest runs.
    """

    def __init__(self, run_results: List[BatchRunResult]):
        self.run_results = run_results
        self.successful_runs = [r for r in run_results if r.result is not None]
        self.failed_runs = [r for r in run_results if r.error is not None]

    def summary_frame(self) -> pd.DataFrame:
        """One row of performance metrics per successful run, in submission order."""
        rows: List[Dict[str, Any]] = []
        for run in self.successful_runs:
            row = {"name": run.name, "strategy": run.result.strategy_name, "symbol": run.result.symbol}
            row.update(run.result.performance.model_dump())
            rows.append(row)
        return pd.DataFrame(rows)

    def aggregate_metrics(self) -> Dict[str, Any]:
        """Computes mean and standard deviation of the headline metrics across runs."""
        frame = self.summary_frame()
        result: Dict[str, Any] = {
            "num_runs": len(self.run_results),
            "successful_runs": len(self.successful_runs),
            "failed_runs": len(self.failed_runs),
        }
        if frame.empty:
            return result

        for column in ["total_return_pct", "sharpe_ratio", "max_drawdown_pct", "win_rate"]:
            result[f"{column}_mean"] = float(frame[column].mean())
            result[f"{column}_std"] = float(frame[column].std(ddof=0))
        return result

    def generate_batch_report(self, output_dir: str):
        """Writes a summary table and one report directory per successful run."""
        os.makedirs(output_dir, exist_ok=True)

        self.summary_frame().to_csv(os.path.join(output_dir, "batch_summary.csv"), index=False)

        if self.failed_runs:
            with open(os.path.join(output_dir, "failed_runs.txt"), 'w') as f:
                for run in self.failed_runs:
                    f.write(f"{run.name}: {run.error}\n")

        runs_dir = os.path.join(output_dir, "runs")
        for run in self.successful_runs:
            generate_report(run.result, os.path.join(runs_dir, run.name))

        logger.info("Batch report generated in '%s'", output_dir)


class BatchRunner:
    """
    Runs independent backtests, sequentially or in parallel with Ray. Each
    run owns its own ledger and equity curve.
    """

    def __init__(
        self,
        jobs: List[BatchJob],
        indicator_provider: Optional[IndicatorProvider] = None,
        engine_config: Optional[EngineConfig] = None,
        parallel: bool = False,
    ):
        self.jobs = jobs
        self.indicator_provider = indicator_provider
        self.engine_config = engine_config
        self.parallel = parallel

    def run_all(self) -> BatchResults:
        """Runs every job and returns the results in submission order."""
        logger.info("Batch run: %d jobs (parallel=%s)", len(self.jobs), self.parallel)
        if self.parallel:
            return self._run_parallel()
        return self._run_sequential()

    def _run_sequential(self) -> BatchResults:
        run_results = []
        for current, job in enumerate(self.jobs, start=1):
            logger.info("[%d/%d] %s", current, len(self.jobs), job.name)
            run_results.append(_run_job(job, self.indicator_provider, self.engine_config))
        return BatchResults(run_results)

    def _run_parallel(self) -> BatchResults:
        """Runs all jobs as Ray tasks."""
        import ray

        if not ray.is_initialized():
            ray.init(ignore_reinit_error=True)

        run_job_remote = ray.remote(_run_job)

        futures = [
            run_job_remote.remote(job, self.indicator_provider, self.engine_config)
            for job in self.jobs
        ]
        logger.info("Submitted %d parallel tasks", len(futures))
        return BatchResults(ray.get(futures))

"""
Evaluation of strategy rules against the current bar and indicator snapshot.

A rule never raises: unknown indicators, missing bounds and missing data all
evaluate to "not satisfied" with a reason describing why.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from stratlab.data.series import PriceBar
from stratlab.indicators.provider import INDICATOR_NAMES, IndicatorSnapshot, value_at
from stratlab.strategy import StrategyRule

logger = logging.getLogger(__name__)

PRICE = "price"

UNKNOWN_INDICATOR = "unknown indicator"
INDICATOR_UNAVAILABLE = "indicator unavailable"
MISSING_VALUE2 = "missing value2"
INSUFFICIENT_HISTORY = "insufficient history"


@dataclass(frozen=True)
class RuleEvaluation:
    """Outcome of a single rule."""
    satisfied: bool
    reason: str


@dataclass(frozen=True)
class RuleSetEvaluation:
    """Outcome of an AND-combined rule set."""
    should_trigger: bool
    reason: str


class RuleEvaluator:
    """
    Evaluates strategy rules.

    Malformed rules are logged once per evaluator instance, so one evaluator
    should be created per backtest run.
    """

    def __init__(self):
        self._reported: Set[str] = set()

    def evaluate_rule(
        self,
        rule: StrategyRule,
        snapshot: IndicatorSnapshot,
        current_bar: PriceBar,
        history: Optional[Sequence[PriceBar]] = None,
    ) -> RuleEvaluation:
        """
        Evaluates one rule.

        Args:
            rule (StrategyRule): The rule to evaluate.
            snapshot (IndicatorSnapshot): Indicators computed up to the current bar.
            current_bar (PriceBar): The bar being processed.
            history (Optional[Sequence[PriceBar]]): Bars up to and including the
                current one. Only needed for crossings on 'price'.

        Returns:
            RuleEvaluation: Whether the rule holds, and why.
        """
        if rule.indicator != PRICE and rule.indicator not in INDICATOR_NAMES:
            self._report(rule, UNKNOWN_INDICATOR)
            return RuleEvaluation(False, UNKNOWN_INDICATOR)

        value = self._lookup(rule.indicator, snapshot, current_bar, history, 0)
        if value is None:
            return RuleEvaluation(False, INDICATOR_UNAVAILABLE)

        label = f"{rule.indicator} ({value:.2f})"

        if rule.condition == "greater_than":
            return RuleEvaluation(value > rule.value, f"{label} > {rule.value:g}")

        if rule.condition == "less_than":
            return RuleEvaluation(value < rule.value, f"{label} < {rule.value:g}")

        if rule.condition == "between":
            if rule.value2 is None:
                self._report(rule, MISSING_VALUE2)
                return RuleEvaluation(False, MISSING_VALUE2)
            return RuleEvaluation(
                rule.value <= value <= rule.value2,
                f"{label} between {rule.value:g} and {rule.value2:g}",
            )

        previous = self._lookup(rule.indicator, snapshot, current_bar, history, rule.lookback or 1)
        if previous is None:
            return RuleEvaluation(False, INSUFFICIENT_HISTORY)

        if rule.condition == "crosses_above":
            return RuleEvaluation(
                previous <= rule.value < value,
                f"{label} crossed above {rule.value:g} (from {previous:.2f})",
            )

        return RuleEvaluation(
            previous >= rule.value > value,
            f"{label} crossed below {rule.value:g} (from {previous:.2f})",
        )

    def evaluate_rule_set(
        self,
        rules: Sequence[StrategyRule],
        snapshot: IndicatorSnapshot,
        current_bar: PriceBar,
        history: Optional[Sequence[PriceBar]] = None,
    ) -> RuleSetEvaluation:
        """
        Evaluates a rule set; it triggers only when every rule holds. An empty
        rule set never triggers.
        """
        if not rules:
            return RuleSetEvaluation(False, "no rules")

        reasons: List[str] = []
        for rule in rules:
            result = self.evaluate_rule(rule, snapshot, current_bar, history)
            if not result.satisfied:
                return RuleSetEvaluation(False, result.reason)
            reasons.append(result.reason)

        return RuleSetEvaluation(True, ", ".join(reasons))

    @staticmethod
    def _lookup(
        indicator: str,
        snapshot: IndicatorSnapshot,
        current_bar: PriceBar,
        history: Optional[Sequence[PriceBar]],
        offset: int,
    ) -> Optional[float]:
        if indicator != PRICE:
            return value_at(snapshot.series(indicator), offset)
        if offset == 0:
            return current_bar.close
        if history is None:
            return None
        return value_at([bar.close for bar in history], offset)

    def _report(self, rule: StrategyRule, problem: str):
        key = f"{problem}:{rule.model_dump_json()}"
        if key in self._reported:
            return
        self._reported.add(key)
        logger.warning("Rule %s %s %s treated as unsatisfied: %s", rule.indicator, rule.condition, rule.value, problem)

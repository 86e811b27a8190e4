"""
What-if prediction: run every strategy against the same snapshot and rank them.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence, Tuple

from .algorithms.strategies import Strategy
from .core.constants import STRATEGY_TIE_BREAK_ORDER
from .core.snapshot import ProjectSnapshot


@dataclass(frozen=True)
class StrategyPrediction:
    key: str
    name: str
    projected_revenue: Decimal
    projects_scheduled: int
    rank: int


@dataclass(frozen=True)
class Prediction:
    predictions: Tuple[StrategyPrediction, ...]
    best_strategy_key: str


def _tie_break_position(key: str) -> int:
    if key in STRATEGY_TIE_BREAK_ORDER:
        return STRATEGY_TIE_BREAK_ORDER.index(key)
    return len(STRATEGY_TIE_BREAK_ORDER)


def predict(projects: Sequence[ProjectSnapshot], batch_limit: int, strategies: Iterable[Strategy]) -> Prediction:
    """
    Rank strategies by projected revenue, descending.
    Equal revenue is resolved by STRATEGY_TIE_BREAK_ORDER (greedy, edf, priority, fcfs).
    """
    snapshot = tuple(projects)
    outcomes = [(strategy, strategy.compute(snapshot, batch_limit)) for strategy in strategies]
    if not outcomes:
        raise ValueError("predict() needs at least one strategy")

    outcomes.sort(key=lambda item: (-item[1].total_revenue, _tie_break_position(item[0].key), item[0].key))

    predictions = tuple(
        StrategyPrediction(
            key=strategy.key,
            name=strategy.name,
            projected_revenue=result.total_revenue,
            projects_scheduled=result.projects_scheduled,
            rank=index,
        )
        for index, (strategy, result) in enumerate(outcomes, start=1)
    )
    return Prediction(predictions=predictions, best_strategy_key=predictions[0].key)

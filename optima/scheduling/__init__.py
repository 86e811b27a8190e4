"""
Optima scheduling engine

Pure allocation strategies, the strategy registry, and the multi-strategy predictor.
Nothing in this package touches the database.
"""

from .core.constants import GREEDY, PRIORITY, EDF, FCFS, STRATEGY_TIE_BREAK_ORDER, MAX_DEADLINE
from .core.snapshot import ProjectSnapshot, ScheduleResult
from .algorithms.strategies import Strategy, STRATEGIES
from .constraints.deadlines import is_past_deadline, due_date
from .predictor import predict, Prediction, StrategyPrediction
from .registry import StrategyRegistry

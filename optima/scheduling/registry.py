"""
Strategy registry: maps strategy keys to implementations and holds the
current selection for one engine instance.
"""

import threading
from typing import Dict, List, Optional

from optima.exceptions import ValidationError
from .algorithms.strategies import Strategy, STRATEGIES
from .core.constants import GREEDY, STRATEGY_TIE_BREAK_ORDER


def normalize_key(key: Optional[str]) -> str:
    return (key or "").strip().lower()


class StrategyRegistry:
    def __init__(self, strategies: Optional[Dict[str, Strategy]] = None, default_key: str = GREEDY):
        self._strategies = dict(strategies if strategies is not None else STRATEGIES)
        self._lock = threading.Lock()
        self._current_key = self.get(default_key).key

    def get(self, key: str) -> Strategy:
        strategy = self._strategies.get(normalize_key(key))
        if strategy is None:
            known = ", ".join(self.keys())
            raise ValidationError(f"Unknown strategy '{key}'. Expected one of: {known}")
        return strategy

    def keys(self) -> List[str]:
        return [strategy.key for strategy in self.all()]

    def all(self) -> List[Strategy]:
        """Every registered strategy, in tie-break order."""
        def rank(strategy: Strategy):
            if strategy.key in STRATEGY_TIE_BREAK_ORDER:
                return (STRATEGY_TIE_BREAK_ORDER.index(strategy.key), strategy.key)
            return (len(STRATEGY_TIE_BREAK_ORDER), strategy.key)

        return sorted(self._strategies.values(), key=rank)

    @property
    def current_key(self) -> str:
        with self._lock:
            return self._current_key

    def current(self) -> Strategy:
        return self._strategies[self.current_key]

    def select(self, key: str) -> Strategy:
        strategy = self.get(key)
        with self._lock:
            self._current_key = strategy.key
        return strategy

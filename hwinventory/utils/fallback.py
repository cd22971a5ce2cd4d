# hwinventory/utils/fallback.py
"""
Ordered fallback chains: a list of named strategies tried in sequence,
the first one producing a usable value wins.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .text_parsing import UNKNOWN

logger = logging.getLogger('collector.fallback')

Strategy = Tuple[str, Callable[[], Any]]


@dataclass
class FallbackResult:
    value: Any = UNKNOWN
    source: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.source is not None


class FallbackChain:
    """
    Priority-ordered strategies for one field. A strategy yields its value,
    or None / UNKNOWN to pass to the next one. A strategy that raises is
    logged and skipped.
    """

    def __init__(self, name: str, strategies: List[Strategy] = None):
        self.name = name
        self.strategies: List[Strategy] = list(strategies or [])

    def resolve(self, default: Any = UNKNOWN) -> FallbackResult:
        for strategy_name, strategy in self.strategies:
            try:
                value = strategy()
            except Exception as e:
                logger.warning(f"[{self.name}] strategy '{strategy_name}' failed: {e}")
                continue
            if value is None or value == UNKNOWN:
                logger.debug(f"[{self.name}] strategy '{strategy_name}' gave no value")
                continue
            logger.debug(f"[{self.name}] resolved by '{strategy_name}'")
            return FallbackResult(value, strategy_name)
        return FallbackResult(default, None)


def any_signal(name: str, signals: List[Strategy]) -> Tuple[bool, List[str]]:
    """
    Logical OR over independently fallible boolean signals. Every signal is
    evaluated; a signal that raises counts as False.

    Returns:
        (result, names of the signals that fired)
    """
    fired = []
    for signal_name, signal in signals:
        try:
            if signal():
                fired.append(signal_name)
        except Exception as e:
            logger.warning(f"[{name}] signal '{signal_name}' failed: {e}")
    return bool(fired), fired

"""Explicit registry of strategy variants, keyed by a short name."""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from strategy_lab.strategies.base import BaseStrategy

_REGISTRY: Dict[str, Type["BaseStrategy"]] = {}


def register_strategy(key: str) -> Callable[[type], type]:
    """Class decorator: make a strategy constructible via create_strategy(key, ...)."""
    def decorator(cls: type) -> type:
        if key in _REGISTRY and _REGISTRY[key] is not cls:
            raise ValueError(f"Strategy key already registered: {key}")
        cls.key = key
        _REGISTRY[key] = cls
        return cls
    return decorator


def get_strategy_class(key: str) -> Type["BaseStrategy"]:
    try:
        return _REGISTRY[key]
    except KeyError:
        raise ValueError(f"Unknown strategy: {key} (available: {', '.join(available_strategies())})") from None


def create_strategy(key: str, **parameters: Any) -> "BaseStrategy":
    """Instantiate a registered strategy. Raises ParameterValidationError on bad parameters."""
    return get_strategy_class(key)(**parameters)


def available_strategies() -> List[str]:
    return sorted(_REGISTRY)

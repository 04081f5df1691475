"""Engine implementations + registry."""

from __future__ import annotations

from typing import Dict, Tuple

from .common import Engine, EngineResult, thin_draws
from .jags_engine import JagsEngine
from .pymc_engine import PyMCEngine

_ENGINES: Dict[str, Engine] = {
    "pymc": PyMCEngine(),
    "jags": JagsEngine(),
}


def get_engine(name: str) -> Engine:
    """Return an engine implementation by name."""
    try:
        return _ENGINES[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown engine {name!r}. Available: {tuple(_ENGINES.keys())}"
        ) from e


def register_engine(name: str, engine: Engine, *, replace: bool = False) -> None:
    """Make an engine available to Model.sample(engine=name)."""
    if not callable(getattr(engine, "sample", None)):
        raise TypeError("engine must provide a sample(...) method.")
    if name in _ENGINES and not replace:
        raise ValueError(f"Engine {name!r} is already registered; pass replace=True.")
    _ENGINES[name] = engine


def available_engines() -> Tuple[str, ...]:
    return tuple(_ENGINES.keys())


__all__ = [
    "Engine",
    "EngineResult",
    "get_engine",
    "register_engine",
    "available_engines",
    "thin_draws",
]

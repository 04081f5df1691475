from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import numpy as np

from ..config import SamplerConfig


@dataclass(frozen=True)
class EngineResult:
    """Normalized result returned by any engine."""

    # name -> (n_chains, n_keep, *shape), burn-in dropped and thinned
    draws: Dict[str, np.ndarray]
    stats: Dict[str, Any] = field(default_factory=dict)


class Engine(Protocol):
    """Engine protocol: run every chain of one model and return retained draws."""

    name: str

    def sample(
        self,
        *,
        descriptor: Any,
        data: Mapping[str, Any],
        inits: Optional[Sequence[Mapping[str, Any]]],
        parameters: Sequence[str],
        config: SamplerConfig,
        options: Mapping[str, Any],
        rng: np.random.Generator,
    ) -> EngineResult: ...


def thin_draws(draws: np.ndarray, n_thin: int) -> np.ndarray:
    """Keep every n_thin-th post-burn-in step along axis 1.

    Steps n_thin, 2*n_thin, ... (1-based) are kept, so a chain of D steps
    retains exactly D // n_thin draws.
    """
    a = np.asarray(draws)
    if a.ndim < 2:
        raise ValueError("draws must have shape (n_chains, n_steps, ...).")
    n_thin = int(n_thin)
    if n_thin < 1:
        raise ValueError("n_thin must be >= 1.")
    if n_thin == 1:
        return a
    return a[:, n_thin - 1 :: n_thin]


def chain_seeds(rng: np.random.Generator, n_chains: int) -> List[int]:
    """Independent integer seeds, one per chain."""
    return [int(s) for s in rng.integers(0, 2**31 - 1, size=int(n_chains))]

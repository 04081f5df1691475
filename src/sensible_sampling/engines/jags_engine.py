from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from ..config import SamplerConfig
from .common import EngineResult, chain_seeds, thin_draws

logger = logging.getLogger(__name__)

_RNG_NAMES = (
    "base::Wichmann-Hill",
    "base::Marsaglia-Multicarry",
    "base::Super-Duper",
    "base::Mersenne-Twister",
)


class JagsEngine:
    """Run a JAGS model string through pyjags (optional dependency).

    The adaptation phase and the first n_burnin steps are discarded, then
    n_iter - n_burnin steps are monitored and thinned.
    """

    name = "jags"

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
    ) -> EngineResult:
        if not isinstance(descriptor, str):
            raise TypeError(
                "jags engine expects a JAGS model string; "
                "use engine='pymc' for callable descriptors."
            )

        import pyjags  # local import (optional dependency)

        engine_options = dict(options or {})
        adapt = int(engine_options.pop("adapt", 1000))
        progress_bar = bool(engine_options.pop("progress_bar", False))
        model_kwargs: Dict[str, Any] = dict(engine_options.pop("model_kwargs", {}) or {})
        for k, v in list(engine_options.items()):
            model_kwargs.setdefault(k, v)

        init = _chain_inits(inits, config.n_chains, rng)

        logger.info(
            "jags: %d chains x %d steps (%d burn-in, thin %d), keeping %s",
            config.n_chains,
            config.n_iter,
            config.n_burnin,
            config.n_thin,
            list(parameters),
        )
        model = pyjags.Model(
            code=descriptor,
            data=dict(data),
            init=init,
            chains=config.n_chains,
            adapt=adapt,
            progress_bar=progress_bar,
            **model_kwargs,
        )
        if config.n_burnin:
            model.update(config.n_burnin)
        samples = model.sample(config.n_post, vars=list(parameters))

        draws: Dict[str, np.ndarray] = {}
        for name in parameters:
            # pyjags layout: (*shape, iterations, chains)
            arr = np.asarray(samples[name], dtype=float)
            arr = np.moveaxis(arr, (-1, -2), (0, 1))
            if arr.shape[2:] == (1,):
                arr = arr[:, :, 0]
            draws[name] = thin_draws(arr, config.n_thin)

        stats: Dict[str, Any] = {
            "engine": self.name,
            "pyjags_version": getattr(pyjags, "__version__", ""),
            "adapt": adapt,
        }
        return EngineResult(draws=draws, stats=stats)


def _chain_inits(
    inits: Optional[Sequence[Mapping[str, Any]]],
    n_chains: int,
    rng: np.random.Generator,
) -> List[Dict[str, Any]]:
    """Per-chain init dicts for pyjags, each carrying its own RNG seed.

    Without inits every chain still gets an empty dict so `rng` seeds the run.
    """
    chains = [{} for _ in range(n_chains)] if inits is None else list(inits)
    seeds = chain_seeds(rng, len(chains))
    return [_with_chain_rng(c, seed, i) for i, (c, seed) in enumerate(zip(chains, seeds))]


def _with_chain_rng(init: Mapping[str, Any], seed: int, chain: int) -> Dict[str, Any]:
    """Give each chain its own JAGS random stream unless the caller set one."""
    out = {
        k: (np.asarray(v, dtype=float) if not isinstance(v, str) else v)
        for k, v in init.items()
    }
    out.setdefault(".RNG.name", _RNG_NAMES[chain % len(_RNG_NAMES)])
    out.setdefault(".RNG.seed", seed)
    return out

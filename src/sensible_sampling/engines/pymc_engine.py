from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from ..config import SamplerConfig
from .common import EngineResult, chain_seeds, thin_draws

logger = logging.getLogger(__name__)


class PyMCEngine:
    """Run a callable model descriptor with PyMC.

    The descriptor is called as `descriptor(data)` inside an active
    `pm.Model()` context and declares the priors, deterministic nodes and the
    observed likelihood. Burn-in steps are PyMC tuning steps and are never
    returned; thinning is applied to the post-burn-in draws afterwards.
    """

    name = "pymc"

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
        if not callable(descriptor):
            raise TypeError(
                "pymc engine expects a callable descriptor(data); "
                "use engine='jags' for model strings."
            )

        import pymc as pm  # local import (heavy)

        # Engine options parsing lives HERE (not in Model.sample).
        engine_options = dict(options or {})
        cores = engine_options.pop("cores", 1)
        init = engine_options.pop("init", "adapt_diag")
        progressbar = bool(engine_options.pop("progressbar", False))
        sample_kwargs: Dict[str, Any] = dict(engine_options.pop("sample_kwargs", {}) or {})
        # Any leftover keys get treated as pm.sample() kwargs, unless already set.
        for k, v in list(engine_options.items()):
            sample_kwargs.setdefault(k, v)

        initvals = None if inits is None else [dict(c) for c in inits]

        with pm.Model() as model:
            descriptor(data)

        logger.info(
            "pymc: %d chains x %d steps (%d burn-in, thin %d), keeping %s",
            config.n_chains,
            config.n_iter,
            config.n_burnin,
            config.n_thin,
            list(parameters),
        )
        with model:
            idata = pm.sample(
                draws=config.n_post,
                tune=config.n_burnin,
                chains=config.n_chains,
                cores=cores,
                initvals=initvals,
                init=init,
                random_seed=chain_seeds(rng, config.n_chains),
                progressbar=progressbar,
                compute_convergence_checks=False,
                return_inferencedata=True,
                **sample_kwargs,
            )

        posterior = idata.posterior
        draws: Dict[str, np.ndarray] = {}
        for name in parameters:
            arr = np.asarray(posterior[name].values)
            draws[name] = thin_draws(arr, config.n_thin)

        stats: Dict[str, Any] = {
            "engine": self.name,
            "pymc_version": getattr(pm, "__version__", ""),
            "free_names": tuple(v.name for v in model.free_RVs),
            "deterministic_names": tuple(v.name for v in model.deterministics),
            "inference_data": idata,
        }
        sample_stats = getattr(idata, "sample_stats", None)
        if sample_stats is not None and "diverging" in sample_stats:
            stats["divergences"] = int(np.asarray(sample_stats["diverging"].values).sum())

        return EngineResult(draws=draws, stats=stats)

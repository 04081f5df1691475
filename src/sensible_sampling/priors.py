"""Prior distributions and per-chain initial values.

Normal-family priors are parameterised by precision (tau = 1/variance), the
same convention the model descriptors use:

  ("normal", mu, tau)
  ("lognormal", mu, tau)          log(x) ~ normal(mu, tau)
  ("student_t", mu, tau, nu)
  ("halfnormal", tau)
  ("uniform", lo, hi)
  ("gamma", shape, rate)
  ("exponential", rate)
  ("beta", a, b)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .params import DerivedSpec, ParameterSpec

logger = logging.getLogger(__name__)

Prior = Tuple[str, Tuple[Any, ...]]

_ARITY = {
    "normal": 2,
    "lognormal": 2,
    "student_t": 3,
    "halfnormal": 1,
    "uniform": 2,
    "gamma": 2,
    "exponential": 1,
    "beta": 2,
}

PRIOR_KINDS = tuple(_ARITY)


def normalize_prior(prior: Any) -> Prior:
    """Accept ("normal", 0, 1e-4) or ("normal", (0, 1e-4)) and return (kind, args)."""
    if not isinstance(prior, tuple) or len(prior) < 1:
        raise TypeError("prior must be like ('normal', 0, 0.001) etc.")
    kind = str(prior[0]).lower()
    if len(prior) == 2 and isinstance(prior[1], tuple):
        args = tuple(prior[1])
    else:
        args = tuple(prior[1:])
    if kind not in _ARITY:
        raise NotImplementedError(
            f"Unsupported prior kind {kind!r}. Available: {PRIOR_KINDS}"
        )
    if len(args) != _ARITY[kind]:
        raise TypeError(
            f"{kind} prior expects {_ARITY[kind]} argument(s), got {len(args)}."
        )
    return kind, tuple(float(a) for a in args)


def frozen_prior(prior: Any):
    """Return a frozen scipy.stats distribution for a prior tuple."""
    import scipy.stats

    kind, args = normalize_prior(prior)

    def _positive(label: str, v: float) -> float:
        if not v > 0:
            raise ValueError(f"{kind} prior requires {label} > 0 (got {v}).")
        return v

    if kind == "normal":
        mu, tau = args
        return scipy.stats.norm(mu, 1.0 / np.sqrt(_positive("tau", tau)))
    if kind == "lognormal":
        mu, tau = args
        return scipy.stats.lognorm(
            s=1.0 / np.sqrt(_positive("tau", tau)), scale=np.exp(mu)
        )
    if kind == "student_t":
        mu, tau, nu = args
        return scipy.stats.t(
            df=_positive("nu", nu), loc=mu, scale=1.0 / np.sqrt(_positive("tau", tau))
        )
    if kind == "halfnormal":
        (tau,) = args
        return scipy.stats.halfnorm(scale=1.0 / np.sqrt(_positive("tau", tau)))
    if kind == "uniform":
        lo, hi = args
        if not (np.isfinite(lo) and np.isfinite(hi) and lo < hi):
            raise ValueError("uniform prior requires finite lo < hi.")
        return scipy.stats.uniform(loc=lo, scale=hi - lo)
    if kind == "gamma":
        shape, rate = args
        return scipy.stats.gamma(
            a=_positive("shape", shape), scale=1.0 / _positive("rate", rate)
        )
    if kind == "exponential":
        (rate,) = args
        return scipy.stats.expon(scale=1.0 / _positive("rate", rate))
    # beta
    a, b = args
    return scipy.stats.beta(_positive("a", a), _positive("b", b))


def draw_prior(
    prior: Any, rng: np.random.Generator, shape: Tuple[int, ...] = ()
) -> Any:
    """One draw (python float for scalars, ndarray otherwise) from a prior."""
    rv = frozen_prior(prior)
    if shape == ():
        return float(rv.rvs(random_state=rng))
    return np.asarray(rv.rvs(size=shape, random_state=rng), dtype=float)


def generate_inits(
    params: Sequence[ParameterSpec | DerivedSpec],
    n_chains: int,
    rng: Optional[np.random.Generator] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Draw one initial-value mapping per chain from the parameters' priors.

    Only prior-bearing parameters get an entry; deterministic dependents
    (DerivedSpec) never do. Every chain gets its own independent draws.

    `overrides` pins a parameter on every chain, either to a constant or to a
    callable `rng -> value` evaluated once per chain.
    """
    n_chains = int(n_chains)
    if n_chains < 1:
        raise ValueError("n_chains must be >= 1.")
    if rng is None:
        rng = np.random.default_rng()
    overrides = dict(overrides or {})

    sampled = [
        p for p in params if isinstance(p, ParameterSpec) and p.prior is not None
    ]
    derived_names = {p.name for p in params if isinstance(p, DerivedSpec)}
    bad = sorted(set(overrides) & derived_names)
    if bad:
        raise ValueError(f"Deterministic parameters cannot take initial values: {bad}")
    known = {p.name for p in params if isinstance(p, ParameterSpec)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise KeyError(f"Initial-value overrides for unknown parameters: {unknown}")

    inits: List[Dict[str, Any]] = []
    for _ in range(n_chains):
        chain: Dict[str, Any] = {}
        for spec in sampled:
            if spec.name in overrides:
                continue
            chain[spec.name] = draw_prior(spec.prior, rng, spec.shape)
        for name, v in overrides.items():
            chain[name] = _resolve_override(v, rng)
        inits.append(chain)

    logger.debug("generated inits for %d chains: %s", n_chains, [sorted(c) for c in inits[:1]])
    return inits


def _resolve_override(value: Any, rng: np.random.Generator) -> Any:
    if callable(value):
        value = value(rng)
    arr = np.asarray(value, dtype=float)
    return float(arr) if arr.shape == () else arr

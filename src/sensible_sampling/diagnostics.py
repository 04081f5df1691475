"""Convergence diagnostics and posterior summaries.

The math is ArviZ's (and scipy's for the KDE mode); this module only feeds
it draw bundles and turns the xarray results into plain dicts.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from warnings import warn

import numpy as np

from .draws import DrawBundle

logger = logging.getLogger(__name__)

RHAT_THRESHOLD = 1.1


class ConvergenceWarning(UserWarning):
    """Chains disagree: re-run with more iterations, other priors or a reparameterisation."""


def _dataset_to_dict(ds: Any, names: Sequence[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for n in names:
        v = np.asarray(ds[n].values, dtype=float)
        out[n] = float(v) if v.shape == () else v
    return out


def gelman_rubin(bundle: DrawBundle, var_names: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Potential scale reduction factor (R-hat) per parameter.

    ~1.0 at convergence; needs at least two chains (NaN otherwise).
    """
    import arviz as az

    names = list(var_names or bundle.names)
    ds = az.rhat(bundle.to_inference_data(), var_names=names)
    return _dataset_to_dict(ds, names)


def effective_sample_size(
    bundle: DrawBundle,
    var_names: Optional[Sequence[str]] = None,
    *,
    method: str = "bulk",
) -> Dict[str, Any]:
    """Autocorrelation-adjusted number of independent draws per parameter."""
    import arviz as az

    names = list(var_names or bundle.names)
    ds = az.ess(bundle.to_inference_data(), var_names=names, method=method)
    return _dataset_to_dict(ds, names)


def hdi(
    bundle: DrawBundle,
    var_names: Optional[Sequence[str]] = None,
    *,
    prob: float = 0.95,
) -> Dict[str, Any]:
    """Highest-density interval per parameter; last axis is (low, high)."""
    import arviz as az

    if not 0.0 < prob < 1.0:
        raise ValueError("prob must be in (0, 1).")
    names = list(var_names or bundle.names)
    ds = az.hdi(bundle.to_inference_data(), var_names=names, hdi_prob=prob)
    return _dataset_to_dict(ds, names)


def posterior_mode(values: Any, *, grid_size: int = 512) -> float:
    """Marginal posterior mode from a Gaussian KDE of 1D draws."""
    from scipy.stats import gaussian_kde

    v = np.asarray(values, dtype=float).ravel()
    v = v[np.isfinite(v)]
    if v.size == 0:
        raise ValueError("posterior_mode needs at least one finite draw.")
    lo, hi = float(np.min(v)), float(np.max(v))
    if v.size < 2 or hi <= lo:
        return lo
    kde = gaussian_kde(v)
    grid = np.linspace(lo, hi, int(grid_size))
    return float(grid[int(np.argmax(kde(grid)))])


def summarize(bundle: DrawBundle, *, hdi_prob: float = 0.95, **kwargs: Any):
    """ArviZ summary table (mean, sd, HDI, MCSE, ESS, R-hat) as a DataFrame."""
    import arviz as az

    return az.summary(bundle.to_inference_data(), hdi_prob=hdi_prob, **kwargs)


def check_convergence(
    bundle: DrawBundle,
    *,
    threshold: float = RHAT_THRESHOLD,
    var_names: Optional[Sequence[str]] = None,
    warn_on_failure: bool = True,
) -> List[str]:
    """Return the parameters whose R-hat exceeds `threshold`.

    Non-convergence is a quality signal, not an error: it is reported with a
    ConvergenceWarning and never raised.
    """
    if bundle.n_chains < 2:
        warn(
            "R-hat needs at least two chains; convergence was not checked.",
            ConvergenceWarning,
        )
        return []

    rhat = gelman_rubin(bundle, var_names)
    bad: List[str] = []
    for name, v in rhat.items():
        worst = float(np.nanmax(np.atleast_1d(v))) if np.size(v) else float("nan")
        if not np.isfinite(worst) or worst > threshold:
            bad.append(name)

    if bad:
        logger.info("R-hat above %.3g for %s", threshold, bad)
        if warn_on_failure:
            detail = ", ".join(
                f"{n}={float(np.nanmax(np.atleast_1d(rhat[n]))):.3f}" for n in bad
            )
            warn(
                f"Chains have not converged (R-hat > {threshold}): {detail}. "
                "Consider more iterations, different priors or a reparameterisation.",
                ConvergenceWarning,
            )
    return bad

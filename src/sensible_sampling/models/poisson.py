from __future__ import annotations

from typing import Literal

import numpy as np

from ..model import Model


JAGS_POISSON_GLM = """
model {
  for (i in 1:N) {
    y[i] ~ dpois(lambda[i])
    log(lambda[i]) <- alpha + beta * x[i]
  }
  alpha ~ dnorm(0, {prior_tau})
  beta ~ dnorm(0, {prior_tau})
}
"""


def log_linear_rate_func(x, alpha, beta):
    """Expected count exp(alpha + beta * x)."""
    return np.exp(alpha + beta * x)


def _pymc_descriptor(prior_tau: float):
    def poisson_glm(data):
        import pymc as pm

        alpha = pm.Normal("alpha", mu=0.0, tau=prior_tau)
        beta = pm.Normal("beta", mu=0.0, tau=prior_tau)
        log_rate = alpha + beta * data["x"]
        pm.Poisson("y", mu=pm.math.exp(log_rate), observed=data["y"])

    return poisson_glm


def poisson_glm(
    *,
    flavour: Literal["pymc", "jags"] = "pymc",
    prior_tau: float = 0.1,
    name: str = "poisson glm",
) -> Model:
    """Return a Poisson GLM with a log link for count data.

    y[i] ~ Poisson(lambda[i]), log(lambda[i]) = alpha + beta * x[i].

    Data names: x, y (non-negative integer counts), N.

    Derived parameters
    ------------------
    rate_ratio : exp(beta), multiplicative change in the expected count per
    unit of x (computed from each draw).
    """
    if flavour == "pymc":
        base = Model.from_pymc(_pymc_descriptor(prior_tau), name=name)
    elif flavour == "jags":
        code = JAGS_POISSON_GLM.replace("{prior_tau}", repr(float(prior_tau)))
        base = Model.from_jags(code, name=name)
    else:
        raise ValueError(f"Unknown flavour {flavour!r}; expected 'pymc' or 'jags'.")

    return (
        base.prior(
            alpha=("normal", 0.0, prior_tau),
            beta=("normal", 0.0, prior_tau),
        )
        .derive(
            "rate_ratio",
            lambda p: np.exp(p["beta"]),
            doc="exp(beta): multiplicative change in expected count per unit x",
        )
        .with_predictor(log_linear_rate_func)
    )

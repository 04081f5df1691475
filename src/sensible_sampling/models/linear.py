from __future__ import annotations

from typing import Literal

from ..model import Model


JAGS_LINEAR_REGRESSION = """
model {
  for (i in 1:N) {
    y[i] ~ dnorm(mu[i], tau)
    mu[i] <- alpha + beta * x[i]
  }
  alpha ~ dnorm(0, {prior_tau})
  beta ~ dnorm(0, {prior_tau})
  sigma ~ dunif(0, {sigma_max})
  tau <- 1 / (sigma * sigma)
}
"""


def straight_line_func(x, alpha, beta):
    """Module-level straight line: mean response alpha + beta * x."""
    return alpha + beta * x


def _pymc_descriptor(prior_tau: float, sigma_max: float):
    def linear_regression(data):
        import pymc as pm

        alpha = pm.Normal("alpha", mu=0.0, tau=prior_tau)
        beta = pm.Normal("beta", mu=0.0, tau=prior_tau)
        sigma = pm.Uniform("sigma", lower=0.0, upper=sigma_max)
        tau = pm.Deterministic("tau", 1.0 / sigma**2)
        # one likelihood term per observation
        pm.Normal("y", mu=alpha + beta * data["x"], tau=tau, observed=data["y"])

    return linear_regression


def linear_regression(
    *,
    flavour: Literal["pymc", "jags"] = "pymc",
    prior_tau: float = 1e-4,
    sigma_max: float = 100.0,
    name: str = "linear regression",
) -> Model:
    """Return a simple linear regression Model.

    y[i] ~ Normal(alpha + beta * x[i], tau), with vague Normal priors
    (precision `prior_tau`) on alpha and beta, sigma ~ Uniform(0, sigma_max)
    and the precision tau = 1 / sigma^2 as a deterministic node.

    Data names: x, y, N.
    """
    if flavour == "pymc":
        base = Model.from_pymc(_pymc_descriptor(prior_tau, sigma_max), name=name)
    elif flavour == "jags":
        code = JAGS_LINEAR_REGRESSION.replace("{prior_tau}", repr(float(prior_tau)))
        code = code.replace("{sigma_max}", repr(float(sigma_max)))
        base = Model.from_jags(code, name=name)
    else:
        raise ValueError(f"Unknown flavour {flavour!r}; expected 'pymc' or 'jags'.")

    return (
        base.prior(
            alpha=("normal", 0.0, prior_tau),
            beta=("normal", 0.0, prior_tau),
            sigma=("uniform", 0.0, sigma_max),
        )
        .derive("tau", doc="Residual precision 1 / sigma^2")
        .with_predictor(straight_line_func)
    )

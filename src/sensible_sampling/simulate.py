from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .inputs import ModelData
from .util import sd_to_precision


def simulate_linear(
    n: int = 100,
    *,
    intercept: float = 15.0,
    slope: float = 3.0,
    sd: float = 4.0,
    x_range: Tuple[float, float] = (0.0, 10.0),
    rng: Optional[np.random.Generator] = None,
) -> ModelData:
    """Simulate y = intercept + slope * x + Normal(0, sd) noise.

    x is drawn uniformly over `x_range`. The true values are kept in
    `meta["truth"]`, including the precision tau = 1 / sd^2 so they can be
    compared with precision-parameterised posteriors directly.
    """
    if n < 1:
        raise ValueError("n must be >= 1.")
    if sd <= 0:
        raise ValueError("sd must be > 0.")
    if rng is None:
        rng = np.random.default_rng()

    lo, hi = x_range
    x = rng.uniform(lo, hi, size=int(n))
    y = intercept + slope * x + rng.normal(0.0, sd, size=int(n))

    truth = {
        "alpha": float(intercept),
        "beta": float(slope),
        "sigma": float(sd),
        "tau": sd_to_precision(sd),
    }
    return ModelData.from_arrays(
        predictor="x",
        response="y",
        label="simulated",
        meta={"truth": truth},
        x=x,
        y=y,
    )


def simulate_poisson(
    n: int = 100,
    *,
    alpha: float = 0.5,
    beta: float = 0.3,
    x_range: Tuple[float, float] = (0.0, 5.0),
    rng: Optional[np.random.Generator] = None,
) -> ModelData:
    """Simulate counts y ~ Poisson(exp(alpha + beta * x))."""
    if n < 1:
        raise ValueError("n must be >= 1.")
    if rng is None:
        rng = np.random.default_rng()

    lo, hi = x_range
    x = rng.uniform(lo, hi, size=int(n))
    y = rng.poisson(np.exp(alpha + beta * x))

    truth = {
        "alpha": float(alpha),
        "beta": float(beta),
        "rate_ratio": float(np.exp(beta)),
    }
    return ModelData.from_arrays(
        predictor="x",
        response="y",
        label="simulated counts",
        meta={"truth": truth},
        x=x,
        y=y,
    )

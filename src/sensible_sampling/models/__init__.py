"""Builtin model descriptors."""
from .linear import JAGS_LINEAR_REGRESSION, linear_regression, straight_line_func
from .poisson import JAGS_POISSON_GLM, log_linear_rate_func, poisson_glm

__all__ = [
    "linear_regression",
    "poisson_glm",
    "straight_line_func",
    "log_linear_rate_func",
    "JAGS_LINEAR_REGRESSION",
    "JAGS_POISSON_GLM",
]

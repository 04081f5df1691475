from __future__ import annotations

import inspect
import math
from typing import Any, Callable, List, Tuple

import numpy as np


def normal_cdf(z: float) -> float:
    """Standard Normal CDF Φ(z)."""
    return 0.5 * (1.0 + math.erf(z / math.sqrt(2.0)))


def level_to_conf_int(level: float) -> Tuple[float, float]:
    """Central interval for a Normal-equivalent ±level sigma."""
    lo = normal_cdf(-float(level))
    hi = normal_cdf(+float(level))
    return (lo, hi)


# ---- precision <-> variance ------------------------------------------------
# Normal-family terms in the model descriptors are parameterised by precision
# (1 / variance). Simulation code thinks in standard deviations.


def variance_to_precision(variance: Any) -> Any:
    """tau = 1 / variance."""
    v = np.asarray(variance, dtype=float)
    if np.any(v <= 0):
        raise ValueError("variance must be > 0 to convert to a precision.")
    out = 1.0 / v
    return float(out) if out.shape == () else out


def sd_to_precision(sd: Any) -> Any:
    """tau = 1 / sd**2."""
    s = np.asarray(sd, dtype=float)
    if np.any(s <= 0):
        raise ValueError("sd must be > 0 to convert to a precision.")
    out = 1.0 / s**2
    return float(out) if out.shape == () else out


def precision_to_variance(tau: Any) -> Any:
    """variance = 1 / tau."""
    t = np.asarray(tau, dtype=float)
    if np.any(t <= 0):
        raise ValueError("precision must be > 0 to convert to a variance.")
    out = 1.0 / t
    return float(out) if out.shape == () else out


def precision_to_sd(tau: Any) -> Any:
    """sd = 1 / sqrt(tau)."""
    t = np.asarray(tau, dtype=float)
    if np.any(t <= 0):
        raise ValueError("precision must be > 0 to convert to an sd.")
    out = 1.0 / np.sqrt(t)
    return float(out) if out.shape == () else out


def infer_param_names(func: Callable[..., Any]) -> Tuple[str, ...]:
    """Infer parameter names from a predictor function signature.

    Conventions:
    - first arg is the independent variable (x)
    - remaining positional/keyword parameters are model parameters

    No *args/**kwargs in predictor functions.
    """
    sig = inspect.signature(func)
    params = list(sig.parameters.values())

    if len(params) < 2:
        raise TypeError("Predictor function must have at least (x, p1, ...).")

    bad_kinds = {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}
    for p in params:
        if p.kind in bad_kinds:
            raise TypeError("*args/**kwargs are not supported in predictor functions.")

    names = [p.name for p in params[1:]]
    if len(set(names)) != len(names):
        raise TypeError("Duplicate parameter names in function signature.")
    return tuple(names)


def element_labels(name: str, shape: Tuple[int, ...]) -> List[str]:
    """Column labels for a (possibly indexed) parameter.

    Scalars keep their name; arrays expand to name[i] / name[i,j] in C order.
    """
    if shape == ():
        return [name]
    return [
        f"{name}[{','.join(str(i) for i in idx)}]" for idx in np.ndindex(*shape)
    ]


def uncertainty_to_string(
    x: float, err: float, precision: int | str | None = 1
) -> str:
    """Format a value with uncertainty as a compact string.

    Returns the shortest string representation of x +/- err as either
    x.xx(ee)e+xx or xxx.xx(ee). Use precision="auto" to follow the
    common 1-or-2 significant-digit rule for the uncertainty.
    """
    auto = precision is None or (
        isinstance(precision, str) and precision.lower() == "auto"
    )
    x = float(x)
    err = float(err)

    if math.isnan(x) or math.isnan(err):
        return "NaN"
    if math.isinf(x) or math.isinf(err):
        return "inf"

    err = abs(err)
    if err == 0.0:
        if auto:
            precision = 1
        precision = max(1, int(precision))  # type: ignore[arg-type]
        return f"{x:.{precision}g}(0)"

    err_exp = int(math.floor(math.log10(err)))
    if auto:
        leading = int(err / (10 ** err_exp) + 1e-12)
        precision = 2 if leading == 1 else 1
    precision = max(1, int(precision))  # type: ignore[arg-type]

    if x == 0.0 or abs(x) < err:
        x_exp = err_exp
    else:
        x_exp = int(math.floor(math.log10(abs(x))))

    un_exp = err_exp - precision + 1
    un_int = round(err * 10 ** (-un_exp))

    no_exp = un_exp
    no_int = round(x * 10 ** (-no_exp))

    fieldw = x_exp - no_exp
    fmt = f"%.{fieldw}f"
    result1 = (fmt + "(%.0f)e%d") % (no_int * 10 ** (-fieldw), un_int, x_exp)

    fieldw = max(0, -no_exp)
    fmt = f"%.{fieldw}f"
    result2 = (fmt + "(%.0f)") % (no_int * 10 ** no_exp, un_int * 10 ** max(0, un_exp))

    return result2 if len(result2) <= len(result1) else result1

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Tuple
from warnings import warn

import numpy as np

from .draws import DrawBundle
from .util import uncertainty_to_string


def plot_trace(
    bundle: DrawBundle,
    *,
    var_names: Optional[Sequence[str]] = None,
    **kwargs: Any,
) -> Any:
    """Per-chain trace and marginal density for each parameter (ArviZ).

    Diverging or non-overlapping chains are the visual convergence check.
    Returns the ArviZ axes array.
    """
    import arviz as az

    names = list(var_names or bundle.names)
    kwargs.setdefault("compact", True)
    return az.plot_trace(bundle.to_inference_data(), var_names=names, **kwargs)


def plot_posterior(
    bundle: DrawBundle,
    *,
    var_names: Optional[Sequence[str]] = None,
    ref_val: Optional[Mapping[str, float]] = None,
    hdi_prob: float = 0.95,
    point_estimate: str = "mode",
    **kwargs: Any,
) -> Any:
    """Marginal posteriors with HDI and point estimate (ArviZ).

    `ref_val` maps parameter names to reference values, e.g. the true
    simulated parameters.
    """
    import arviz as az

    names = list(var_names or bundle.names)
    if ref_val is not None:
        kwargs["ref_val"] = {
            n: [{"ref_val": float(v)}] for n, v in ref_val.items() if n in names
        }
    return az.plot_posterior(
        bundle.to_inference_data(),
        var_names=names,
        hdi_prob=hdi_prob,
        point_estimate=point_estimate,
        **kwargs,
    )


def plot_fit(
    *,
    ax: Optional[Any] = None,
    x: Any,
    y: Any,
    run: Optional[Any] = None,
    xg: Optional[np.ndarray] = None,
    band: bool = False,
    band_options: Optional[Mapping[str, Any]] = None,
    band_kwargs: Optional[Mapping[str, Any]] = None,
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_names: Optional[Sequence[str]] = None,
    param_digits: int | str | None = "auto",
    text_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot data points and an optional posterior mean line/band on a Matplotlib Axes.

    Parameters
    ----------
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    x, y : array-like
        1D data to plot.
    run : Run, optional
        Run object providing predict() and band(). Required for line/band.
    xg : ndarray, optional
        Grid for plotting the line. Defaults to 400 points over x range.
    band : bool
        If True, draw the posterior band using run.band().
    band_options : dict, optional
        Keyword options forwarded to run.band().
    band_kwargs, data_kwargs, line_kwargs, text_kwargs : dict, optional
        Styling kwargs for fill_between, plot (data), plot (line), and text.
    show_params : bool
        If True, annotate posterior mean ± sd on the plot.
    param_names : sequence of str, optional
        Names to include in the parameter box. Defaults to the predictor's parameters.
    param_digits : int | "auto"
        Significant digits for uncertainty formatting.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    band_options = dict(band_options or {})
    band_kwargs = dict(band_kwargs or {})
    text_kwargs = dict(text_kwargs or {})

    x_arr = np.asarray(x)
    y_arr = np.asarray(y)
    if x_arr.ndim != 1 or y_arr.ndim != 1:
        raise ValueError("plot_fit requires 1D x and y arrays.")
    if x_arr.shape != y_arr.shape:
        raise ValueError("plot_fit requires x and y to have the same shape.")

    data_kwargs.setdefault("marker", "o")
    data_kwargs.setdefault("linestyle", "none")
    data_kwargs.setdefault("ms", 4)
    ax.plot(x_arr, y_arr, **data_kwargs)

    if run is not None:
        if xg is None:
            xg = np.linspace(float(np.min(x_arr)), float(np.max(x_arr)), 400)
        yfit = run.predict(xg)
        line_kwargs.setdefault("label", "posterior mean")
        ax.plot(xg, yfit, **line_kwargs)

        if band:
            try:
                band_obj = run.band(xg, **band_options)
            except ValueError as exc:
                warn(f"plot_fit: could not compute band: {exc}", UserWarning)
            else:
                band_kwargs.setdefault("alpha", 0.2)
                ax.fill_between(xg, band_obj.low, band_obj.high, **band_kwargs)

        if show_params:
            params = run.results.params
            names = list(param_names) if param_names is not None else list(run.model.predictor_names)

            lines = []
            for name in names:
                pv = params[name]
                val = float(pv.value)
                if pv.stderr is None or not np.isfinite(pv.stderr):
                    lines.append(f"{name}={val:.4g}")
                else:
                    lines.append(
                        f"{name}={uncertainty_to_string(val, float(pv.stderr), precision=param_digits)}"
                    )

            if lines:
                text_kwargs.setdefault("ha", "left")
                text_kwargs.setdefault("va", "top")
                text_kwargs.setdefault("fontsize", 9)
                text_kwargs.setdefault("transform", ax.transAxes)
                text_kwargs.setdefault(
                    "bbox",
                    {"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
                )
                ax.text(0.02, 0.98, "\n".join(lines), **text_kwargs)

    return fig, ax


def plot_run(
    *,
    run: Any,
    ax: Optional[Any] = None,
    band: bool = True,
    title: bool | str = True,
    **kwargs: Any,
) -> Tuple[Any, Any]:
    """Plot a run's data (predictor vs response) with the posterior line and band."""
    data = run.data
    xname = getattr(data, "predictor", None)
    yname = getattr(data, "response", None)
    if xname is None or yname is None:
        raise ValueError(
            "run.plot() needs ModelData with predictor= and response= names."
        )
    values = data.values
    fig, ax = plot_fit(
        ax=ax,
        x=np.asarray(values[xname], dtype=float),
        y=np.asarray(values[yname], dtype=float),
        run=run,
        band=band,
        **kwargs,
    )

    if getattr(data, "x_label", None):
        ax.set_xlabel(data.x_label)
    if getattr(data, "y_label", None):
        ax.set_ylabel(data.y_label)
    if getattr(data, "label", None):
        ax.lines[0].set_label(data.label)
    if title is True:
        ax.set_title(str(getattr(run.model, "name", "")))
    elif isinstance(title, str):
        ax.set_title(title)
    return fig, ax

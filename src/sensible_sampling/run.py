from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import SamplerConfig
from .draws import DrawBundle
from .inputs import ModelData
from .params import ParamView, ParamsView
from .util import level_to_conf_int


@dataclass(frozen=True)
class Band:
    low: np.ndarray
    high: np.ndarray
    median: Optional[np.ndarray] = None


def params_from_bundle(
    bundle: DrawBundle, derived_names: Sequence[str] = ()
) -> ParamsView:
    """Posterior mean/sd views for every retained parameter."""
    derived = set(derived_names)
    items: Dict[str, ParamView] = {}
    for name in bundle.names:
        flat = bundle.flat(name)
        mean = np.mean(flat, axis=0)
        sd = np.std(flat, axis=0, ddof=1) if flat.shape[0] > 1 else np.full_like(mean, np.nan)
        items[name] = ParamView(
            name=name,
            value=float(mean) if np.ndim(mean) == 0 else mean,
            stderr=float(sd) if np.ndim(sd) == 0 else sd,
            derived=name in derived,
            draws=flat,
        )
    return ParamsView(items)


@dataclass(frozen=True)
class Results:
    params: ParamsView
    bundle: DrawBundle
    config: SamplerConfig
    engine: str = ""
    # Engine-specific extras (e.g. PyMC InferenceData, divergence count)
    stats: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key):
        """Return ParamView(s) by name."""
        return self.params[key]

    @property
    def table(self):
        """Flat posterior table (pandas DataFrame)."""
        return self.bundle.to_frame()

    @property
    def inference_data(self):
        """Chain-indexed view as ArviZ InferenceData."""
        return self.bundle.to_inference_data()

    def summary(self, digits: int = 4, *, hdi_prob: float = 0.95) -> str:
        """Return a human-readable summary string for the results."""
        from .diagnostics import gelman_rubin, hdi

        cfg = self.config
        lines = [
            f"Results(engine={self.engine!r}, chains={self.bundle.n_chains}, "
            f"draws/chain={self.bundle.n_draws}, n_iter={cfg.n_iter}, "
            f"n_burnin={cfg.n_burnin}, n_thin={cfg.n_thin})"
        ]
        if "divergences" in self.stats:
            lines.append(f"  {'divergences':>12s}: {self.stats['divergences']}")

        scalar = [n for n in self.bundle.names if self.bundle.shape_of(n) == ()]
        rhat = gelman_rubin(self.bundle, scalar) if scalar and self.bundle.n_chains > 1 else {}
        intervals = hdi(self.bundle, scalar, prob=hdi_prob) if scalar else {}
        pct = f"{100 * hdi_prob:g}%"

        for name, pv in self.params.items():
            tag = " (derived)" if pv.derived else ""
            if name not in intervals:
                lines.append(f"  {name:>12s}: shape {np.shape(pv.value)}{tag}")
                continue
            lo, hi = intervals[name]
            row = (
                f"  {name:>12s}: {float(pv.value):.{digits}g} ± {float(pv.stderr):.{digits}g}"
                f"  {pct} HDI [{lo:.{digits}g}, {hi:.{digits}g}]"
            )
            if name in rhat:
                row += f"  R-hat {rhat[name]:.3f}"
            lines.append(row + tag)
        return "\n".join(lines)


@dataclass(frozen=True)
class Run:
    model: Any  # Model
    results: Results
    data: Any = None  # ModelData or mapping
    inits: Tuple[Mapping[str, Any], ...] = ()

    @property
    def bundle(self) -> DrawBundle:
        return self.results.bundle

    def _data_values(self) -> Mapping[str, Any]:
        if self.data is None:
            return {}
        return self.data.values if isinstance(self.data, ModelData) else self.data

    def predict(
        self,
        x: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Evaluate the model predictor at `x` with posterior means (or `params`)."""
        if x is None:
            x = self._default_x()
        p = self.results.params if params is None else params
        return self.model.eval(x, params=p)

    def _default_x(self) -> np.ndarray:
        name = getattr(self.data, "predictor", None)
        if name is None:
            raise ValueError("No x given and the run's data does not name a predictor.")
        return np.asarray(self._data_values()[name], dtype=float)

    def band(
        self,
        x: Any = None,
        *,
        nsamples: int = 400,
        level: Optional[float] = None,
        conf_int: Optional[Tuple[float, float]] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> Band:
        """Posterior band of the model predictor at x, computed from draws."""
        if x is None:
            x = self._default_x()
        if rng is None:
            rng = np.random.default_rng()

        if level is None and conf_int is None:
            level = 2.0
        if level is not None and conf_int is not None:
            raise ValueError("Provide only one of level= or conf_int=.")

        if conf_int is None:
            qlo, qhi = level_to_conf_int(float(level))
        else:
            qlo, qhi = conf_int

        names = list(self.model.predictor_names)
        missing = [n for n in names if n not in self.bundle.draws]
        if missing:
            raise ValueError(
                f"band() needs draws for predictor parameters {missing}; retain them when sampling."
            )

        S = self.bundle.n_total
        take = min(int(nsamples), int(S))
        if take <= 0:
            raise ValueError("nsamples must be >= 1.")
        idx = rng.choice(S, size=take, replace=False) if take < S else np.arange(S)

        flat = {n: self.bundle.flat(n) for n in names}
        preds = []
        for s in idx:
            p = {n: flat[n][s] for n in names}
            preds.append(np.asarray(self.model.eval(x, **p), dtype=float))
        preds = np.stack(preds, axis=0)

        lo = np.quantile(preds, qlo, axis=0)
        hi = np.quantile(preds, qhi, axis=0)
        med = np.quantile(preds, 0.5, axis=0)
        return Band(low=lo, high=hi, median=med)

    def diagnose(self, threshold: float = 1.1, **kwargs: Any) -> List[str]:
        """Names whose R-hat exceeds threshold (warns, never raises)."""
        from .diagnostics import check_convergence

        return check_convergence(self.bundle, threshold=threshold, **kwargs)

    def plot(self, *, ax: Optional[Any] = None, **kwargs: Any) -> Tuple[Any, Any]:
        """Plot data with the posterior mean line and band."""
        from .plotting import plot_run

        return plot_run(run=self, ax=ax, **kwargs)

    def plot_trace(self, var_names: Optional[Sequence[str]] = None, **kwargs: Any) -> Any:
        from .plotting import plot_trace

        return plot_trace(self.bundle, var_names=var_names, **kwargs)

    def plot_posterior(
        self,
        var_names: Optional[Sequence[str]] = None,
        *,
        ref_val: Optional[Mapping[str, float]] = None,
        **kwargs: Any,
    ) -> Any:
        from .plotting import plot_posterior

        return plot_posterior(self.bundle, var_names=var_names, ref_val=ref_val, **kwargs)

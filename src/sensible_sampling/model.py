from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

import numpy as np

from .config import SamplerConfig
from .draws import DrawBundle
from .engines import get_engine
from .inputs import ModelData
from .params import DerivedSpec, ParameterSpec, ParamView
from .priors import generate_inits, normalize_prior
from .run import Results, Run, params_from_bundle
from .util import infer_param_names

logger = logging.getLogger(__name__)

Descriptor = Any  # Callable[[Mapping[str, Any]], None] | str


@dataclass
class Model:
    """A model wraps an opaque descriptor plus parameter metadata.

    The descriptor is handed to an engine untouched: a callable declaring PyMC
    variables, or a JAGS model string. The metadata (priors, deterministic
    dependents, predictor) is what the harness itself needs: per-chain
    initial values, the default retained list, and posterior predictions.
    """

    name: str
    descriptor: Descriptor
    params: Tuple[ParameterSpec, ...] = ()
    derived: Tuple[DerivedSpec, ...] = ()
    predictor: Optional[Callable[..., Any]] = None
    save_names: Tuple[str, ...] = ()
    engine: str = "pymc"

    # ---- constructors ----
    @staticmethod
    def from_pymc(func: Callable[..., Any], *, name: Optional[str] = None) -> "Model":
        """Construct a Model from a callable `func(data)` declaring PyMC variables."""
        if not callable(func):
            raise TypeError("from_pymc expects a callable descriptor(data).")
        return Model(
            name=name or getattr(func, "__name__", "model"),
            descriptor=func,
            engine="pymc",
        )

    @staticmethod
    def from_jags(code: str, *, name: str = "jags model") -> "Model":
        """Construct a Model from a JAGS model string."""
        if not isinstance(code, str) or "model" not in code:
            raise TypeError("from_jags expects a JAGS model string ('model { ... }').")
        return Model(name=name, descriptor=code, engine="jags")

    # ---- metadata ----
    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params)

    @property
    def derived_names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self.derived)

    @property
    def predictor_names(self) -> Tuple[str, ...]:
        if self.predictor is None:
            return ()
        return infer_param_names(self.predictor)

    def default_parameters(self) -> Tuple[str, ...]:
        """Names retained when sample() is not given parameters_to_save."""
        if self.save_names:
            return self.save_names
        return self.param_names + self.derived_names

    # ---- evaluation ----
    def eval(
        self, x: Any, *, params: Optional[Mapping[str, Any]] = None, **kwargs
    ) -> Any:
        """Evaluate the predictor (mean function) at x with given parameters."""
        if self.predictor is None:
            raise ValueError(f"Model {self.name!r} has no predictor; use .with_predictor(...).")
        values: Dict[str, Any] = {}

        if params is not None:
            for k, v in params.items():
                if isinstance(v, ParamView):
                    values[k] = v.value
                else:
                    values[k] = v

        values.update(kwargs)

        names = self.predictor_names
        missing = [n for n in names if n not in values]
        if missing:
            raise TypeError(f"Missing parameter values for: {missing}")

        args = [x] + [values[n] for n in names]
        return self.predictor(*args)

    # ---- builders (pure; return new model) ----
    def prior(self, **priors: Tuple[Any, ...]) -> "Model":
        """Return a new Model with priors set (and parameters declared).

        Normal-family priors take precision: prior(alpha=("normal", 0, 1e-4)).
        """
        m = {p.name: p for p in self.params}
        order = list(self.param_names)
        derived = set(self.derived_names)
        for k, p in priors.items():
            if k in derived:
                raise ValueError(
                    f"{k!r} is deterministic and cannot carry a prior."
                )
            spec = m.get(k, ParameterSpec(name=k))
            m[k] = replace(spec, prior=normalize_prior(p))
            if k not in order:
                order.append(k)
        return replace(self, params=tuple(m[n] for n in order))

    def shape(self, **shapes: Any) -> "Model":
        """Return a new Model with array shapes for indexed parameters."""
        m = {p.name: p for p in self.params}
        for k, s in shapes.items():
            if k not in m:
                raise KeyError(k)
            shp = (int(s),) if np.isscalar(s) else tuple(int(v) for v in s)
            m[k] = replace(m[k], shape=shp)
        return replace(self, params=tuple(m[n] for n in self.param_names))

    def derive(
        self,
        name: str,
        func: Optional[Callable[[Mapping[str, Any]], Any]] = None,
        *,
        doc: str = "",
    ) -> "Model":
        """Return a new Model with a deterministic dependent.

        Without `func` the engine is expected to track the node itself
        (pm.Deterministic, JAGS `<-`). With `func` the harness computes it
        from each retained draw.
        """
        if name in self.param_names:
            raise ValueError(
                f"Derived name {name!r} conflicts with a prior-bearing parameter."
            )
        if name in self.derived_names:
            raise ValueError(f"Derived parameter {name!r} already declared.")
        return replace(
            self, derived=self.derived + (DerivedSpec(name=name, func=func, doc=doc),)
        )

    def with_predictor(self, fn: Callable[..., Any]) -> "Model":
        """Return a new Model with a mean function `fn(x, p1, ...)` for plots and bands."""
        infer_param_names(fn)
        return replace(self, predictor=fn)

    def save(self, *names: str) -> "Model":
        """Return a new Model with a default retained-parameter list."""
        if not names:
            raise ValueError("save() needs at least one parameter name.")
        return replace(self, save_names=tuple(names))

    def using(self, engine: str) -> "Model":
        """Return a new Model with a different default engine."""
        get_engine(engine)
        return replace(self, engine=engine)

    # ---- initial values ----
    def inits(
        self,
        n_chains: int,
        rng: Optional[np.random.Generator] = None,
        *,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """One initial-value mapping per chain, drawn from the priors."""
        return generate_inits(
            self.params + self.derived, n_chains, rng, overrides=overrides
        )

    # ---- sampling ----
    def sample(
        self,
        data: ModelData | Mapping[str, Any],
        *,
        inits: Optional[Sequence[Mapping[str, Any]]] = None,
        parameters_to_save: Optional[Sequence[str]] = None,
        n_iter: Optional[int] = None,
        n_burnin: Optional[int] = None,
        n_chains: Optional[int] = None,
        n_thin: Optional[int] = None,
        config: Optional[SamplerConfig] = None,
        engine: Optional[str] = None,
        engine_options: Optional[Dict[str, Any]] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> Run:
        """Run the engine and return a Run holding the normalized draws.

        When `inits` is None one mapping per chain is drawn from the priors.
        Given inits are forwarded as-is: a length that disagrees with the chain
        count, a missing data name or an out-of-support starting value fails
        inside the engine and the engine's exception propagates unchanged.
        """
        config = _resolve_config(config, n_iter, n_burnin, n_chains, n_thin)
        if rng is None:
            rng = np.random.default_rng()
        engine_name = engine or self.engine
        backend = get_engine(engine_name)

        if isinstance(data, ModelData):
            data_map = data.as_dict()
        elif isinstance(data, Mapping):
            data_map = dict(data)
        else:
            raise TypeError("data must be ModelData or a mapping of name -> values.")

        parameters = tuple(parameters_to_save or self.default_parameters())
        if not parameters:
            raise ValueError(
                "No parameters to retain: pass parameters_to_save or declare priors."
            )

        # Deterministic dependents with a function are computed here, not by the engine.
        local = [d for d in self.derived if d.func is not None and d.name in parameters]
        local_names = {d.name for d in local}
        engine_params = [p for p in parameters if p not in local_names]
        if local:
            # per-draw functions read the sampled parameters, retained or not
            for name in self.param_names:
                if name not in engine_params:
                    engine_params.append(name)

        if inits is None:
            init_seq = self.inits(config.n_chains, rng) if self.params else None
        else:
            init_seq = list(inits)

        logger.info(
            "sampling model %r with engine %r (%s)", self.name, engine_name, config.as_dict()
        )
        r = backend.sample(
            descriptor=self.descriptor,
            data=data_map,
            inits=init_seq,
            parameters=engine_params,
            config=config,
            options=dict(engine_options or {}),
            rng=rng,
        )

        bundle = DrawBundle.from_engine(r.draws, engine_params)
        if local:
            bundle = bundle.with_derived(local)
        bundle = bundle.select(parameters)

        results = Results(
            params=params_from_bundle(bundle, self.derived_names),
            bundle=bundle,
            config=config,
            engine=str(r.stats.get("engine", engine_name)),
            stats=dict(r.stats or {}),
        )
        return Run(
            model=self,
            results=results,
            data=data,
            inits=tuple(init_seq or ()),
        )


def _resolve_config(
    config: Optional[SamplerConfig],
    n_iter: Optional[int],
    n_burnin: Optional[int],
    n_chains: Optional[int],
    n_thin: Optional[int],
) -> SamplerConfig:
    """Merge an explicit SamplerConfig with n_* keyword overrides."""
    given = {
        k: v
        for k, v in (
            ("n_iter", n_iter),
            ("n_burnin", n_burnin),
            ("n_chains", n_chains),
            ("n_thin", n_thin),
        )
        if v is not None
    }
    if config is None:
        return SamplerConfig(**given)
    if given:
        return replace(config, **given)
    return config

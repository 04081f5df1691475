from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np


__all__ = [
    "ParameterSpec",
    "DerivedSpec",
    "ParamView",
    "ParamsView",
    "MultiParamView",
]


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    # ("normal", mu, tau) etc. Drives per-chain initial values.
    prior: Optional[Tuple[str, Tuple[Any, ...]]] = None
    # () for scalars; indexed arrays carry their shape
    shape: Tuple[int, ...] = ()


@dataclass(frozen=True)
class DerivedSpec:
    """Deterministic dependent of sampled parameters.

    Never carries a prior and never receives an initial value. `func`, when
    given, maps one draw (name -> value) to the derived value; engines that
    track the node themselves (pm.Deterministic, JAGS `<-`) leave it unused.
    """

    name: str
    func: Optional[Callable[[Mapping[str, Any]], Any]] = None
    doc: str = ""


@dataclass(frozen=True)
class ParamView:
    """Posterior summary of a single parameter (mean and sd over all draws)."""

    name: str
    value: Any
    stderr: Any = None
    derived: bool = False
    draws: Optional[np.ndarray] = None  # flat draws, shape (S, *shape)

    @property
    def sd(self) -> Any:
        return self.stderr

    def quantile(self, q: Any) -> Any:
        """Posterior quantile(s) of this parameter."""
        if self.draws is None:
            raise ValueError(f"No draws available for parameter {self.name!r}.")
        return np.quantile(self.draws, q, axis=0)

    def __getitem__(self, key: str) -> Any:
        if key in ("value", "mean"):
            return self.value
        if key in ("error", "stderr", "sd"):
            return self.stderr
        if key == "derived":
            return self.derived
        raise KeyError(key)


@dataclass(frozen=True)
class MultiParamView:
    """View over multiple parameters at once.

    value and stderr have shape (len(names),) for scalar parameters.
    """

    names: Tuple[str, ...]
    value: Any
    stderr: Any = None


class ParamsView(Mapping[str, ParamView]):
    """Mapping name -> ParamView, with rich indexing."""

    def __init__(self, items: Mapping[str, ParamView]):
        self._items = dict(items)
        self._names = tuple(self._items.keys())

    def __getitem__(self, key):  # type: ignore[override]
        if isinstance(key, str):
            return self._items[key]

        # ("alpha", "beta") or ["alpha", "beta"]
        if (
            isinstance(key, (tuple, list))
            and key
            and all(isinstance(k, str) for k in key)
        ):
            return self._multi_by_names(tuple(key))

        if isinstance(key, int):
            return self._items[self._names[key]]

        if isinstance(key, slice):
            return self._multi_by_names(self._names[key])

        raise KeyError(key)

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def items(self):
        return self._items.items()

    def as_dict(self) -> Dict[str, Any]:
        """Return name->value (extracting .value)."""
        return {k: v.value for k, v in self._items.items()}

    def _multi_by_names(self, names: Sequence[str]) -> MultiParamView:
        names = tuple(names)
        if not names:
            raise ValueError("MultiParamView requires at least one parameter name.")
        values = [np.asarray(self._items[n].value) for n in names]
        stderrs = [self._items[n].stderr for n in names]
        stderr_arr = None
        if all(e is not None for e in stderrs):
            stderr_arr = np.stack([np.asarray(e, dtype=float) for e in stderrs], axis=-1)
        return MultiParamView(
            names=names,
            value=np.stack(values, axis=-1),
            stderr=stderr_arr,
        )

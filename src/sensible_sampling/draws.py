"""Draw bundles and their normalized views.

A DrawBundle holds, for every retained parameter, an array shaped
(n_chains, n_draws, *shape). It offers two reshapes:

- a chain-indexed view (`chains`, `to_inference_data`) for convergence
  diagnostics and trace plots;
- a flat posterior table (`to_frame`) with one row per retained draw across
  all chains and one column per retained scalar. Chain identity is dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .params import DerivedSpec
from .util import element_labels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawBundle:
    draws: Mapping[str, np.ndarray]
    n_chains: int
    n_draws: int
    names: Tuple[str, ...] = field(default=())

    @staticmethod
    def from_engine(
        draws: Mapping[str, Any], parameters: Sequence[str]
    ) -> "DrawBundle":
        """Keep exactly the retained parameters and check their layout."""
        parameters = tuple(parameters)
        if not parameters:
            raise ValueError("At least one parameter must be retained.")
        if len(set(parameters)) != len(parameters):
            raise ValueError(f"Duplicate retained parameter names: {parameters}")

        missing = [n for n in parameters if n not in draws]
        if missing:
            raise KeyError(f"Engine returned no draws for: {missing}")

        kept: Dict[str, np.ndarray] = {}
        lead: Optional[Tuple[int, int]] = None
        for name in parameters:
            arr = np.array(draws[name], dtype=float)
            if arr.ndim < 2:
                raise ValueError(
                    f"Draws for {name!r} must have shape (n_chains, n_draws, ...); got {arr.shape}."
                )
            if lead is None:
                lead = (int(arr.shape[0]), int(arr.shape[1]))
            elif arr.shape[:2] != lead:
                raise ValueError(
                    f"Draws for {name!r} have (chains, draws)={arr.shape[:2]}, expected {lead}."
                )
            arr.setflags(write=False)
            kept[name] = arr

        dropped = sorted(set(draws) - set(parameters))
        if dropped:
            logger.debug("dropping non-retained engine variables: %s", dropped)

        first = kept[parameters[0]]
        return DrawBundle(
            draws=kept,
            n_chains=int(first.shape[0]),
            n_draws=int(first.shape[1]),
            names=parameters,
        )

    # ---- chain-indexed view ------------------------------------------------
    def chains(self, name: str) -> np.ndarray:
        """Draws of one parameter, shape (n_chains, n_draws, *shape)."""
        return self.draws[name]

    def shape_of(self, name: str) -> Tuple[int, ...]:
        return tuple(self.draws[name].shape[2:])

    def to_inference_data(self):
        """ArviZ InferenceData with a posterior group (chain, draw, ...)."""
        import arviz as az

        return az.from_dict(posterior={n: np.array(self.draws[n]) for n in self.names})

    # ---- flat view ---------------------------------------------------------
    @property
    def n_total(self) -> int:
        return self.n_chains * self.n_draws

    def flat(self, name: str) -> np.ndarray:
        """Draws of one parameter with chains stacked, shape (S, *shape)."""
        a = self.draws[name]
        return a.reshape((self.n_total,) + a.shape[2:])

    def columns(self) -> List[str]:
        cols: List[str] = []
        for n in self.names:
            cols.extend(element_labels(n, self.shape_of(n)))
        return cols

    def to_frame(self):
        """Flat posterior table: rows = retained draws, columns = retained scalars."""
        import pandas as pd

        blocks = []
        for n in self.names:
            a = self.flat(n)
            blocks.append(a.reshape((self.n_total, -1)))
        values = np.concatenate(blocks, axis=1) if blocks else np.empty((0, 0))
        return pd.DataFrame(values, columns=self.columns())

    def iter_draws(self) -> Iterable[Dict[str, Any]]:
        """Yield one name -> value mapping per retained draw (chains stacked)."""
        flat = {n: self.flat(n) for n in self.names}
        for s in range(self.n_total):
            yield {
                n: (float(a[s]) if a.ndim == 1 else a[s]) for n, a in flat.items()
            }

    # ---- derived -----------------------------------------------------------
    def with_derived(self, specs: Sequence[DerivedSpec]) -> "DrawBundle":
        """Return a new bundle with deterministic dependents computed per draw.

        Specs without a function, or whose name is already present, are skipped.
        """
        todo = [d for d in specs if d.func is not None and d.name not in self.draws]
        if not todo:
            return self

        out: Dict[str, np.ndarray] = dict(self.draws)
        for d in todo:
            values = [np.asarray(d.func(p), dtype=float) for p in self.iter_draws()]
            arr = np.stack(values, axis=0)
            arr = arr.reshape((self.n_chains, self.n_draws) + arr.shape[1:])
            arr.setflags(write=False)
            out[d.name] = arr
        return DrawBundle(
            draws=out,
            n_chains=self.n_chains,
            n_draws=self.n_draws,
            names=self.names + tuple(d.name for d in todo),
        )

    def select(self, names: Sequence[str]) -> "DrawBundle":
        """Sub-bundle with only `names` (in that order)."""
        return DrawBundle.from_engine({n: self.draws[n] for n in names}, names)

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

# Accept both python-style and R2jags-style option names.
_ALIASES = {
    "n_iter": "n_iter",
    "n.iter": "n_iter",
    "iterations": "n_iter",
    "n_burnin": "n_burnin",
    "n.burnin": "n_burnin",
    "burnin": "n_burnin",
    "n_chains": "n_chains",
    "n.chains": "n_chains",
    "chains": "n_chains",
    "n_thin": "n_thin",
    "n.thin": "n_thin",
    "thin": "n_thin",
}


@dataclass(frozen=True)
class SamplerConfig:
    """Run configuration for one engine invocation.

    n_iter counts every step of a chain, burn-in included. After dropping the
    first n_burnin steps, every n_thin-th step is retained, so each chain keeps
    (n_iter - n_burnin) // n_thin draws.

    The chain count is not checked against the initial values here; the
    engine rejects a mismatch when it is invoked.
    """

    n_iter: int = 2000
    n_burnin: int = 1000
    n_chains: int = 3
    n_thin: int = 1

    def __post_init__(self) -> None:
        for name in ("n_iter", "n_chains", "n_thin"):
            v = getattr(self, name)
            if isinstance(v, bool) or int(v) != v or int(v) < 1:
                raise ValueError(f"{name} must be a positive integer (got {v!r}).")
        b = self.n_burnin
        if isinstance(b, bool) or int(b) != b or int(b) < 0:
            raise ValueError(f"n_burnin must be a non-negative integer (got {b!r}).")
        if int(b) >= int(self.n_iter):
            raise ValueError(
                f"n_burnin ({b}) must be smaller than n_iter ({self.n_iter})."
            )
        # normalise numpy ints / integral floats
        for name in ("n_iter", "n_burnin", "n_chains", "n_thin"):
            object.__setattr__(self, name, int(getattr(self, name)))

    @property
    def n_post(self) -> int:
        """Post-burn-in steps per chain."""
        return self.n_iter - self.n_burnin

    @property
    def n_keep(self) -> int:
        """Retained draws per chain."""
        return self.n_post // self.n_thin

    @property
    def n_total(self) -> int:
        """Retained draws over all chains (rows of the posterior table)."""
        return self.n_keep * self.n_chains

    @staticmethod
    def from_mapping(options: Mapping[str, Any]) -> "SamplerConfig":
        """Build a config from a mapping, accepting n.iter-style aliases."""
        kw: Dict[str, Any] = {}
        for k, v in options.items():
            try:
                field_name = _ALIASES[k]
            except KeyError as e:
                raise KeyError(
                    f"Unknown sampler option {k!r}. Available: {tuple(_ALIASES)}"
                ) from e
            if field_name in kw:
                raise ValueError(f"Sampler option {field_name!r} given twice.")
            kw[field_name] = v
        return SamplerConfig(**kw)

    def as_dict(self) -> Dict[str, int]:
        return {
            "n_iter": self.n_iter,
            "n_burnin": self.n_burnin,
            "n_chains": self.n_chains,
            "n_thin": self.n_thin,
        }

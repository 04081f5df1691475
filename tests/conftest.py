import numpy as np
import pytest

from sensible_sampling.engines import EngineResult, register_engine, thin_draws


class FakeEngine:
    """Stand-in engine that scatters draws around each chain's initial values.

    Knows the variables listed in options["shapes"] (name -> shape) and
    rejects an init list whose length differs from the chain count.
    """

    name = "fake"

    def __init__(self):
        self.calls = []

    def sample(self, *, descriptor, data, inits, parameters, config, options, rng):
        self.calls.append(
            {
                "descriptor": descriptor,
                "data": data,
                "inits": inits,
                "parameters": list(parameters),
                "config": config,
                "options": dict(options),
            }
        )
        if inits is not None and len(inits) != config.n_chains:
            raise ValueError(
                f"Number of initval dicts ({len(inits)}) does not match "
                f"the number of chains ({config.n_chains})."
            )

        shapes = dict(options.get("shapes", {}))
        spread = float(options.get("spread", 0.1))
        draws = {}
        for name in parameters:
            if name not in shapes:
                raise KeyError(name)
            shape = tuple(shapes[name])
            raw = np.empty((config.n_chains, config.n_iter) + shape)
            for c in range(config.n_chains):
                start = 0.0 if inits is None else np.asarray(inits[c].get(name, 0.0))
                raw[c] = start + rng.normal(0.0, spread, size=(config.n_iter,) + shape)
            draws[name] = thin_draws(raw[:, config.n_burnin :], config.n_thin)
        return EngineResult(draws=draws, stats={"engine": self.name})


@pytest.fixture
def fake_engine():
    engine = FakeEngine()
    register_engine("fake", engine, replace=True)
    return engine

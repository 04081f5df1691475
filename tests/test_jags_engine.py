import numpy as np
import pytest

from sensible_sampling.config import SamplerConfig
from sensible_sampling.engines import get_engine
from sensible_sampling.engines.jags_engine import _chain_inits, _with_chain_rng
from sensible_sampling.models import linear_regression
from sensible_sampling.simulate import simulate_linear


def test_chain_rng_is_added_once():
    out = _with_chain_rng({"alpha": 1.0}, 123, 1)
    assert out[".RNG.name"] == "base::Marsaglia-Multicarry"
    assert out[".RNG.seed"] == 123

    kept = _with_chain_rng({"alpha": 1.0, ".RNG.seed": 7}, 123, 0)
    assert kept[".RNG.seed"] == 7


def test_chains_are_seeded_without_inits():
    a = _chain_inits(None, 3, np.random.default_rng(0))
    b = _chain_inits(None, 3, np.random.default_rng(0))

    assert len(a) == 3
    assert a == b
    assert len({c[".RNG.seed"] for c in a}) == 3
    assert all(set(c) == {".RNG.name", ".RNG.seed"} for c in a)


def test_given_inits_keep_their_values_and_count():
    inits = _chain_inits([{"alpha": 1.0}, {"alpha": 2.0}], 3, np.random.default_rng(0))

    assert len(inits) == 2
    assert [float(c["alpha"]) for c in inits] == [1.0, 2.0]
    assert inits[0][".RNG.seed"] != inits[1][".RNG.seed"]


def test_jags_rejects_callable_descriptor():
    with pytest.raises(TypeError, match="JAGS model string"):
        get_engine("jags").sample(
            descriptor=lambda data: None,
            data={},
            inits=None,
            parameters=["alpha"],
            config=SamplerConfig(),
            options={},
            rng=np.random.default_rng(0),
        )


def test_jags_linear_regression():
    pytest.importorskip("pyjags")
    data = simulate_linear(100, rng=np.random.default_rng(0))
    run = linear_regression(flavour="jags").sample(
        data,
        n_iter=3000,
        n_burnin=1000,
        n_chains=3,
        n_thin=3,
        engine_options={"adapt": 500},
        rng=np.random.default_rng(1),
    )

    assert run.bundle.n_chains == 3
    assert run.bundle.n_draws == 666
    assert run.results.table.shape == (1998, 4)
    assert run.results["alpha"].value == pytest.approx(15.0, abs=3.0)
    assert run.results["beta"].value == pytest.approx(3.0, abs=1.0)

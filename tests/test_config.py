import numpy as np
import pytest

from sensible_sampling import SamplerConfig


def test_retained_draw_counts():
    cfg = SamplerConfig(n_iter=20000, n_burnin=5000, n_chains=3, n_thin=3)

    assert cfg.n_post == 15000
    assert cfg.n_keep == 5000
    assert cfg.n_total == 15000


def test_retained_draws_round_down():
    cfg = SamplerConfig(n_iter=300, n_burnin=100, n_chains=2, n_thin=3)
    assert cfg.n_keep == 66
    assert cfg.n_total == 132


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n_iter": 0},
        {"n_chains": 0},
        {"n_thin": 0},
        {"n_burnin": -1},
        {"n_iter": 100, "n_burnin": 100},
        {"n_iter": 10.5},
        {"n_chains": True},
    ],
)
def test_invalid_configs(kwargs):
    with pytest.raises(ValueError):
        SamplerConfig(**kwargs)


def test_numpy_ints_are_normalised():
    cfg = SamplerConfig(n_iter=np.int64(50), n_burnin=10.0)
    assert type(cfg.n_iter) is int
    assert type(cfg.n_burnin) is int


def test_from_mapping_accepts_aliases():
    cfg = SamplerConfig.from_mapping(
        {"n.iter": 1000, "n.burnin": 200, "n.chains": 4, "thin": 2}
    )
    assert cfg.as_dict() == {"n_iter": 1000, "n_burnin": 200, "n_chains": 4, "n_thin": 2}


def test_from_mapping_errors():
    with pytest.raises(KeyError):
        SamplerConfig.from_mapping({"n_warmup": 10})
    with pytest.raises(ValueError, match="twice"):
        SamplerConfig.from_mapping({"n_iter": 100, "iterations": 200})

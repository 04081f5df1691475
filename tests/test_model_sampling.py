import numpy as np
import pytest

from sensible_sampling import Model, ModelData, SamplerConfig
from sensible_sampling.engines import available_engines, get_engine, register_engine
from sensible_sampling.models import linear_regression, poisson_glm
from sensible_sampling.simulate import simulate_linear

LINEAR_SHAPES = {"alpha": (), "beta": (), "sigma": (), "tau": ()}
POISSON_SHAPES = {"alpha": (), "beta": ()}
POISSON_DATA = {"x": np.arange(5.0), "y": np.arange(5), "N": 5}


def _linear():
    return linear_regression().using("fake")


def _data():
    return simulate_linear(40, rng=np.random.default_rng(0))


def test_sample_returns_retained_draws(fake_engine):
    run = _linear().sample(
        _data(),
        n_iter=300,
        n_burnin=100,
        n_chains=2,
        n_thin=3,
        engine_options={"shapes": LINEAR_SHAPES},
        rng=np.random.default_rng(1),
    )

    bundle = run.bundle
    assert bundle.names == ("alpha", "beta", "sigma", "tau")
    assert bundle.n_chains == 2
    assert bundle.n_draws == 66
    assert run.results.table.shape == (132, 4)
    assert run.results.engine == "fake"

    call = fake_engine.calls[-1]
    assert call["parameters"] == ["alpha", "beta", "sigma", "tau"]
    assert call["data"]["N"] == 40
    assert call["config"] == SamplerConfig(300, 100, 2, 3)


def test_generated_inits_skip_deterministic_nodes(fake_engine):
    run = _linear().sample(
        _data(),
        n_iter=50,
        n_burnin=10,
        n_chains=3,
        engine_options={"shapes": LINEAR_SHAPES},
        rng=np.random.default_rng(2),
    )

    inits = fake_engine.calls[-1]["inits"]
    assert len(inits) == 3
    assert all(set(c) == {"alpha", "beta", "sigma"} for c in inits)
    assert len({c["alpha"] for c in inits}) == 3
    assert run.inits == tuple(inits)


def test_given_inits_are_forwarded_unchanged(fake_engine):
    given = [
        {"alpha": 15.0, "beta": 3.0, "sigma": 4.0},
        {"alpha": 10.0, "beta": 1.0, "sigma": 2.0},
    ]
    run = _linear().sample(
        _data(),
        inits=given,
        n_iter=200,
        n_burnin=100,
        n_chains=2,
        engine_options={"shapes": LINEAR_SHAPES},
        rng=np.random.default_rng(3),
    )

    forwarded = fake_engine.calls[-1]["inits"]
    assert forwarded == given
    assert forwarded[0] is given[0]
    chain_means = run.bundle.chains("alpha").mean(axis=1)
    np.testing.assert_allclose(chain_means, [15.0, 10.0], atol=0.1)


def test_init_count_mismatch_is_left_to_the_engine(fake_engine):
    with pytest.raises(ValueError, match="does not match the number of chains"):
        _linear().sample(
            _data(),
            inits=[{"alpha": 0.0}, {"alpha": 1.0}],
            n_iter=50,
            n_burnin=10,
            n_chains=3,
            engine_options={"shapes": LINEAR_SHAPES},
        )


def test_engine_errors_propagate(fake_engine):
    with pytest.raises(KeyError):
        _linear().sample(
            _data(),
            parameters_to_save=["alpha", "gamma"],
            n_iter=50,
            n_burnin=10,
            engine_options={"shapes": LINEAR_SHAPES},
        )


def test_parameters_to_save_limits_output(fake_engine):
    run = _linear().sample(
        _data(),
        parameters_to_save=["beta", "alpha"],
        n_iter=50,
        n_burnin=10,
        n_chains=2,
        engine_options={"shapes": LINEAR_SHAPES},
    )

    assert run.bundle.names == ("beta", "alpha")
    assert list(run.results.table.columns) == ["beta", "alpha"]
    assert fake_engine.calls[-1]["parameters"] == ["beta", "alpha"]


def test_saved_names_become_the_default(fake_engine):
    run = _linear().save("alpha").sample(
        _data(), n_iter=30, n_burnin=10, engine_options={"shapes": LINEAR_SHAPES}
    )
    assert run.bundle.names == ("alpha",)


def test_derived_with_function_is_computed_from_draws(fake_engine):
    model = poisson_glm().using("fake")
    run = model.sample(
        {"x": np.arange(5.0), "y": np.arange(5), "N": 5},
        n_iter=60,
        n_burnin=20,
        n_chains=2,
        engine_options={"shapes": {"alpha": (), "beta": ()}},
    )

    assert fake_engine.calls[-1]["parameters"] == ["alpha", "beta"]
    assert run.bundle.names == ("alpha", "beta", "rate_ratio")
    np.testing.assert_allclose(
        run.bundle.chains("rate_ratio"), np.exp(run.bundle.chains("beta"))
    )
    assert run.results["rate_ratio"].derived
    assert not run.results["beta"].derived


def test_derived_inputs_are_sampled_even_when_not_retained(fake_engine):
    run = poisson_glm().using("fake").sample(
        POISSON_DATA,
        parameters_to_save=["alpha", "rate_ratio"],
        n_iter=60,
        n_burnin=20,
        n_chains=2,
        engine_options={"shapes": POISSON_SHAPES},
    )

    assert fake_engine.calls[-1]["parameters"] == ["alpha", "beta"]
    assert run.bundle.names == ("alpha", "rate_ratio")
    assert list(run.results.table.columns) == ["alpha", "rate_ratio"]
    assert np.all(run.bundle.chains("rate_ratio") > 0.0)


def test_derived_only_retained_list(fake_engine):
    run = poisson_glm().using("fake").save("rate_ratio").sample(
        POISSON_DATA,
        n_iter=60,
        n_burnin=20,
        n_chains=2,
        engine_options={"shapes": POISSON_SHAPES},
    )

    assert fake_engine.calls[-1]["parameters"] == ["alpha", "beta"]
    assert list(run.results.table.columns) == ["rate_ratio"]
    assert run.results.table.shape == (80, 1)


def test_results_params_are_posterior_means(fake_engine):
    run = _linear().sample(
        _data(),
        inits=[{"alpha": 15.0, "beta": 3.0, "sigma": 4.0}] * 2,
        n_iter=400,
        n_burnin=100,
        n_chains=2,
        engine_options={"shapes": LINEAR_SHAPES},
    )
    res = run.results

    flat = run.bundle.flat("alpha")
    assert res["alpha"].value == pytest.approx(flat.mean())
    assert res["alpha"].sd == pytest.approx(flat.std(ddof=1))
    assert res["alpha"]["mean"] == res["alpha"].value
    assert res["alpha"].quantile(0.5) == pytest.approx(np.median(flat))
    assert res["tau"].derived

    multi = res.params["alpha", "beta"]
    assert multi.value.shape == (2,)
    assert res.params[0].name == "alpha"
    assert set(res.params.as_dict()) == {"alpha", "beta", "sigma", "tau"}


def test_summary_lists_every_parameter(fake_engine):
    pytest.importorskip("arviz")
    run = _linear().sample(
        _data(), n_iter=100, n_burnin=50, n_chains=2, engine_options={"shapes": LINEAR_SHAPES}
    )
    text = run.results.summary()

    assert "engine='fake'" in text
    for name in ("alpha", "beta", "sigma", "tau"):
        assert name in text
    assert "(derived)" in text
    assert "HDI" in text


def test_predict_and_band_use_the_predictor(fake_engine):
    data = _data()
    run = _linear().sample(
        data,
        inits=[{"alpha": 15.0, "beta": 3.0, "sigma": 4.0}] * 2,
        n_iter=300,
        n_burnin=100,
        n_chains=2,
        engine_options={"shapes": LINEAR_SHAPES},
    )

    x = np.asarray(data["x"])
    np.testing.assert_allclose(run.predict(), 15.0 + 3.0 * x, atol=0.3)

    xg = np.linspace(0.0, 10.0, 11)
    band = run.band(xg, nsamples=200, rng=np.random.default_rng(4))
    assert band.low.shape == xg.shape
    assert np.all(band.low <= band.median)
    assert np.all(band.median <= band.high)

    with pytest.raises(ValueError):
        run.band(xg, level=1.0, conf_int=(0.1, 0.9))


def test_config_and_keyword_overrides_merge(fake_engine):
    run = _linear().sample(
        _data(),
        config=SamplerConfig(n_iter=100, n_burnin=40, n_chains=2),
        n_thin=2,
        engine_options={"shapes": LINEAR_SHAPES},
    )
    assert run.results.config == SamplerConfig(100, 40, 2, 2)
    assert run.bundle.n_draws == 30


def test_sample_rejects_unusable_data(fake_engine):
    with pytest.raises(TypeError):
        _linear().sample([1, 2, 3], engine_options={"shapes": LINEAR_SHAPES})


def test_mapping_data_is_accepted(fake_engine):
    data = ModelData.from_arrays(x=[1.0, 2.0], y=[3.0, 4.0])
    run = _linear().sample(
        dict(data.values), n_iter=20, n_burnin=10, engine_options={"shapes": LINEAR_SHAPES}
    )
    assert fake_engine.calls[-1]["data"]["N"] == 2
    assert run._data_values()["N"] == 2
    with pytest.raises(ValueError):
        run.predict()


def test_model_builder_rules():
    model = linear_regression()

    assert model.param_names == ("alpha", "beta", "sigma")
    assert model.derived_names == ("tau",)
    assert model.predictor_names == ("alpha", "beta")
    assert model.default_parameters() == ("alpha", "beta", "sigma", "tau")
    assert model.eval(2.0, alpha=1.0, beta=0.5) == pytest.approx(2.0)

    with pytest.raises(ValueError, match="deterministic"):
        model.prior(tau=("gamma", 0.001, 0.001))
    with pytest.raises(ValueError):
        model.derive("alpha")
    with pytest.raises(ValueError):
        model.derive("tau")
    with pytest.raises(KeyError):
        model.shape(gamma=3)
    with pytest.raises(TypeError):
        model.eval(1.0, alpha=1.0)

    shaped = Model.from_pymc(lambda data: None, name="m").prior(b=("normal", 0, 1)).shape(b=3)
    assert shaped.params[0].shape == (3,)
    assert shaped.inits(2, np.random.default_rng(0))[0]["b"].shape == (3,)


def test_model_inits_respect_overrides():
    inits = linear_regression().inits(3, np.random.default_rng(0), overrides={"sigma": 2.0})
    assert [c["sigma"] for c in inits] == [2.0, 2.0, 2.0]


def test_descriptor_constructors_validate_input():
    with pytest.raises(TypeError):
        Model.from_pymc("not callable")
    with pytest.raises(TypeError):
        Model.from_jags("y ~ dnorm(0, 1)")
    with pytest.raises(ValueError):
        linear_regression(flavour="stan")

    jags = linear_regression(flavour="jags", prior_tau=0.001)
    assert jags.engine == "jags"
    assert "dnorm(0, 0.001)" in jags.descriptor
    assert "{prior_tau}" not in jags.descriptor


def test_engine_registry():
    assert {"pymc", "jags"} <= set(available_engines())
    assert get_engine("pymc").name == "pymc"

    with pytest.raises(ValueError, match="Unknown engine"):
        get_engine("stan")
    with pytest.raises(ValueError, match="already registered"):
        register_engine("pymc", get_engine("pymc"))
    with pytest.raises(TypeError):
        register_engine("broken", object())
    with pytest.raises(ValueError):
        linear_regression().using("stan")


def test_pymc_engine_rejects_model_strings():
    with pytest.raises(TypeError, match="callable"):
        get_engine("pymc").sample(
            descriptor="model { }",
            data={},
            inits=None,
            parameters=["alpha"],
            config=SamplerConfig(),
            options={},
            rng=np.random.default_rng(0),
        )

import numpy as np
import matplotlib.pyplot as plt
import pymc as pm

from sensible_sampling import Model, ModelData
from sensible_sampling.diagnostics import effective_sample_size, hdi, posterior_mode
from sensible_sampling.util import precision_to_sd, sd_to_precision


def two_predictor_regression(data):
    """y ~ Normal(b0 + b1 * x1 + b2 * x2, tau), precision-parameterised."""
    b0 = pm.Normal("b0", mu=0.0, tau=1e-4)
    b1 = pm.Normal("b1", mu=0.0, tau=1e-4)
    b2 = pm.Normal("b2", mu=0.0, tau=1e-4)
    tau = pm.Gamma("tau", alpha=0.1, beta=0.1)
    pm.Normal("y", mu=b0 + b1 * data["x1"] + b2 * data["x2"], tau=tau, observed=data["y"])


model = (
    Model.from_pymc(two_predictor_regression, name="two predictors")
    .prior(
        b0=("normal", 0.0, 1e-4),
        b1=("normal", 0.0, 1e-4),
        b2=("normal", 0.0, 1e-4),
        tau=("gamma", 0.1, 0.1),
    )
    # sd is recovered from the sampled precision; it never gets a prior or an init.
    .derive("sd", lambda p: 1.0 / np.sqrt(p["tau"]), doc="Residual sd")
)

rng = np.random.default_rng(7)
n = 80
x1 = rng.normal(0.0, 1.0, size=n)
x2 = rng.uniform(-2.0, 2.0, size=n)
sd_true = 0.5
y = 1.0 + 2.0 * x1 - 0.7 * x2 + rng.normal(0.0, sd_true, size=n)

data = ModelData.from_arrays(x1=x1, x2=x2, y=y)

# Pin tau's starting value on every chain; the others are drawn from their priors.
inits = model.inits(4, rng, overrides={"tau": 1.0})

run = model.sample(
    data,
    inits=inits,
    n_iter=3000,
    n_burnin=1000,
    n_chains=4,
    n_thin=2,
    rng=rng,
)
bundle = run.bundle

print(run.results.summary())
print("ESS:", effective_sample_size(bundle))
print("94% HDI:", hdi(bundle, prob=0.94))
print("mode of b1:", posterior_mode(bundle.flat("b1")))
print("true tau:", sd_to_precision(sd_true), "posterior sd from tau:", precision_to_sd(run.results["tau"].value))

run.plot_trace(var_names=["b0", "b1", "b2", "sd"])
plt.show()

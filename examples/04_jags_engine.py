import numpy as np

from sensible_sampling import models
from sensible_sampling.simulate import simulate_linear

# Same regression, written as a JAGS model string and run through pyjags.
import pyjags  # noqa: F401  (optional dependency)

rng = np.random.default_rng(11)
data = simulate_linear(100, rng=rng)

model = models.linear_regression(flavour="jags")
print(model.descriptor)

run = model.sample(
    data,
    engine="jags",
    n_iter=6000,
    n_burnin=1000,
    n_chains=3,
    n_thin=5,
    engine_options={"adapt": 500},
    rng=rng,
)
print(run.results.summary())
print(run.results.table.shape)

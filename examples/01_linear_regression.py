import numpy as np
import matplotlib.pyplot as plt

from sensible_sampling import models
from sensible_sampling.simulate import simulate_linear


rng = np.random.default_rng(42)

# 100 observations from y = 15 + 3 x + Normal(0, 4)
data = simulate_linear(100, intercept=15.0, slope=3.0, sd=4.0, rng=rng)
truth = data.meta["truth"]

model = models.linear_regression()

# One set of starting values per chain, each drawn from the priors.
inits = model.inits(3, rng)
print("inits:", inits)

run = model.sample(
    data,
    inits=inits,
    parameters_to_save=["alpha", "beta", "sigma", "tau"],
    n_iter=20000,
    n_burnin=5000,
    n_chains=3,
    n_thin=3,
    rng=rng,
)
res = run.results
print(res.summary(digits=4))

# Chains should overlap and R-hat sit near 1.0.
run.diagnose(threshold=1.1)

table = res.table
print(table.describe())
print("true precision:", truth["tau"], "posterior mean tau:", res["tau"].value)

run.plot_trace()
run.plot_posterior(ref_val=truth)

fig, ax = run.plot(show_params=True)
ax.legend()
plt.show()

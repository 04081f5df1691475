import numpy as np
import matplotlib.pyplot as plt

from sensible_sampling import models
from sensible_sampling.simulate import simulate_poisson


rng = np.random.default_rng(3)

# Counts (e.g. individuals per survey plot) rising with a habitat covariate.
data = simulate_poisson(120, alpha=0.5, beta=0.3, rng=rng).with_labels(
    x_label="habitat covariate", y_label="count"
)
truth = data.meta["truth"]

model = models.poisson_glm()
run = model.sample(
    data,
    n_iter=4000,
    n_burnin=1000,
    n_chains=3,
    n_thin=2,
    rng=rng,
)
res = run.results
print(res.summary())
run.diagnose()

print("rate ratio per unit x:", res["rate_ratio"].value, "(true", truth["rate_ratio"], ")")

fig, ax = run.plot(show_params=True)
ax.legend()
run.plot_posterior(var_names=["alpha", "beta"], ref_val=truth)
plt.show()

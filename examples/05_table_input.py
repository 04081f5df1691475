import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from sensible_sampling import ModelData, models

# Write a small CSV to stand in for a field data file.
rng = np.random.default_rng(5)
elevation = rng.uniform(0.0, 3.0, size=60)
richness = rng.poisson(np.exp(1.2 - 0.4 * elevation))

with tempfile.TemporaryDirectory() as tmp:
    path = Path(tmp) / "plots.csv"
    pd.DataFrame({"elevation": elevation, "richness": richness}).to_csv(path, index=False)

    # Loaded once; columns renamed to the names the descriptor uses.
    data = ModelData.from_table(
        path,
        rename={"elevation": "x", "richness": "y"},
        predictor="x",
        response="y",
        label="survey plots",
    )

print("N =", data["N"], "source:", data.meta["source"])

run = models.poisson_glm().sample(
    data, n_iter=2000, n_burnin=500, n_chains=2, rng=rng
)
print(run.results.summary())

"""
Thread Scaling Analysis
=======================

Throughput and parallel efficiency of the Numba backend relative to one
thread, with the NumPy backend as a horizontal reference.
"""

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from utils import datatools, plotting  # noqa: F401  Apply scientific style
from utils.plotting import palettes

data_dir = datatools.get_data_dir()
fig_dir = datatools.get_figures_dir()

scaling_file = data_dir / "thread_scaling.parquet"
if not scaling_file.exists():
    raise FileNotFoundError(f"{scaling_file} not found; run compute_scaling.py first")

df = pd.read_parquet(scaling_file)
numba = df[df["backend"] == "numba"].copy()
numpy_baseline = df[df["backend"] == "numpy"].set_index("n")["mlups"].to_dict()

# Efficiency relative to the single-thread run of the same size
single = numba[numba["num_threads"] == 1].set_index("n")["mlups"]
numba["speedup"] = numba["mlups"] / numba["n"].map(single)
numba["efficiency"] = numba["speedup"] / numba["num_threads"] * 100

# %%
# Throughput and efficiency
# -------------------------

fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

sns.lineplot(data=numba, x="num_threads", y="mlups", hue="n", marker="o", palette="crest", ax=ax1)
for n, mlups in numpy_baseline.items():
    ax1.axhline(mlups, linestyle="--", alpha=0.4, color=palettes.SCALING["ideal"])
ax1.set_xlabel("Numba threads")
ax1.set_ylabel("Throughput (Mlup/s)")
ax1.set_title("Parallel path throughput (dashed: NumPy)")

sns.lineplot(data=numba, x="num_threads", y="efficiency", hue="n", marker="o", palette="crest", ax=ax2)
ax2.axhline(100, color=palettes.SCALING["ideal"], linestyle="--", alpha=0.5, label="Ideal")
ax2.set_xlabel("Numba threads")
ax2.set_ylabel("Parallel efficiency (%)")
ax2.set_title("Efficiency vs one thread")

fig.savefig(fig_dir / "thread_scaling.pdf")
fig.savefig(fig_dir / "thread_scaling.png", dpi=300)
print(f"Saved: {fig_dir / 'thread_scaling.pdf'}")

if not df["passed"].all():
    print("Warning: some runs failed cross-validation")
    print(df[~df["passed"]])

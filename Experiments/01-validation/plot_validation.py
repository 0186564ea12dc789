#!/usr/bin/env python3
"""
Cross-Validation Analysis
=========================

Plots the final wave field of the sequential and parallel paths and the
per-site absolute difference for every backend found in the validation data.

**Symmetry:**
  The unit peak splits into two pulses travelling in opposite directions;
  the field stays symmetric about the peak index.
"""

# %%
# Setup
# -----

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from Wave1D.io import load_hdf5
from utils import datatools, plotting  # noqa: F401  Apply scientific style
from utils.plotting import build_parameter_string, format_scientific_latex, palettes

repo_root = datatools.get_repo_root()
h5_dir = repo_root / "data" / "01-validation" / "validation_h5"
h5_files = sorted(h5_dir.glob("validation_*.h5"))

if not h5_files:
    raise FileNotFoundError(f"No validation HDF5 files found in {h5_dir}")

print(f"Found {len(h5_files)} validation files")

results = [load_hdf5(f) for f in h5_files]

# %%
# Final fields
# ------------
#
# Long-format frame: one row per (backend, path, site).

frames = []
for r in results:
    x = np.arange(r["n"])
    frames.append(pd.DataFrame({"backend": r["backend_name"], "path": "sequential", "j": x, "u": r["sequential_curr"]}))
    if "parallel_curr" in r:
        frames.append(pd.DataFrame({"backend": r["backend_name"], "path": "parallel", "j": x, "u": r["parallel_curr"]}))
df_fields = pd.concat(frames, ignore_index=True)

g = sns.relplot(
    data=df_fields,
    x="j",
    y="u",
    hue="path",
    style="path",
    col="backend",
    kind="line",
    palette=palettes.PATHS,
    height=4,
    aspect=1.5,
)
g.set_axis_labels("Lattice index $j$", "$u$")
g.set_titles("{col_name} backend")

r0 = results[0]
params_str = build_parameter_string({"n": r0["n"], "p": r0["p"], "steps": r0["num_steps"]})
g.figure.suptitle(f"Sequential vs Parallel ({params_str})", y=1.03)

fig_dir = datatools.get_figures_dir()
g.savefig(fig_dir / "validation_fields.pdf")
g.savefig(fig_dir / "validation_fields.png", dpi=300)
print(f"\nSaved: {fig_dir / 'validation_fields.pdf'}")

# %%
# Per-site differences
# --------------------

fig, ax = plt.subplots(figsize=(8, 5))

for color, r in zip(palettes.get_categorical(len(results)), results):
    if "parallel_curr" not in r:
        print(f"  {r['backend_name']}: no parallel result ({r.get('backend_error')})")
        continue
    diff = np.abs(r["sequential_curr"] - r["parallel_curr"])
    ax.semilogy(np.arange(r["n"]), np.maximum(diff, np.finfo(float).tiny), color=color, label=r["backend_name"])

ax.axhline(r0["tolerance"], color="k", linestyle=":", label=f"tolerance ${format_scientific_latex(r0['tolerance'])}$")
ax.set_xlabel("Lattice index $j$")
ax.set_ylabel(r"$|u_{seq} - u_{par}|$")
ax.set_title("Absolute difference of the final level")
ax.legend(loc="best")

fig.savefig(fig_dir / "validation_diff.pdf")
fig.savefig(fig_dir / "validation_diff.png", dpi=300)
print(f"Saved: {fig_dir / 'validation_diff.pdf'}")

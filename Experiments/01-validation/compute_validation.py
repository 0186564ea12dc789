"""
Generate Cross-Validation Data
==============================

Runs the sequential reference and the parallel two-stage schedule from the
same unit-peak initial condition for every shared-memory backend, and stores
both final states in HDF5.

**Equivalence:**
  The parallel path dispatches stage A (u0 -> u1) and stage B (u1 -> u0)
  alternately; the sequential path sweeps once per step and swaps buffers.
  Both evaluate the same recurrence, so the final fields must agree.
"""

# %%
# Imports
# -------

from Wave1D import SimulationParams, Simulator
from Wave1D.io import save_hdf5
from utils import datatools

# %%
# Test Parameters
# ---------------

n = 1024
p = 0.05
num_steps = 2000
backends = ["numpy", "numba"]

# %%
# Initialize Results Storage
# --------------------------

data_dir = datatools.get_data_dir()
h5_dir = data_dir / "validation_h5"
h5_dir.mkdir(parents=True, exist_ok=True)

print("Cross-validation: sequential vs parallel")
print("=" * 60)

# %%
# Run each backend
# ----------------

for backend in backends:
    print(f"\n{backend} backend (n={n}, p={p}, steps={num_steps})")
    print("-" * 60)

    params = SimulationParams(n=n, p=p, num_steps=num_steps, backend=backend)
    result = Simulator(params).run()
    comparison = result.compare()

    h5_file = h5_dir / f"validation_{backend}_n{n}.h5"
    save_hdf5(h5_file, result, comparison)

    print(f"  Sequential: {result.sequential_metrics.wall_time:.3f}s")
    if result.parallel_metrics is not None:
        print(f"  Parallel:   {result.parallel_metrics.wall_time:.3f}s")
    print(f"  Max |diff|: {comparison.max_abs_diff:.3e} ({'PASS' if comparison.passed else 'FAIL'})")
    print(f"  Saved to: {h5_file}")

# %%
# Summary
# -------

print("\n" + "=" * 60)
print("Validation data generated successfully!")
print(f"HDF5 files: {h5_dir}")
print("=" * 60)

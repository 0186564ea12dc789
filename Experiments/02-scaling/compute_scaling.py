"""
Thread Scaling Data
===================

Benchmarks the parallel path on the Numba backend for a range of thread
counts and problem sizes, with the NumPy backend as a baseline. Every run is
cross-validated against the sequential reference.

"""

import pandas as pd

from Wave1D import SimulationParams, Simulator
from utils import datatools

# %%
# Test Configuration
# ------------------
#
# p is well inside the CFL limit so long runs stay bounded.

problem_sizes = [2**14, 2**16, 2**18]
p = 0.25
num_steps = 1000
thread_counts = [1, 2, 4, 8]

# %%
# Initialize Storage
# ------------------

data_dir = datatools.get_data_dir()
records = []


def run(n: int, backend: str, numba_threads: int = None):
    params = SimulationParams(
        n=n, p=p, num_steps=num_steps, backend=backend, numba_threads=numba_threads
    )
    result = Simulator(params).run()
    comparison = result.compare()
    par = result.parallel_metrics
    records.append({
        "n": n,
        "backend": backend,
        "num_threads": par.observed_numba_threads or 0,
        "wall_time": par.wall_time,
        "compute_time": par.total_compute_time,
        "mlups": par.mlups,
        "bandwidth_gb_s": par.bandwidth_gb_s,
        "sequential_wall_time": result.sequential_metrics.wall_time,
        "passed": comparison.passed,
    })
    print(f"  {backend:6s} threads={records[-1]['num_threads']:2d}  {par.mlups:8.1f} Mlup/s  passed={comparison.passed}")


# %%
# NumPy Baseline and Numba Threads
# --------------------------------

for n in problem_sizes:
    print(f"\nn={n}")
    print("-" * 60)
    run(n, "numpy")
    for threads in thread_counts:
        run(n, "numba", numba_threads=threads)

# %%
# Save Results
# ------------

df = pd.DataFrame(records)
output_path = data_dir / "thread_scaling.parquet"
df.to_parquet(output_path, index=False)
print(f"\nSaved to: {output_path}")

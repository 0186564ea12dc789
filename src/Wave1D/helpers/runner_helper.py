"""MPI worker - invoked via: mpiexec -n X python -m Wave1D.helpers.runner_helper '{config}'"""

import json
import logging
import sys

from mpi4py import MPI

from Wave1D import SimulationParams, Simulator
from Wave1D.io import save_hdf5

logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s")

config = json.loads(sys.argv[1])
comm = MPI.COMM_WORLD

params = SimulationParams(
    n=config["n"],
    p=config["p"],
    num_steps=config["num_steps"],
    tolerance=config.get("tolerance", 1e-9),
    backend="mpi",
    use_numba=config.get("use_numba", True),
    numba_threads=config.get("numba_threads"),
    n_ranks=comm.Get_size(),
)

simulator = Simulator(
    params,
    backend_options={"comm": comm, "use_numba": config.get("use_numba", False)},
)
result = simulator.run()
comparison = result.compare()

# Save results to HDF5 (rank 0 only)
output_path = config.get("output")
if output_path and comm.Get_rank() == 0:
    save_hdf5(output_path, result, comparison)

if comm.Get_rank() == 0:
    # Just print the path - runner.py will load the HDF5
    print(f"RESULT:{output_path}")

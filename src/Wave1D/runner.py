"""Run a wave simulation via mpiexec subprocess."""

import json
import os
import subprocess
import sys
import tempfile
from pathlib import Path

from .io import load_hdf5


def run_simulation(n: int, p: float, num_steps: int, n_ranks: int = 1, output: str = None, **kwargs) -> dict:
    """Run the simulation with the MPI backend on n_ranks processes.

    Parameters
    ----------
    n : int
        Lattice size
    p : float
        Squared Courant number
    num_steps : int
        Half-step count (even)
    n_ranks : int
        Number of MPI ranks
    output : str, optional
        Path to save HDF5 results (uses temp file if not provided)
    **kwargs
        Extra options: tolerance, use_numba, numba_threads

    Returns
    -------
    dict
        Results with config, metrics, comparison and final arrays
        (or 'error' key on failure)
    """
    # Use temp file if no output path specified
    use_temp = output is None
    if use_temp:
        tmp = tempfile.NamedTemporaryFile(suffix=".h5", delete=False)
        output = tmp.name
        tmp.close()

    config = {"n": n, "p": p, "num_steps": num_steps, "output": output, **kwargs}
    cmd = [
        "mpiexec", "-n", str(n_ranks),
        sys.executable, "-m", "Wave1D.helpers.runner_helper", json.dumps(config),
    ]

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=600, env=_worker_env())
    except FileNotFoundError:
        return {"error": "mpiexec not found"}
    except subprocess.TimeoutExpired:
        return {"error": f"mpiexec timed out after 600 s on {n_ranks} ranks"}

    if proc.returncode != 0:
        return {"error": proc.stderr}

    # Load results from HDF5
    if not Path(output).exists() or Path(output).stat().st_size == 0:
        return {"error": "No output file created", "stderr": proc.stderr}

    result = load_hdf5(output)

    # Clean up temp file if we created one
    if use_temp:
        Path(output).unlink(missing_ok=True)

    return result


def _worker_env() -> dict:
    """Environment for the ranks, with this package importable without installation."""
    env = dict(os.environ)
    src_dir = str(Path(__file__).resolve().parent.parent)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_dir, env.get("PYTHONPATH")) if p)
    return env

"""
Wave Solver Runner - cross-validates the sequential and parallel paths.

Runs sequentially-launched backends (numpy, numba) in-process, or re-launches
itself under mpiexec for the MPI backend when n_ranks > 1.

Usage:
    uv run python run_solver.py
    uv run python run_solver.py experiment=validation
    uv run python run_solver.py backend=numpy n=4096 num_steps=2000
    uv run python run_solver.py n_ranks=4 mlflow.mode=local
"""

import logging
import os
import subprocess
import sys

import hydra
from omegaconf import DictConfig, OmegaConf

log = logging.getLogger(__name__)


def _create_params(cfg: DictConfig, **overrides):
    """Create SimulationParams from config."""
    from Wave1D import SimulationParams

    params = {
        "n": cfg.n,
        "p": float(cfg.p),
        "num_steps": cfg.num_steps,
        "tolerance": float(cfg.get("tolerance", 1e-9)),
        "backend": cfg.get("backend", "numba"),
        "use_numba": cfg.get("use_numba", True),
        "numba_threads": cfg.get("numba_threads"),
        "n_ranks": cfg.get("n_ranks", 1),
        "experiment_name": cfg.get("experiment_name") or "default",
    }
    params.update(overrides)
    return SimulationParams(**params)


def _log_results(cfg: DictConfig, result, comparison):
    """Log simulation results to MLflow."""
    from utils.mlflow import (
        log_artifact_file,
        log_metrics_dict,
        log_parameters,
        log_timeseries_metrics,
        setup_mlflow_tracking,
        start_mlflow_run_context,
    )

    params = result.params
    enabled = setup_mlflow_tracking(mode=cfg.mlflow.mode)
    run_name = f"{result.backend_name}_n{params.n}_p{params.p}_s{params.num_steps}"

    if not enabled:
        return

    with start_mlflow_run_context(params.experiment_name, f"n{params.n}", run_name):
        log_parameters(params.to_mlflow())
        log_metrics_dict(result.sequential_metrics.to_mlflow(prefix="sequential_"))
        if result.parallel_metrics is not None:
            log_metrics_dict(result.parallel_metrics.to_mlflow(prefix="parallel_"))
        log_metrics_dict(comparison.to_mlflow())
        if result.parallel_timeseries is not None:
            log_timeseries_metrics(result.parallel_timeseries, prefix="parallel_")
        if cfg.get("output"):
            log_artifact_file(cfg.output)


def _report(result, comparison):
    """Log timings and the verification outcome, then print the completion message."""
    seq = result.sequential_metrics
    log.info(f"CPU (sequential): {seq.wall_time:.3f}s" + (f", {seq.mlups:.1f} Mlup/s" if seq.mlups else ""))
    if result.parallel_metrics is not None:
        par = result.parallel_metrics
        log.info(
            f"{result.backend_name} (parallel): {par.wall_time:.3f}s"
            + (f", {par.mlups:.1f} Mlup/s" if par.mlups else "")
        )
    else:
        log.error(f"Parallel path unavailable: {result.backend_error}")

    if comparison.diverged:
        log.warning(f"Numeric divergence (peak amplitude {comparison.peak_amplitude:.3e})")
    elif comparison.passed:
        log.info(f"Verified: max |diff| = {comparison.max_abs_diff:.3e}")
    else:
        log.warning(
            f"Verification failed: max |diff| = {comparison.max_abs_diff:.3e} "
            f"(tolerance {comparison.tolerance:.1e})"
        )
    print("Done!")


@hydra.main(config_path="Experiments/hydra-conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Entry point - runs in-process or spawns MPI based on n_ranks."""
    n_ranks = cfg.get("n_ranks", 1)
    log.info(f"n={cfg.n}, p={cfg.p}, num_steps={cfg.num_steps}, backend={cfg.backend}, n_ranks={n_ranks}")

    if n_ranks > 1:
        _spawn_mpi(cfg, n_ranks)
    else:
        _run(cfg)


def _run(cfg: DictConfig, comm=None):
    """Run the simulation in this process (or as one MPI rank)."""
    from Wave1D import ConfigurationError, Simulator
    from Wave1D.io import save_hdf5

    is_root = comm is None or comm.Get_rank() == 0
    try:
        if comm is not None:
            params = _create_params(cfg, backend="mpi", n_ranks=comm.Get_size())
            simulator = Simulator(params, backend_options={"comm": comm})
        else:
            params = _create_params(cfg)
            simulator = Simulator(params)
        result = simulator.run()
    except ConfigurationError as e:
        if is_root:
            log.error(f"Invalid configuration: {e}")
        sys.exit(2)

    comparison = result.compare()
    if not is_root:
        return

    if cfg.get("output"):
        save_hdf5(cfg.output, result, comparison)
        log.info(f"Saved results to {cfg.output}")

    _report(result, comparison)
    _log_results(cfg, result, comparison)


def _spawn_mpi(cfg: DictConfig, n_ranks: int):
    """Spawn MPI subprocess."""
    env = os.environ.copy()
    env["MPI_SUBPROCESS"] = "1"

    cmd = ["mpiexec", "-n", str(n_ranks), sys.executable, os.path.abspath(__file__)]

    # Pass config as args
    for key in ["n", "p", "num_steps", "tolerance", "use_numba", "numba_threads",
                "experiment_name", "output"]:
        val = cfg.get(key)
        if val is not None:
            cmd.append(f"{key}={val}")
    cmd.append(f"mlflow.mode={cfg.mlflow.mode}")

    result = subprocess.run(cmd, capture_output=True, text=True, env=env)
    for line in (result.stdout or "").strip().split("\n"):
        if line:
            log.info(line)
    for line in (result.stderr or "").strip().split("\n"):
        if line:
            log.warning(line) if "error" in line.lower() else log.info(line)
    if result.returncode != 0:
        log.error(f"mpiexec exited with status {result.returncode}")
        sys.exit(result.returncode)


def _parse_cli_overrides(argv) -> dict:
    """Parse key=value args (nested keys with dots) into a dict."""
    cfg_dict = {}
    for arg in argv:
        if "=" not in arg or arg.startswith("-"):
            continue
        key, val = arg.split("=", 1)
        d = cfg_dict
        for k in key.split(".")[:-1]:
            d = d.setdefault(k, {})
        leaf = key.split(".")[-1]
        if val.lower() in ("true", "false"):
            d[leaf] = val.lower() == "true"
            continue
        try:
            d[leaf] = float(val) if ("." in val or "e" in val.lower()) else int(val)
        except ValueError:
            d[leaf] = val
    return cfg_dict


if __name__ == "__main__":
    if os.environ.get("MPI_SUBPROCESS"):
        from mpi4py import MPI

        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
        _run(OmegaConf.create(_parse_cli_overrides(sys.argv[1:])), comm=MPI.COMM_WORLD)
    else:
        main()

"""HDF5 persistence of simulation results.

Layout::

    /config                 attrs: SimulationParams fields
    /sequential/{curr,prev} datasets, attrs: SolverMetrics fields
    /parallel/{curr,prev}   datasets, attrs: SolverMetrics fields (if the path ran)
    /parallel/compute_times dataset: per-dispatch timings
    /comparison             attrs: ComparisonResult scalars
"""

from dataclasses import asdict
from pathlib import Path

import h5py
import numpy as np

from .datastructures import ComparisonResult, SimulationResult


def _write_attrs(group: h5py.Group, values: dict):
    for key, value in values.items():
        if value is None:
            continue
        group.attrs[key] = value


def save_hdf5(path, result: SimulationResult, comparison: ComparisonResult = None):
    """Save config, final states, metrics and the comparison to HDF5."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with h5py.File(path, "w") as f:
        _write_attrs(f.create_group("config"), result.params.__dict__)
        f["config"].attrs["backend_name"] = result.backend_name or ""
        f["config"].attrs["initial_amplitude"] = result.initial_amplitude

        seq = f.create_group("sequential")
        seq.create_dataset("curr", data=result.sequential.curr)
        seq.create_dataset("prev", data=result.sequential.prev)
        _write_attrs(seq, asdict(result.sequential_metrics))

        if result.parallel is not None:
            par = f.create_group("parallel")
            par.create_dataset("curr", data=result.parallel.curr)
            par.create_dataset("prev", data=result.parallel.prev)
            _write_attrs(par, asdict(result.parallel_metrics))
            if result.parallel_timeseries is not None:
                par.create_dataset(
                    "compute_times",
                    data=np.asarray(result.parallel_timeseries.compute_times, dtype=np.float64),
                )
        if result.backend_error:
            f.attrs["backend_error"] = result.backend_error

        if comparison is not None:
            _write_attrs(f.create_group("comparison"), comparison.to_mlflow())
            f["comparison"].attrs["tolerance"] = comparison.tolerance


def load_hdf5(path) -> dict:
    """Load a result file into a flat dict.

    Scalars are keyed by name (metrics prefixed with ``sequential_`` or
    ``parallel_``, comparison values unprefixed); arrays are keyed
    ``sequential_curr``, ``parallel_prev`` etc.
    """
    out = {}
    with h5py.File(path, "r") as f:
        out.update({k: _scalar(v) for k, v in f["config"].attrs.items()})
        for name in ("sequential", "parallel"):
            if name not in f:
                continue
            group = f[name]
            out.update({f"{name}_{k}": _scalar(v) for k, v in group.attrs.items()})
            for key in group.keys():
                out[f"{name}_{key}"] = group[key][:]
        if "comparison" in f:
            out.update({k: _scalar(v) for k, v in f["comparison"].attrs.items()})
        if "backend_error" in f.attrs:
            out["backend_error"] = _scalar(f.attrs["backend_error"])
    return out


def _scalar(value):
    """Convert numpy/h5py attribute values to plain Python types."""
    if isinstance(value, bytes):
        return value.decode()
    if isinstance(value, np.generic):
        return value.item()
    return value

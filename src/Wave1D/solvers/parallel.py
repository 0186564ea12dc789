"""Parallel solver: two alternating stages dispatched to a compute backend.

Stage A reads ``u0`` and writes ``u1``; stage B reads ``u1`` and writes
``u0``. The read/write roles are bound once when the stages are built, so
the buffers never have to be swapped between dispatches. One A dispatch
followed by one B dispatch is a full advance; ``num_steps`` counts
half-steps and must therefore be even.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .base import BaseSolver
from ..backends import ComputeBackend
from ..errors import ConfigurationError


class StageName(Enum):
    """States of the two-stage schedule."""

    A = "A"
    B = "B"

    @property
    def next(self) -> "StageName":
        return StageName.B if self is StageName.A else StageName.A

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Stage:
    """A stage with fixed operand roles: ``write`` is updated from ``read``."""

    name: StageName
    read: object
    write: object


def build_stages(buf0, buf1) -> dict:
    """Bind the two stages to the backend buffers holding u0 and u1."""
    return {
        StageName.A: Stage(StageName.A, read=buf0, write=buf1),
        StageName.B: Stage(StageName.B, read=buf1, write=buf0),
    }


class ParallelSolver(BaseSolver):
    """Solver that hands each half-step to a compute backend.

    Parameters
    ----------
    backend : ComputeBackend
        Backend executing each stage as an independent-per-index dispatch.
        The solver acquires it if needed but never releases it.
    """

    def __init__(self, backend: ComputeBackend):
        super().__init__()
        self.backend = backend
        self.stage = StageName.A

    @property
    def kernel(self):
        return getattr(self.backend, "kernel", None)

    def warmup(self, warmup_size: int = 16):
        """Acquiring the backend compiles and warms its kernel."""
        self.backend.acquire()

    def advance(self, u0: np.ndarray, u1: np.ndarray, p: float, n: int, num_steps: int):
        """Run num_steps half-steps (num_steps / 2 A->B cycles) in place.

        On return ``u0`` holds the latest level and ``u1`` the one before.
        """
        self._validate(u0, u1, n, num_steps)
        if num_steps % 2 != 0:
            raise ConfigurationError(
                f"num_steps={num_steps} must be even: each full advance is a stage A + stage B pair"
            )
        self._reset(num_steps)

        backend = self.backend.acquire()
        stages = build_stages(backend.upload(u0), backend.upload(u1))
        self.stage = StageName.A

        t_start = self._get_time()

        for _ in range(num_steps):
            self.half_step(stages, p, n)

        backend.synchronize()
        wall_time = self._get_time() - t_start

        # Read the result
        backend.readback(stages[StageName.B].write, out=u0)
        backend.readback(stages[StageName.A].write, out=u1)

        self.metrics.observed_numba_threads = backend.observed_numba_threads
        self._finalize(wall_time, n)

    def half_step(self, stages: dict, p: float, n: int):
        """Dispatch the current stage and move the schedule to the other one."""
        stage = stages[self.stage]

        t0 = self._get_time()
        self.backend.dispatch(stage, p, n)
        compute_time = self._get_time() - t0

        self._time_compute += compute_time
        self.timeseries.compute_times.append(compute_time)
        self.metrics.kernel_evaluations += n
        self.metrics.dispatches += 1

        self.stage = self.stage.next

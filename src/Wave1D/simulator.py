"""Simulator: runs both execution paths from identical initial conditions."""

import logging
from contextlib import nullcontext

from .backends import BACKENDS, ComputeBackend, create_backend
from .datastructures import LatticeState, SimulationParams, SimulationResult
from .errors import BackendError, ConfigurationError
from .problems import peak_initial_condition
from .solvers import ParallelSolver, SequentialSolver

log = logging.getLogger(__name__)


class Simulator:
    """Drive the sequential and parallel solvers over the same scenario.

    Parameters
    ----------
    params : SimulationParams
        Lattice size, p, num_steps and backend selection.
    backend : ComputeBackend or str, optional
        Backend instance (owned by the caller) or a backend name (created
        and released by the simulator). Defaults to ``params.backend``.
    initial_condition : callable
        ``n -> (u0, u1)``. Defaults to a unit peak at ``n // 2``.
    backend_options : dict, optional
        Extra keyword arguments for ``create_backend``.
    """

    def __init__(
        self,
        params: SimulationParams,
        backend=None,
        initial_condition=peak_initial_condition,
        backend_options: dict = None,
    ):
        self.params = params
        self.backend = backend if backend is not None else params.backend
        self.initial_condition = initial_condition
        self.backend_options = backend_options or {}

        self.sequential_solver = SequentialSolver(use_numba=params.use_numba)
        self.parallel_solver = None

    @property
    def backend_name(self) -> str:
        if isinstance(self.backend, ComputeBackend):
            return self.backend.name
        return str(self.backend)

    def seed(self):
        """Two independent, identically seeded states."""
        state = LatticeState.from_initial_condition(self.params.n, self.initial_condition)
        return state, state.copy()

    def run(self) -> SimulationResult:
        """Run both paths and return their final states.

        ConfigurationError is raised before any solver runs, including
        backend-specific limits such as more MPI ranks than lattice sites.
        A BackendError on the parallel path is logged and recorded; the
        sequential result is still returned.
        """
        params = self.params
        params.validate()
        if not isinstance(self.backend, ComputeBackend) and self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend: {self.backend}. Use one of {', '.join(BACKENDS)}."
            )

        backend, backend_error = self._resolve_backend()
        if backend is not None:
            backend.validate(params)

        seq_state, par_state = self.seed()

        log.info(f"Sequential solve: n={params.n}, p={params.p}, steps={params.num_steps}")
        self.sequential_solver.warmup()
        u0, u1 = seq_state.as_pair()
        self.sequential_solver.advance(u0, u1, params.p, params.n, params.num_steps)
        log.info(f"Sequential done in {self.sequential_solver.metrics.wall_time:.3f}s")

        result = SimulationResult(
            params=params,
            sequential=seq_state,
            sequential_metrics=self.sequential_solver.metrics,
            backend_name=self.backend_name,
            initial_amplitude=par_state.max_amplitude(),
        )

        try:
            if backend_error is not None:
                raise backend_error
            with self._scope(backend) as backend:
                log.info(f"Parallel solve on {backend.name} backend")
                self.parallel_solver = ParallelSolver(backend)
                self.parallel_solver.warmup()
                u0, u1 = par_state.as_pair()
                self.parallel_solver.advance(u0, u1, params.p, params.n, params.num_steps)
        except BackendError as e:
            log.error(f"Parallel path failed: {e}")
            result.backend_error = str(e)
            return result

        log.info(f"Parallel done in {self.parallel_solver.metrics.wall_time:.3f}s")
        result.parallel = par_state
        result.parallel_metrics = self.parallel_solver.metrics
        result.parallel_timeseries = self.parallel_solver.timeseries
        return result

    def _resolve_backend(self):
        """Backend instance for the parallel path, or the BackendError creating it raised."""
        if isinstance(self.backend, ComputeBackend):
            return self.backend, None
        options = {"numba_threads": self.params.numba_threads, **self.backend_options}
        try:
            return create_backend(self.backend, **options), None
        except BackendError as e:
            return None, e

    def _scope(self, backend: ComputeBackend):
        """Scoped backend: released here unless the caller passed it in."""
        if backend is self.backend:
            return nullcontext(backend.acquire())
        return backend

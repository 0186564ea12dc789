"""Exception types raised by the wave solvers and compute backends."""


class ConfigurationError(ValueError):
    """Invalid simulation parameters or backend selection.

    Raised before any solver runs.
    """


class BackendError(RuntimeError):
    """Failure surfaced by a compute backend (acquire, upload, dispatch, readback).

    Fatal for the parallel path only; the sequential reference path does
    not touch a backend.
    """

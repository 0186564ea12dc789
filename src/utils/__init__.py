"""Utility modules for experiment tracking and experiment scripts.

Submodules:
- mlflow: MLflow tracking setup and logging helpers
- datatools: Data/figure directories mirroring Experiments/
- plotting: Seaborn style, palettes and label formatting (applied on import)

Import examples:
    from utils import mlflow       # MLflow utilities
    from utils import datatools    # Path helpers
    from utils import plotting     # Styles applied
"""

import warnings

# Suppress MLflow FutureWarning about filesystem backend deprecation
warnings.filterwarnings("ignore", category=FutureWarning, module="mlflow")

from . import datatools, mlflow  # noqa: E402
from .datatools import get_repo_root  # noqa: E402

__all__ = [
    "datatools",
    "mlflow",
    "get_repo_root",
]

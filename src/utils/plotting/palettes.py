"""Colorblind-friendly colours for line and scaling plots."""

from typing import List

# Paul Tol's vibrant
CATEGORICAL = [
    "#0077BB",  # Blue
    "#EE7733",  # Orange
    "#009988",  # Teal
    "#CC3311",  # Red
    "#33BBEE",  # Cyan
    "#EE3377",  # Magenta
]

PATHS = {
    "sequential": "#0077BB",
    "parallel": "#EE7733",
    "difference": "#009988",
}

SCALING = {
    "ideal": "#888888",
    "measured": "#0077BB",
    "efficiency": "#009988",
}


def get_categorical(n: int = None) -> List[str]:
    """First n categorical colours (cycled), or the whole palette."""
    if n is None:
        return CATEGORICAL.copy()
    return (CATEGORICAL * ((n // len(CATEGORICAL)) + 1))[:n]

"""Matplotlib style for experiment figures (seaborn base, larger fonts)."""

import matplotlib.pyplot as plt
import seaborn as sns

RC_OVERRIDES = {
    "axes.titlesize": 13,
    "axes.titleweight": "bold",
    "axes.labelsize": 12,
    "legend.fontsize": 11,
    "legend.framealpha": 0.9,
    "savefig.bbox": "tight",
    "figure.dpi": 100,
}


def apply_styles(context: str = "paper", font_scale: float = 1.2) -> None:
    """Apply the seaborn whitegrid theme with the project overrides.

    Parameters
    ----------
    context : str, default "paper"
        Seaborn plotting context.
    font_scale : float, default 1.2
        Font scaling passed to seaborn.
    """
    sns.set_theme(context=context, style="whitegrid", font_scale=font_scale)
    plt.rcParams.update(RC_OVERRIDES)

"""LaTeX label formatting for figure titles and legends."""

from __future__ import annotations

from typing import Any


def format_scientific_latex(value: float, precision: int = 2) -> str:
    """Format a value as ``mantissa \\times 10^{exponent}``.

    Examples
    --------
    >>> format_scientific_latex(0.001)
    '1.00 \\times 10^{-3}'
    """
    mantissa, exp = f"{float(value):.{precision}e}".split("e")
    return rf"{mantissa} \times 10^{{{int(exp)}}}"


def build_parameter_string(params: dict[str, Any], separator: str = ", ") -> str:
    """Join run parameters as ``$name = value$`` pieces.

    Floats below 1e-3 are written in scientific notation.

    Examples
    --------
    >>> build_parameter_string({'n': 1024, 'p': 0.05})
    '$n = 1024$, $p = 0.05$'
    """
    parts = []
    for name, value in params.items():
        if isinstance(value, float) and value != 0 and abs(value) < 1e-3:
            value = format_scientific_latex(value)
        parts.append(rf"${name} = {value}$")
    return separator.join(parts)

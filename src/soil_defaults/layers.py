from __future__ import annotations

import numpy as np


def to_cumulative(thickness) -> np.ndarray:
    thickness = np.asarray(thickness, dtype=float)
    if np.any(thickness < 0):
        raise ValueError(f"Layer thickness must be non-negative: {thickness.tolist()}")
    return np.cumsum(thickness)


def fix_length(values, length: int) -> np.ndarray:
    out = np.full(length, np.nan)
    if values is None:
        return out
    values = np.asarray(values, dtype=float)
    n = min(length, len(values))
    out[:n] = values[:n]
    return out


def has_values(values) -> bool:
    if values is None:
        return False
    values = np.asarray(values, dtype=float)
    return bool(np.any(~np.isnan(values)))


def fill_missing(values, length: int, default_value: float) -> np.ndarray:
    """Resize ``values`` to ``length`` and replace missing (NaN) entries.

    The first entry takes the first real value found in the array (or
    ``default_value`` when there is none); every later missing entry repeats
    the entry above it.
    """
    out = fix_length(values, length)
    if length == 0:
        return out

    if np.isnan(out[0]):
        real = out[~np.isnan(out)]
        out[0] = real[0] if real.size else default_value

    for i in range(1, length):
        if np.isnan(out[i]):
            out[i] = out[i - 1]
    return out


def remap(
    values,
    source_thickness,
    target_thickness,
    below_profile_value: float | None = None,
) -> np.ndarray:
    """Map per-layer ``values`` from one thickness scheme onto another.

    Each value sits at the cumulative depth of the bottom of its layer. Target
    layers are linearly interpolated between the bracketing source depths;
    layers shallower than the first source depth take the first value and
    layers deeper than the profile take ``below_profile_value`` (defaults to
    the last source value).
    """
    source_cum = to_cumulative(source_thickness)
    target_cum = to_cumulative(target_thickness)
    if source_cum.size == 0:
        raise ValueError("Cannot remap from an empty thickness scheme.")

    values = fix_length(values, source_cum.size)
    if source_cum.size == 1:
        return np.full(target_cum.size, values[0])

    if below_profile_value is None:
        below_profile_value = values[-1]
    return np.interp(target_cum, source_cum, values, right=below_profile_value)

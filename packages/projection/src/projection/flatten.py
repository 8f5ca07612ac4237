"""
Flatten projection results for consumers.

to_frame() gives the renderer-facing table (one row per point, colors
already wrapped into [0, 1)); flatten_result() gives a single dict of
scalars for summaries.
"""

import numpy as np
import polars as pl
from typing import Dict, Any

from projection.project import ProjectionResult


def to_frame(result: ProjectionResult) -> pl.DataFrame:
    """One row per projected point: X, Y, Z, r, g, b, size, opacity."""
    return pl.DataFrame({
        'X': result.X,
        'Y': result.Y,
        'Z': result.Z,
        'r': result.color[:, 0],
        'g': result.color[:, 1],
        'b': result.color[:, 2],
        'size': result.size,
        'opacity': result.opacity,
    }).with_columns(pl.all().cast(pl.Float64))


def flatten_result(result: ProjectionResult) -> Dict[str, Any]:
    """Projection summary as scalar key-value pairs."""
    row: Dict[str, Any] = {
        'n_points': len(result),
        'method': result.method,
        'used_fallback': result.used_fallback,
    }

    if result.explained_ratio is not None:
        cum = 0.0
        for i, ratio in enumerate(result.explained_ratio):
            row[f'explained_ratio_{i}'] = float(ratio)
            cum += float(ratio)
        row['explained_total'] = cum

    for axis, values in (('X', result.X), ('Y', result.Y), ('Z', result.Z)):
        row[f'{axis}_min'] = float(np.min(values))
        row[f'{axis}_max'] = float(np.max(values))

    row['size_mean'] = float(np.mean(result.size))
    row['opacity_mean'] = float(np.mean(result.opacity))
    return row

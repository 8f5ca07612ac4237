"""
Projection package for the Silent Spiral.

Reduces a (6 + H)-dimensional trajectory to 3D by PCA and derives
color / size / opacity from the harmonic coordinates.
Input: trajectory matrix (n_states × (6 + H)).
Output: ProjectionResult with X, Y, Z, color, size, opacity.

Degenerate data falls back to the raw x, y, z coordinates instead of
failing.
"""

from projection.decompose import compute_principal_axes
from projection.encode import compute_encodings
from projection.project import (
    project,
    describe,
    select_dimensions,
    ProjectionResult,
    ProjectionError,
)
from projection.flatten import to_frame, flatten_result

__all__ = [
    'compute_principal_axes',
    'compute_encodings',
    'project',
    'describe',
    'select_dimensions',
    'ProjectionResult',
    'ProjectionError',
    'to_frame',
    'flatten_result',
]

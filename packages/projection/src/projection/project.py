"""
Trajectory → 3D point cloud plus visual encodings.

Wide states (more than SUBSAMPLE_THRESHOLD coordinates) are first cut
down to the six base coordinates plus every SUBSAMPLE_STRIDE-th harmonic,
and the resulting projection is scaled by VISIBILITY_SCALE.

If the covariance cannot be decomposed, X/Y/Z are the raw x, y, z
columns. project() only raises for empty or malformed input.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Optional, Sequence, Union

from projection.decompose import compute_principal_axes
from projection.encode import compute_encodings


logger = logging.getLogger(__name__)

N_COMPONENTS = 3
BASE_COORDINATES = 6
SUBSAMPLE_THRESHOLD = 50
SUBSAMPLE_STRIDE = 5
VISIBILITY_SCALE = 10.0

PCA = 'pca'
PCA_SUBSAMPLED = 'pca_subsampled'
RAW_XYZ = 'raw_xyz'


class ProjectionError(ValueError):
    """Trajectory is empty or not a rectangular matrix of numbers."""


@dataclass
class ProjectionResult:
    """Everything a renderer needs; all arrays have one entry per sample."""
    X: np.ndarray
    Y: np.ndarray
    Z: np.ndarray
    color: np.ndarray
    size: np.ndarray
    opacity: np.ndarray
    method: str
    explained_ratio: Optional[np.ndarray] = None
    fallback_reason: Optional[str] = None

    def __len__(self) -> int:
        return int(self.X.shape[0])

    @property
    def used_fallback(self) -> bool:
        return self.method == RAW_XYZ

    @property
    def points(self) -> np.ndarray:
        """(n, 3) array of X, Y, Z."""
        return np.column_stack([self.X, self.Y, self.Z])


def _as_matrix(trajectory: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    if isinstance(trajectory, np.ndarray):
        matrix = trajectory
    else:
        rows = list(trajectory)
        try:
            lengths = {len(r) for r in rows}
        except TypeError:
            raise ProjectionError('Trajectory must be a sequence of state vectors')
        if len(lengths) > 1:
            raise ProjectionError('Trajectory is ragged: states have different lengths')
        try:
            matrix = np.asarray(rows, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ProjectionError(f'Trajectory is not numeric: {e}')

    if matrix.ndim != 2:
        raise ProjectionError(f'Trajectory must be 2-D (n_states, 6 + H), got shape {matrix.shape}')
    if matrix.shape[0] == 0:
        raise ProjectionError('Trajectory is empty')
    if matrix.shape[1] < BASE_COORDINATES + 1:
        raise ProjectionError(
            f'States need at least {BASE_COORDINATES + 1} coordinates, got {matrix.shape[1]}'
        )
    try:
        matrix = matrix.astype(np.float64, copy=False)
    except (TypeError, ValueError) as e:
        raise ProjectionError(f'Trajectory is not numeric: {e}')
    if not np.all(np.isfinite(matrix)):
        raise ProjectionError('Trajectory contains non-finite values')
    return matrix


def select_dimensions(n_features: int) -> np.ndarray:
    """
    Column indices fed to PCA.

    All columns for narrow states; otherwise the six base coordinates and
    every SUBSAMPLE_STRIDE-th harmonic starting at h0.
    """
    if n_features <= SUBSAMPLE_THRESHOLD:
        return np.arange(n_features)
    harmonics = np.arange(BASE_COORDINATES, n_features, SUBSAMPLE_STRIDE)
    return np.concatenate([np.arange(BASE_COORDINATES), harmonics])


def project(trajectory: Union[np.ndarray, Sequence[Sequence[float]]]) -> ProjectionResult:
    """
    Reduce a trajectory to 3D and derive its encodings.

    Parameters
    ----------
    trajectory : array-like
        (n_states, 6 + H) state matrix, n_states ≥ 1.

    Returns
    -------
    ProjectionResult — method is 'pca', 'pca_subsampled' or 'raw_xyz'.
    """
    matrix = _as_matrix(trajectory)
    n_features = matrix.shape[1]

    columns = select_dimensions(n_features)
    subsampled = len(columns) < n_features
    reduced = matrix[:, columns]

    axes = compute_principal_axes(reduced, n_components=N_COMPONENTS)

    if axes['components'] is None:
        logger.warning(f"PCA unavailable ({axes['reason']}); using raw x, y, z")
        xyz = matrix[:, :3].copy()
        method = RAW_XYZ
        explained = None
    else:
        xyz = (reduced - axes['mean']) @ axes['components']
        if subsampled:
            xyz = xyz * VISIBILITY_SCALE
        method = PCA_SUBSAMPLED if subsampled else PCA
        explained = axes['explained_ratio']

    enc = compute_encodings(matrix)

    return ProjectionResult(
        X=xyz[:, 0],
        Y=xyz[:, 1],
        Z=xyz[:, 2],
        color=enc['color'],
        size=enc['size'],
        opacity=enc['opacity'],
        method=method,
        explained_ratio=explained,
        fallback_reason=axes['reason'],
    )


def describe(result: ProjectionResult) -> Dict[str, Any]:
    """Coordinate ranges and method, for logs and validation reports."""
    return {
        'n_points': len(result),
        'method': result.method,
        'fallback_reason': result.fallback_reason,
        'ranges': {
            axis: (float(np.min(values)), float(np.max(values)))
            for axis, values in (('X', result.X), ('Y', result.Y), ('Z', result.Z))
        },
    }

"""
Principal axes of a trajectory.

center → covariance → eigendecompose → top-k axes.

Failure is returned, not raised: when the covariance is unusable the
result has components=None and a reason, and the caller picks its
fallback from that.
"""

import numpy as np
from typing import Dict, Any, Optional


CONSTANT_STD = 1e-15   # a column below this std is treated as constant
EIGEN_RTOL = 1e-12     # eigenvalues below rtol·λ₁ count as zero


def _fix_signs(eigenvectors: np.ndarray) -> np.ndarray:
    """Flip each eigenvector so its largest-magnitude loading is positive."""
    idx = np.argmax(np.abs(eigenvectors), axis=0)
    signs = np.sign(eigenvectors[idx, np.arange(eigenvectors.shape[1])])
    signs[signs == 0] = 1.0
    return eigenvectors * signs


def compute_principal_axes(
    matrix: np.ndarray,
    n_components: int = 3,
) -> Dict[str, Any]:
    """
    Standard PCA axes of a (n_samples, n_features) matrix.

    Parameters
    ----------
    matrix : np.ndarray
        Rows are samples (trajectory states), columns are coordinates.
    n_components : int
        Number of axes to return.

    Returns
    -------
    dict with:
        components : np.ndarray or None — (n_features, n_components), unit columns
        eigenvalues : np.ndarray — top eigenvalues, descending
        explained_ratio : np.ndarray — fraction of total variance per axis
        mean : np.ndarray — column means used for centering
        n_samples : int
        n_features : int
        n_constant : int — columns with zero variance
        reason : str or None — why components is None
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    n_samples, n_features = matrix.shape
    mean = matrix.mean(axis=0) if n_samples else np.zeros(n_features)

    if n_samples < 2:
        return _failed(mean, n_samples, n_features, 0, f'need at least 2 samples, got {n_samples}')
    if n_features < n_components:
        return _failed(mean, n_samples, n_features, 0,
                       f'need at least {n_components} features, got {n_features}')

    centered = matrix - mean

    # Exactly constant coordinates make the covariance singular
    col_std = np.std(centered, axis=0)
    n_constant = int(np.count_nonzero(col_std < CONSTANT_STD))
    if n_constant:
        return _failed(mean, n_samples, n_features, n_constant,
                       f'rank-deficient covariance: {n_constant} constant coordinates')

    cov = np.cov(centered, rowvar=False)
    if not np.all(np.isfinite(cov)):
        return _failed(mean, n_samples, n_features, 0, 'non-finite covariance')

    try:
        eigenvalues, eigenvectors = np.linalg.eigh(cov)
    except np.linalg.LinAlgError as e:
        return _failed(mean, n_samples, n_features, 0, f'eigendecomposition failed: {e}')

    eigenvalues = np.maximum(np.real(eigenvalues), 0.0)
    eigenvectors = np.real(eigenvectors)

    idx = np.argsort(eigenvalues)[::-1]
    eigenvalues = eigenvalues[idx]
    eigenvectors = eigenvectors[:, idx]

    total_var = float(np.sum(eigenvalues))
    if total_var <= 0.0 or eigenvalues[n_components - 1] <= EIGEN_RTOL * eigenvalues[0]:
        return _failed(mean, n_samples, n_features, 0,
                       f'rank-deficient covariance: fewer than {n_components} non-zero eigenvalues')

    components = _fix_signs(eigenvectors[:, :n_components])

    return {
        'components': components,
        'eigenvalues': eigenvalues[:n_components],
        'explained_ratio': eigenvalues[:n_components] / total_var,
        'mean': mean,
        'n_samples': n_samples,
        'n_features': n_features,
        'n_constant': 0,
        'reason': None,
    }


def _failed(mean: np.ndarray, n_samples: int, n_features: int,
            n_constant: int, reason: Optional[str]) -> Dict[str, Any]:
    """Result for data that cannot be decomposed."""
    return {
        'components': None,
        'eigenvalues': np.full(0, np.nan),
        'explained_ratio': np.full(0, np.nan),
        'mean': mean,
        'n_samples': n_samples,
        'n_features': n_features,
        'n_constant': n_constant,
        'reason': reason,
    }

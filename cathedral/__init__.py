"""
Cathedral - Silent Spiral runner

Wires the packages together:
- spiral: parameters, presets, Euler integration
- projection: PCA to 3D plus color / size / opacity
- stability: pre-run assessment, post-run convergence analysis
"""

__version__ = "0.3.0"

# Use: from cathedral.pipeline import run_pipeline, resolve_params
# Use: from cathedral.validate import validate_preset, validate_all_presets

__all__ = [
    '__version__',
]

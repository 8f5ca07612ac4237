"""
Parameter store and presets.

Presets live in presets.yaml next to this module. The store holds one
validated parameter set and notifies subscribers on every change; the
integrator itself never subscribes, it is handed store.snapshot().

Usage:
    from spiral.store import ParameterStore
    store = ParameterStore()
    store.subscribe(lambda name, value, params: ...)
    store.load_preset('Harmonic Resonance')
    params = store.snapshot()
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Callable, List, Optional

from spiral.params import Parameters, ParameterError, PARAM_RANGES, validate_param


logger = logging.getLogger(__name__)

PRESETS_PATH = Path(__file__).parent / 'presets.yaml'

Observer = Callable[[str, Any, Dict[str, Any]], None]

_preset_cache: Optional[Dict[str, Any]] = None


def _load_preset_file(path: Path = PRESETS_PATH) -> Dict[str, Any]:
    global _preset_cache
    if path == PRESETS_PATH and _preset_cache is not None:
        return _preset_cache
    with open(path) as f:
        cfg = yaml.safe_load(f) or {}
    data = {
        'defaults': dict(cfg.get('defaults', {})),
        'presets': {name: dict(values) for name, values in cfg.get('presets', {}).items()},
    }
    if path == PRESETS_PATH:
        _preset_cache = data
    return data


def default_params() -> Dict[str, Any]:
    """Default parameter values as a plain dict."""
    return dict(_load_preset_file()['defaults'])


def list_presets() -> List[str]:
    return list(_load_preset_file()['presets'])


def get_preset(name: str) -> Dict[str, Any]:
    """Preset values merged over the defaults."""
    presets = _load_preset_file()['presets']
    if name not in presets:
        raise KeyError(f"Unknown preset '{name}'. Available: {list(presets)}")
    merged = default_params()
    merged.update(presets[name])
    return merged


class ParameterStore:
    """
    Holds the current parameter values and notifies observers.

    Observers are called as observer(name, value, params) where name is
    the changed field, 'preset' or 'reset'. An observer that raises is
    logged and skipped; the remaining observers still run.
    """

    def __init__(self, harmonics: Optional[int] = None, variant: Optional[str] = None):
        self._params: Dict[str, Any] = default_params()
        self._structure: Dict[str, Any] = {}
        if harmonics is not None:
            self._structure['harmonics'] = harmonics
        if variant is not None:
            self._structure['variant'] = variant
        self._observers: List[Observer] = []
        # Fail now rather than at first snapshot
        self.snapshot()

    def set_param(self, name: str, value: Any) -> None:
        validate_param(name, value)
        self._params[name] = value
        self._notify(name, value)

    def get_param(self, name: str) -> Any:
        if name not in self._params:
            raise ParameterError(name, 'unknown parameter')
        return self._params[name]

    def get_all(self) -> Dict[str, Any]:
        return dict(self._params)

    def snapshot(self) -> Parameters:
        """Immutable, range-checked Parameters for one run."""
        return Parameters.from_mapping(self._params, **self._structure).check_ranges()

    def load_preset(self, name: str) -> None:
        values = get_preset(name)
        for key, value in values.items():
            if key in PARAM_RANGES:
                validate_param(key, value)
        self._params.update(values)
        self._notify('preset', name)

    def reset(self) -> None:
        self._params = default_params()
        self._notify('reset', None)

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers = [obs for obs in self._observers if obs is not observer]

    def _notify(self, name: str, value: Any) -> None:
        params = self.get_all()
        for observer in list(self._observers):
            try:
                observer(name, value, params)
            except Exception:
                logger.exception(f"Parameter observer failed on '{name}'")

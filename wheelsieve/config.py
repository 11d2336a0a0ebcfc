"""
YAML configuration for sieve engines and the benchmark script.

Example (config/default.yaml):

    initial_bound: 0
    max_bound: 4611686018427387904
    max_bytes: null
    verbose: false
    benchmark:
      bound: 100000000
      queries: 100000
      seed: 42
"""

import copy
from pathlib import Path
from typing import Optional, Union

import yaml

from .contracts import PRIMARY_LIMIT
from .engine import MAX_SIEVE_BOUND

DEFAULTS = {
    'initial_bound': 0,
    'max_bound': MAX_SIEVE_BOUND,
    'max_bytes': None,
    'verbose': False,
    'primary_limit': PRIMARY_LIMIT,
    'benchmark': {
        'bound': 10**8,
        'queries': 100000,
        'factor_range': [10**9, 10**10],
        'verify_limit': 10**6,
        'seed': 42,
        'output': 'data/results/benchmark.csv',
    },
}


def _merge(base: dict, override: dict, where: str) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if key not in base:
            raise ValueError(f"unknown config key: {where}{key}")
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ValueError(f"config key {where}{key} must be a mapping")
            merged[key] = _merge(base[key], value, f"{where}{key}.")
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> dict:
    """
    Load a YAML config file over the defaults.

    Parameters
    ----------
    path : str or Path, optional
        YAML file. None returns a copy of DEFAULTS.

    Returns
    -------
    dict
        Complete configuration.

    Raises
    ------
    ValueError
        If the file holds keys that are not in DEFAULTS.
    """
    if path is None:
        return copy.deepcopy(DEFAULTS)
    with open(path) as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return _merge(DEFAULTS, loaded, '')

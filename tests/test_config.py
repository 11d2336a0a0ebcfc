"""
Tests for YAML configuration loading.
"""

from pathlib import Path

import pytest

from wheelsieve import PrimeSieve
from wheelsieve.config import DEFAULTS, load_config

DEFAULT_YAML = Path(__file__).parent.parent / 'config' / 'default.yaml'


class TestLoadConfig:

    def test_defaults_are_copied(self):
        config = load_config()
        assert config == DEFAULTS
        config['benchmark']['seed'] = 0
        assert DEFAULTS['benchmark']['seed'] == 42

    def test_overrides(self, tmp_path):
        path = tmp_path / 'sieve.yaml'
        path.write_text("max_bytes: 1000000\nbenchmark:\n  seed: 7\n")
        config = load_config(path)
        assert config['max_bytes'] == 1000000
        assert config['benchmark']['seed'] == 7
        assert config['benchmark']['bound'] == DEFAULTS['benchmark']['bound']
        assert config['verbose'] is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")
        assert load_config(path) == DEFAULTS

    @pytest.mark.parametrize('text', [
        "max_bounds: 10\n",
        "benchmark:\n  sed: 1\n",
        "benchmark: 5\n",
        "- 1\n- 2\n",
    ])
    def test_bad_files_raise(self, tmp_path, text):
        path = tmp_path / 'bad.yaml'
        path.write_text(text)
        with pytest.raises(ValueError):
            load_config(path)

    def test_shipped_default_loads(self):
        config = load_config(DEFAULT_YAML)
        assert config['max_bound'] == 2**62
        assert config['verbose'] is True


class TestFromConfig:

    def test_builds_engine(self):
        config = load_config()
        config['initial_bound'] = 1000
        sieve = PrimeSieve.from_config(config)
        assert sieve.coverage_bound >= 1000
        assert sieve.count_primes_upto(1000) == 168

    def test_limits_are_applied(self):
        config = load_config()
        config['max_bound'] = 10**6
        sieve = PrimeSieve.from_config(config)
        assert sieve.max_bound == 10**6


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

"""
Unit tests for configuration loading.
"""

from pathlib import Path

import pytest

from avif_optimizer.domain.exceptions import ConfigurationError
from avif_optimizer.infrastructure.config import ConfigLoader, OptimizerConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test in an empty directory without AVIF_* variables."""
    for var in list(ConfigLoader.ENV_VARS) + ['AVIF_EXCLUDE']:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestOptimizerConfig:
    """Test OptimizerConfig defaults and validation."""

    def test_defaults(self):
        config = OptimizerConfig()

        assert config.max_width == 1200
        assert config.max_height == 1200
        assert config.quality == 60
        assert config.effort == 6
        assert config.output_dir is None
        assert config.preserve_original is True
        assert config.preserve_exif is False
        assert config.exclude == []
        assert config.concurrency is None

    @pytest.mark.parametrize('changes', [
        {'quality': 0},
        {'quality': 101},
        {'effort': 11},
        {'max_width': 0},
        {'max_height': 60000},
        {'concurrency': 0},
        {'timeout_seconds': 0},
        {'retries': -1},
        {'memory_per_item_mb': 0},
    ])
    def test_invalid_values(self, changes):
        with pytest.raises(ConfigurationError):
            OptimizerConfig(**changes)

    def test_output_dir_coerced_to_path(self):
        assert OptimizerConfig(output_dir='out').output_dir == Path('out')

    def test_replace_validates(self):
        config = OptimizerConfig()

        assert config.replace(quality=80).quality == 80
        with pytest.raises(ConfigurationError):
            config.replace(quality=500)

    def test_to_dict(self):
        data = OptimizerConfig(output_dir=Path('out')).to_dict()

        assert data['output_dir'] == 'out'
        assert data['quality'] == 60


class TestConfigLoader:
    """Test ConfigLoader precedence."""

    def test_defaults_without_sources(self):
        assert ConfigLoader().load() == OptimizerConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'avif.yaml'
        path.write_text('quality: 75\nmax_width: 800\nexclude:\n  - "*.tmp.jpg"\n')

        config = ConfigLoader(path).load()

        assert config.quality == 75
        assert config.max_width == 800
        assert config.exclude == ['*.tmp.jpg']

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path / 'missing.yaml').load()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text('quality: [60\n')

        with pytest.raises(ConfigurationError):
            ConfigLoader(path).load()

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text('- 1\n- 2\n')

        with pytest.raises(ConfigurationError):
            ConfigLoader(path).load()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / 'avif.yaml'
        path.write_text('quality: 75\n')
        monkeypatch.setenv('AVIF_QUALITY', '90')
        monkeypatch.setenv('AVIF_PRESERVE_EXIF', 'yes')
        monkeypatch.setenv('AVIF_EXCLUDE', '*.tmp.jpg, drafts/*')

        config = ConfigLoader(path).load()

        assert config.quality == 90
        assert config.preserve_exif is True
        assert config.exclude == ['*.tmp.jpg', 'drafts/*']

    def test_invalid_env_value_ignored(self, monkeypatch):
        monkeypatch.setenv('AVIF_QUALITY', 'high')

        assert ConfigLoader().load().quality == 60

    def test_overrides_win(self, tmp_path, monkeypatch):
        path = tmp_path / 'avif.yaml'
        path.write_text('quality: 75\neffort: 3\n')
        monkeypatch.setenv('AVIF_QUALITY', '90')

        config = ConfigLoader(path).load({'quality': 50, 'effort': None})

        assert config.quality == 50
        assert config.effort == 3

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / 'avif.yaml'
        path.write_text('quality: 70\nlossless: true\n')

        with caplog.at_level('WARNING', logger='avif_optimizer'):
            config = ConfigLoader(path).load()

        assert config.quality == 70
        assert 'lossless' in caplog.text

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / 'avif.yaml'
        path.write_text('quality: 0\n')

        with pytest.raises(ConfigurationError):
            ConfigLoader(path).load()

import copy
from pathlib import Path

import pytest
import yaml

from layercache import constants
from layercache.config import Config
from layercache.exceptions import (
    ConfigFileMissingError,
    ConfigParsingError,
    ConfigValidationError,
)

BASE_CONFIG = {
    'local': {
        'directory': '/var/cache/layercache',
        'filesystem': 'disk',
    },
    'durable': {
        'url': 'gs://build-cache/layercache',
        'storage_options': {'token': 'anon'},
    },
    'writeback': {
        'workers': 8,
        'max_pending': 64,
    },
    'logging': {
        'debug': True,
        'levels': {'cache': 'DEBUG'},
    },
}


@pytest.fixture
def create_config_file(tmp_path: Path):
    """A pytest fixture to create a temporary layercache.yml file."""
    def _create_file(config_data) -> Path:
        config_file = tmp_path / "layercache.yml"
        with open(config_file, 'w') as f:
            yaml.dump(config_data, f)
        return config_file
    return _create_file


class TestConfigLoading:
    """Tests for basic loading and validation success/failure."""

    def test_load_valid_config_successfully(self, create_config_file):
        config = Config(str(create_config_file(BASE_CONFIG)))
        assert config.local.directory == '/var/cache/layercache'
        assert config.durable.url == 'gs://build-cache/layercache'
        assert config.durable.storage_options == {'token': 'anon'}
        assert config.writeback.workers == 8
        assert config.writeback.synchronous is False
        assert config.logging.levels == {'cache': 'DEBUG'}

    def test_defaults(self):
        config = Config()
        assert config.local.directory == constants.DEFAULT_CACHE_DIR
        assert config.local.filesystem == 'disk'
        assert config.durable.url is None
        assert config.writeback.workers == constants.DEFAULT_WRITEBACK_WORKERS
        assert config.writeback.max_pending == constants.DEFAULT_WRITEBACK_MAX_PENDING

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert Config(str(config_file)).durable.url is None

    def test_file_not_found_raises_error(self, tmp_path):
        with pytest.raises(ConfigFileMissingError):
            Config(str(tmp_path / "non_existent_file.yml"))

    def test_invalid_yaml_raises_error(self, tmp_path):
        config_file = tmp_path / "invalid.yml"
        config_file.write_text("key: value: another")
        with pytest.raises(ConfigParsingError, match="Error parsing YAML file"):
            Config(str(config_file))

    def test_non_mapping_raises_error(self, create_config_file):
        with pytest.raises(ConfigParsingError, match="dictionary"):
            Config(str(create_config_file(['a', 'b'])))


class TestConfigValidationLogic:
    """Tests for field-level validation."""

    @pytest.mark.parametrize("section, field, value", [
        ('writeback', 'workers', 0),
        ('durable', 'workers', 0),
        ('writeback', 'max_pending', -1),
        ('local', 'filesystem', 'tape'),
        ('local', 'unknown', 'x'),
    ])
    def test_invalid_field_raises_error(self, section, field, value):
        data = copy.deepcopy(BASE_CONFIG)
        data[section][field] = value
        with pytest.raises(ConfigValidationError):
            Config.from_dict(data)

    def test_unknown_top_level_key_raises_error(self):
        data = copy.deepcopy(BASE_CONFIG)
        data['eviction'] = {'ttl': 60}
        with pytest.raises(ConfigValidationError, match="eviction"):
            Config.from_dict(data)

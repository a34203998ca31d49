"""
Unit tests for configuration loading.
"""

from unittest.mock import patch

import pytest
import yaml

from actorgate.api.retry import RetryPolicy
from actorgate.core.config_manager import ClientConfig, ConfigManager
from tests.fixtures.sample_data import SAMPLE_CONFIGURATIONS


class TestClientConfig:
    """Test suite for ClientConfig"""

    def test_defaults(self):
        config = ClientConfig()

        assert config.base_url == 'https://api.actorgate.io/v2'
        assert config.max_attempts == 9
        assert config.min_gzip_bytes == 1024
        assert config.max_page_limit == 1000
        assert config.gzip_enabled is True
        assert config.stringify_functions is False
        assert config.token is None

    def test_base_url_is_normalized(self):
        assert ClientConfig(base_url='http://localhost:3000/v2/').base_url == 'http://localhost:3000/v2'

    @pytest.mark.parametrize("kwargs", [
        {'base_url': 'ftp://api.actorgate.io'},
        {'max_attempts': 0},
        {'timeout_secs': 0},
        {'backoff_multiplier': 0.5},
        {'jitter_ms': -1},
        {'unknown_option': True},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**kwargs)

    def test_blank_token_means_anonymous(self):
        assert ClientConfig(token='   ').token is None

    def test_to_retry_policy(self):
        config = ClientConfig(max_attempts=4, base_delay_ms=100, max_delay_ms=2000, backoff_multiplier=3, jitter_ms=0)
        policy = config.to_retry_policy()

        assert isinstance(policy, RetryPolicy)
        assert policy.max_attempts == 4
        assert policy.delay_bounds(2) == (900, 900)

    def test_masked_dict_hides_token(self):
        assert ClientConfig(token='secret').masked_dict()['token'] == '***MASKED***'


class TestConfigManager:
    """Test suite for ConfigManager"""

    def test_hierarchical_loading(self, temp_config_dir, clean_env):
        config = ConfigManager(config_path=temp_config_dir, environment='development').load_config()

        assert config.base_url == SAMPLE_CONFIGURATIONS['default']['base_url']
        assert config.timeout_secs == 30
        assert config.max_attempts == 2          # development overrides default
        assert config.gzip_enabled is False
        assert config.user_agent_suffix == 'local-dev'

    def test_environment_from_variable(self, temp_config_dir, clean_env):
        clean_env.setenv('ACTORGATE_ENV', 'production')
        manager = ConfigManager(config_path=temp_config_dir)

        assert manager.environment == 'production'
        assert manager.load_config().max_attempts == 4

    def test_env_overrides(self, temp_config_dir, clean_env):
        clean_env.setenv('ACTORGATE_MAX_ATTEMPTS', '7')
        clean_env.setenv('ACTORGATE_GZIP_ENABLED', 'true')
        clean_env.setenv('ACTORGATE_TOKEN', 'env-token')
        clean_env.setenv('ACTORGATE_NOT_A_FIELD', 'ignored')

        config = ConfigManager(config_path=temp_config_dir, environment='development').load_config()

        assert config.max_attempts == 7
        assert config.gzip_enabled is True
        assert config.token == 'env-token'

    def test_config_is_cached(self, temp_config_dir, clean_env):
        manager = ConfigManager(config_path=temp_config_dir)
        assert manager.load_config() is manager.load_config()

    def test_missing_directory_gives_defaults(self, tmp_path, clean_env):
        config = ConfigManager(config_path=tmp_path / 'missing').load_config()
        assert config == ClientConfig()

    def test_invalid_configuration(self, tmp_path, clean_env):
        with open(tmp_path / 'default_config.yaml', 'w') as f:
            yaml.dump(SAMPLE_CONFIGURATIONS['invalid'], f)

        with pytest.raises(ValueError, match='Invalid configuration'):
            ConfigManager(config_path=tmp_path).load_config()

    def test_invalid_yaml(self, tmp_path, clean_env):
        (tmp_path / 'default_config.yaml').write_text('base_url: [unclosed')

        with pytest.raises(ValueError, match='Invalid YAML'):
            ConfigManager(config_path=tmp_path).load_config()

    def test_non_mapping_yaml(self, tmp_path, clean_env):
        (tmp_path / 'default_config.yaml').write_text('- a\n- b\n')

        with pytest.raises(ValueError):
            ConfigManager(config_path=tmp_path).load_config()

    def test_update_config(self, temp_config_dir, clean_env):
        manager = ConfigManager(config_path=temp_config_dir)
        updated = manager.update_config({'jitter_ms': 0})

        assert updated.jitter_ms == 0
        assert manager.load_config() is updated
        with pytest.raises(ValueError):
            manager.update_config({'max_attempts': -1})

    def test_save_config_omits_token(self, tmp_path, clean_env):
        clean_env.setenv('ACTORGATE_TOKEN', 'secret')
        manager = ConfigManager(config_path=tmp_path)
        manager.save_config('local')

        saved = yaml.safe_load((tmp_path / 'local.yaml').read_text())
        assert 'token' not in saved
        assert saved['max_attempts'] == 9

    def test_save_config_invalid_target(self, tmp_path, clean_env):
        with pytest.raises(ValueError):
            ConfigManager(config_path=tmp_path).save_config('user')

    def test_reload_config(self, temp_config_dir, clean_env):
        manager = ConfigManager(config_path=temp_config_dir, environment='development')
        assert manager.load_config().max_attempts == 2

        clean_env.setenv('ACTORGATE_MAX_ATTEMPTS', '5')
        assert manager.reload_config().max_attempts == 5

    def test_default_config_path(self, temp_config_dir, clean_env):
        with patch.object(ConfigManager, '_get_default_config_path') as mock_path:
            mock_path.return_value = temp_config_dir
            manager = ConfigManager()

        assert manager.config_files['default'] == temp_config_dir / 'default_config.yaml'

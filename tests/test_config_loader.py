"""
Test suite for ConfigLoader and ClientConfig
Following TDD approach with AAA pattern and descriptive naming
"""

import tempfile
from pathlib import Path

import pytest

from sunlight_api.config_loader import ConfigLoader, ClientConfig, DEFAULT_API_KEY_ENV
from sunlight_api.errors import ConfigurationError, MissingApiKeyError


def write_temp_config(content: str, suffix: str) -> Path:
    with tempfile.NamedTemporaryFile(mode='w', suffix=suffix, delete=False) as f:
        f.write(content)
        return Path(f.name)


class TestConfigLoader:
    """Test suite for loading configuration files"""

    def test_load_config_with_valid_toml_returns_client_config(self):
        """
        Test that a complete TOML file populates every ClientConfig field
        """
        # Arrange
        config_path = write_temp_config("""
        [client]
        api_key_env = "CONGRESS_KEY"
        user_agent = "civic-dashboard/2.0"

        [apis.congress]
        url = "https://congress.staging.local/"

        [cache]
        enabled = true
        expiration_seconds = 86400

        [logging]
        level = "DEBUG"
        log_file_name = "logs/sunlight.log"
        """, '.toml')

        try:
            # Act
            result = ConfigLoader.load_config(config_path)

            # Assert
            assert isinstance(result, ClientConfig)
            assert result.api_key is None
            assert result.api_key_env == "CONGRESS_KEY"
            assert result.user_agent == "civic-dashboard/2.0"
            assert result.api_urls == {'congress': "https://congress.staging.local/"}
            assert result.cache == {'enabled': True, 'expiration_seconds': 86400}
            assert result.logging['level'] == "DEBUG"
        finally:
            config_path.unlink()

    def test_load_config_with_valid_yaml_returns_client_config(self):
        """
        Test that YAML files are supported as well
        """
        # Arrange
        config_path = write_temp_config(
            "client:\n"
            "  api_key: abc123\n"
            "  base_url: http://localhost:8000/\n"
            "apis:\n"
            "  party_time:\n"
            "    url: http://partytime.local/api/v1/\n",
            '.yml'
        )

        try:
            # Act
            result = ConfigLoader.load_config(config_path)

            # Assert
            assert result.api_key == "abc123"
            assert result.base_url == "http://localhost:8000/"
            assert result.api_urls == {'party_time': "http://partytime.local/api/v1/"}
            assert result.api_key_env == DEFAULT_API_KEY_ENV
        finally:
            config_path.unlink()

    def test_load_config_with_empty_yaml_returns_defaults(self):
        """
        Test that an empty YAML file yields default configuration
        """
        # Arrange
        config_path = write_temp_config("", '.yaml')

        try:
            # Act
            result = ConfigLoader.load_config(config_path)

            # Assert
            assert result == ClientConfig()
        finally:
            config_path.unlink()

    def test_load_config_with_missing_file_raises_file_not_found_error(self):
        """
        Test that a missing file is reported
        """
        # Act & Assert
        with pytest.raises(FileNotFoundError) as exc_info:
            ConfigLoader.load_config(Path("/nonexistent/sunlight.toml"))

        assert "Configuration file not found" in str(exc_info.value)

    def test_load_config_with_invalid_toml_raises_configuration_error(self):
        """
        Test that TOML syntax errors are wrapped
        """
        # Arrange
        config_path = write_temp_config("[client\napi_key = ", '.toml')

        try:
            # Act & Assert
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader.load_config(config_path)

            assert "Invalid TOML syntax" in str(exc_info.value)
        finally:
            config_path.unlink()

    def test_load_config_with_unsupported_suffix_raises_configuration_error(self):
        """
        Test that only TOML and YAML are accepted
        """
        # Arrange
        config_path = write_temp_config("{}", '.json')

        try:
            # Act & Assert
            with pytest.raises(ConfigurationError):
                ConfigLoader.load_config(config_path)
        finally:
            config_path.unlink()

    def test_parse_config_with_invalid_sections_lists_every_problem(self):
        """
        Test that all invalid items are reported together
        """
        # Arrange
        config_data = {
            'client': {'apikey': 'typo'},
            'cache': 'yes'
        }

        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.parse_config(config_data)

        error_message = str(exc_info.value)
        assert "Section [cache] must be a table" in error_message
        assert "Unknown key 'apikey' in section [client]" in error_message

    def test_parse_config_with_api_section_missing_url_raises_error(self):
        """
        Test that per-API sections must define a url
        """
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.parse_config({'apis': {'congress': {'timeout': 3}}})

        assert "[apis.congress]" in str(exc_info.value)


class TestClientConfig:
    """Test suite for ClientConfig option handling"""

    def test_with_options_with_string_sets_key(self):
        """
        Test that a bare string becomes the API key
        """
        # Act
        result = ClientConfig().with_options("abc")

        # Assert
        assert result.api_key == "abc"

    def test_with_options_returns_copy(self):
        """
        Test that the original configuration is left untouched
        """
        # Arrange
        original = ClientConfig(api_key="old")

        # Act
        result = original.with_options({'key': 'new'})

        # Assert
        assert result.api_key == "new"
        assert original.api_key == "old"

    def test_with_options_with_unrecognised_entry_ignores_it(self):
        """
        Test that only key and url are read from an option mapping
        """
        # Act
        result = ClientConfig().with_options({'key': 'abc', 'apikey': 'typo'})

        # Assert
        assert result == ClientConfig(api_key="abc")

    def test_with_options_with_list_raises_configuration_error(self):
        """
        Test unsupported option types
        """
        # Act & Assert
        with pytest.raises(ConfigurationError):
            ClientConfig().with_options(["abc"])

    def test_url_for_prefers_global_override(self):
        """
        Test URL resolution precedence
        """
        # Arrange
        config = ClientConfig(base_url="http://global/", api_urls={'congress': "http://congress/"})

        # Act & Assert
        assert config.url_for('congress', "https://default/") == "http://global/"
        assert ClientConfig(api_urls={'congress': "http://congress/"}).url_for(
            'congress', "https://default/") == "http://congress/"
        assert ClientConfig().url_for('congress', "https://default/") == "https://default/"

    def test_resolve_api_key_reads_configured_environment_variable(self, monkeypatch):
        """
        Test the environment variable fallback
        """
        # Arrange
        monkeypatch.setenv("CONGRESS_KEY", "env-key")
        config = ClientConfig(api_key_env="CONGRESS_KEY")

        # Act
        result = config.resolve_api_key()

        # Assert
        assert result == "env-key"

    def test_resolve_api_key_without_any_key_raises_missing_api_key_error(self, monkeypatch):
        """
        Test that a missing key names the environment variable to set
        """
        # Arrange
        monkeypatch.delenv(DEFAULT_API_KEY_ENV, raising=False)

        # Act & Assert
        with pytest.raises(MissingApiKeyError) as exc_info:
            ClientConfig().resolve_api_key()

        assert DEFAULT_API_KEY_ENV in str(exc_info.value)

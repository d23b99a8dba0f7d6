"""
ConfigLoader module for loading and validating client configuration
from TOML or YAML files and init options
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .errors import ConfigurationError, MissingApiKeyError

logger = logging.getLogger(__name__)

DEFAULT_API_KEY_ENV = "SUNLIGHT_API_KEY"
DEFAULT_USER_AGENT = "sunlight-api/0.1.0"


@dataclass
class ClientConfig:
    """Configuration for a SunlightClient"""
    api_key: Optional[str] = None
    api_key_env: str = DEFAULT_API_KEY_ENV
    base_url: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    api_urls: Dict[str, str] = field(default_factory=dict)
    cache: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)

    def url_for(self, api_name: str, default_url: str) -> str:
        """Resolve the base URL for an API, honouring the global then per-API overrides"""
        if self.base_url:
            return self.base_url
        return self.api_urls.get(api_name, default_url)

    def resolve_api_key(self) -> str:
        """
        Return the configured API key, falling back to the environment

        Raises:
            MissingApiKeyError: If no key is configured or set in the environment
        """
        if self.api_key:
            return self.api_key

        value = os.getenv(self.api_key_env)
        if value:
            return value

        raise MissingApiKeyError(
            f"Must provide an api key, either directly or via the {self.api_key_env} environment variable"
        )

    def with_options(self, opts: Union[str, Mapping[str, Any], None]) -> "ClientConfig":
        """
        Apply init options to a copy of this configuration

        Args:
            opts: A bare API key string, or a mapping with optional
                  'key' and 'url' entries

        Returns:
            Updated ClientConfig; a missing key keeps the current one and
            mapping entries other than 'key' and 'url' are ignored

        Raises:
            ConfigurationError: If opts is neither a string nor a mapping
        """
        if opts is None:
            return replace(self)

        if isinstance(opts, str):
            return replace(self, api_key=opts)

        if isinstance(opts, Mapping):
            unknown = set(opts) - {'key', 'url'}
            if unknown:
                logger.warning(f"Ignoring unrecognised init options: {', '.join(sorted(map(str, unknown)))}")
            return replace(
                self,
                api_key=opts.get('key') or self.api_key,
                base_url=opts.get('url') or self.base_url
            )

        raise ConfigurationError("Must initialise with either an api key or a config mapping")


class ConfigLoader:
    """Loads and validates client configuration files"""

    # Sections that must be tables when present
    TABLE_SECTIONS = ['client', 'apis', 'cache', 'logging']

    CLIENT_KEYS = {'api_key', 'api_key_env', 'base_url', 'user_agent'}

    @staticmethod
    def load_config(config_path: Path) -> ClientConfig:
        """
        Load client configuration from a TOML or YAML file

        Args:
            config_path: Path to a .toml, .yml or .yaml file

        Returns:
            ClientConfig populated from the file

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ConfigurationError: If the file is malformed or has invalid sections
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            config_data = ConfigLoader._load_toml(config_path)
        elif config_path.suffix.lower() in ('.yml', '.yaml'):
            config_data = ConfigLoader._load_yaml(config_path)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {config_path.suffix}")

        return ConfigLoader.parse_config(config_data)

    @staticmethod
    def _load_toml(config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'rb') as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e

    @staticmethod
    def _load_yaml(config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Top level of {config_path} must be a mapping")
        return config_data

    @staticmethod
    def parse_config(config_data: Dict[str, Any]) -> ClientConfig:
        """
        Build a ClientConfig from already parsed configuration data

        Raises:
            ConfigurationError: If any section has the wrong shape
        """
        ConfigLoader._validate_sections(config_data)

        client = config_data.get('client', {})
        api_urls = {}
        for api_name, api_section in config_data.get('apis', {}).items():
            if not isinstance(api_section, dict) or 'url' not in api_section:
                raise ConfigurationError(f"Section [apis.{api_name}] must define a url")
            api_urls[api_name] = api_section['url']

        return ClientConfig(
            api_key=client.get('api_key'),
            api_key_env=client.get('api_key_env', DEFAULT_API_KEY_ENV),
            base_url=client.get('base_url'),
            user_agent=client.get('user_agent', DEFAULT_USER_AGENT),
            api_urls=api_urls,
            cache=config_data.get('cache', {}),
            logging=config_data.get('logging', {})
        )

    @staticmethod
    def _validate_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate section types and client keys

        Raises:
            ConfigurationError: Listing every invalid item found
        """
        invalid_items = []

        for section_name in ConfigLoader.TABLE_SECTIONS:
            if section_name in config_data and not isinstance(config_data[section_name], dict):
                invalid_items.append(f"Section [{section_name}] must be a table")

        client = config_data.get('client', {})
        if isinstance(client, dict):
            for key in client:
                if key not in ConfigLoader.CLIENT_KEYS:
                    invalid_items.append(f"Unknown key '{key}' in section [client]")

        if invalid_items:
            raise ConfigurationError(
                f"Invalid configuration items: {', '.join(invalid_items)}"
            )


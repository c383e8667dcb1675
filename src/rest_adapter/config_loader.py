"""
ConfigLoader module for loading and validating TOML client configuration files
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .error_classifier import StatusCodeConfig
from .exceptions import ConfigurationError, EnvironmentVariableError
from .pagination_strategy import PageLocator


@dataclass
class ClientConfig:
    """Configuration data class for the REST client from TOML file"""
    name: str
    hostname: str
    authentication: Dict[str, Any]
    use_ssl: bool = True
    port: Optional[int] = None
    verify_ssl: bool = True
    timeout: float = 20.0
    status_codes: StatusCodeConfig = field(default_factory=StatusCodeConfig)
    pagination: PageLocator = field(default_factory=PageLocator)
    max_workers: Optional[int] = None
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads and validates TOML configuration files"""

    # Required configuration sections and their mandatory keys
    REQUIRED_SECTIONS = {
        'api': ['name', 'hostname'],
        'authentication': ['type']
    }

    # Environment variable references each authentication type needs
    AUTHENTICATION_ENV_KEYS = {
        'bearer_token': ['token_env'],
        'basic': ['username_env', 'password_env'],
        'api_key': ['api_key_env']
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> ClientConfig:
        """
        Load client configuration from TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            ClientConfig object with all configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is invalid or required configuration is missing
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}")

        return ConfigLoader.build_config(config_data)

    @staticmethod
    def build_config(config_data: Dict[str, Any]) -> ClientConfig:
        """
        Build a ClientConfig from already parsed configuration data

        Raises:
            ConfigurationError: If required configuration is missing or malformed
        """
        ConfigLoader._validate_required_sections(config_data)

        api = config_data['api']
        pagination = dict(config_data.get('pagination', {}))
        max_workers = pagination.pop('max_workers', None)

        try:
            status_codes = StatusCodeConfig(**config_data.get('status_codes', {}))
            locator = PageLocator(**pagination)
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}")

        return ClientConfig(
            name=api['name'],
            hostname=api['hostname'],
            authentication=config_data['authentication'],
            use_ssl=api.get('use_ssl', True),
            port=api.get('port'),
            verify_ssl=api.get('verify_ssl', True),
            timeout=float(api.get('timeout', 20.0)),
            status_codes=status_codes,
            pagination=locator,
            max_workers=max_workers,
            logging=config_data.get('logging', {})
        )

    @staticmethod
    def _validate_required_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that all required configuration sections and keys are present

        Args:
            config_data: Parsed TOML configuration data

        Raises:
            ConfigurationError: If any required section or key is missing
        """
        missing_items = []

        for section_name, required_keys in ConfigLoader.REQUIRED_SECTIONS.items():
            if section_name not in config_data:
                missing_items.append(f"Section [{section_name}]")
            else:
                section_data = config_data[section_name]
                for key in required_keys:
                    if key not in section_data:
                        missing_items.append(f"Key '{key}' in section [{section_name}]")

        auth_type = config_data.get('authentication', {}).get('type')
        if auth_type is not None:
            if auth_type not in ConfigLoader.AUTHENTICATION_ENV_KEYS:
                missing_items.append(f"Supported authentication type (got '{auth_type}')")
            else:
                for key in ConfigLoader.AUTHENTICATION_ENV_KEYS[auth_type]:
                    if key not in config_data['authentication']:
                        missing_items.append(f"Key '{key}' in section [authentication]")

        if missing_items:
            raise ConfigurationError(
                f"Missing required configuration items: {', '.join(missing_items)}"
            )

    @staticmethod
    def validate_environment_variables(config: ClientConfig) -> bool:
        """
        Validate that all required environment variables are set

        Args:
            config: ClientConfig object to validate

        Returns:
            True if all environment variables are present

        Raises:
            EnvironmentVariableError: If any required environment variables are missing
        """
        missing_vars: List[str] = []

        for key, value in config.authentication.items():
            if key.endswith('_env') and isinstance(value, str):
                if not os.getenv(value):
                    missing_vars.append(value)

        if missing_vars:
            raise EnvironmentVariableError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        return True

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value with proper error handling

        Args:
            env_var_name: Name of the environment variable

        Returns:
            Value of the environment variable

        Raises:
            EnvironmentVariableError: If environment variable is not set
        """
        value = os.getenv(env_var_name)
        if value is None:
            raise EnvironmentVariableError(f"Environment variable '{env_var_name}' is not set")
        return value

    @staticmethod
    def build_credentials(config: ClientConfig) -> Dict[str, Any]:
        """
        Resolve the environment variable references of the authentication section

        Args:
            config: ClientConfig object holding the authentication section

        Returns:
            Credentials dictionary, e.g. {'type': 'basic', 'username': ..., 'password': ...}

        Raises:
            EnvironmentVariableError: If a referenced environment variable is not set
        """
        credentials: Dict[str, Any] = {'type': config.authentication['type']}

        for key, value in config.authentication.items():
            if key == 'type':
                continue
            if key.endswith('_env'):
                credentials[key[:-len('_env')]] = ConfigLoader.get_environment_value(value)
            else:
                credentials[key] = value

        return credentials

"""
Configuration loader and validator for the performance monitor
"""

import copy
import json
import os
import re
from typing import Dict, Any, Optional

import structlog
import yaml

from .errors import ConfigLoadError

logger = structlog.get_logger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'monitoring': {
        'cpu_threshold': 80.0,
        'check_interval': 300,
        'docker_stats_timeout': 10,
    },
    'email': {
        'enabled': False,
        'smtp_server': 'smtp.gmail.com',
        'smtp_port': 587,
        'use_tls': True,
        'sender_email': '',
        'sender_password': '',
        'recipient_email': '',
    },
    'logging': {
        'level': 'INFO',
        'file': 'monitoring.log',
        'max_size_mb': 10,
        'backup_count': 5,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of base with override applied section by section"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads and validates monitor configuration from a JSON or YAML file"""

    def __init__(self, config_path: str = 'config.json'):
        """
        Initialize config loader

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self.config = copy.deepcopy(DEFAULT_CONFIG)

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file

        Returns:
            Dict containing the effective configuration

        Raises:
            ConfigLoadError: If the file is missing, unparseable or invalid
        """
        if not os.path.exists(self.config_path):
            raise ConfigLoadError(self.config_path, "file not found")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                if self.config_path.endswith(('.yml', '.yaml')):
                    raw = yaml.safe_load(f)
                else:
                    raw = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigLoadError(self.config_path, str(e)) from e

        if not isinstance(raw, dict):
            raise ConfigLoadError(self.config_path, "top level must be an object")

        # Expand environment variables
        raw = self._expand_env_vars(raw)

        config = _deep_merge(DEFAULT_CONFIG, raw)
        try:
            self._validate(config)
        except ValueError as e:
            raise ConfigLoadError(self.config_path, str(e)) from e

        self.config = config
        return self.config

    def _expand_env_vars(self, config: Any) -> Any:
        """
        Recursively expand environment variables in config
        Supports ${VAR_NAME} syntax

        Args:
            config: Configuration dict or value

        Returns:
            Config with expanded environment variables
        """
        if isinstance(config, dict):
            return {key: self._expand_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._expand_env_vars(item) for item in config]
        elif isinstance(config, str):
            pattern = r'\$\{([^}]+)\}'

            def replace_env(match):
                var_name = match.group(1)
                return os.environ.get(var_name, match.group(0))

            return re.sub(pattern, replace_env, config)
        else:
            return config

    @staticmethod
    def _validate(config: Dict[str, Any]):
        """
        Validate configuration structure and values

        Raises:
            ValueError: If configuration is invalid
        """
        for section in ('monitoring', 'email', 'logging'):
            if not isinstance(config.get(section), dict):
                raise ValueError(f"Section '{section}' must be an object")

        monitoring = config['monitoring']
        threshold = monitoring['cpu_threshold']
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ValueError("cpu_threshold must be a number")
        if threshold < 0 or threshold > 100:
            raise ValueError("cpu_threshold must be between 0 and 100")

        for key in ('check_interval', 'docker_stats_timeout'):
            value = monitoring[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{key} must be an integer of at least 1")

        port = config['email']['smtp_port']
        if isinstance(port, bool) or not isinstance(port, int) or port < 1 or port > 65535:
            raise ValueError("smtp_port must be between 1 and 65535")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-separated key path

        Args:
            key_path: Dot-separated path (e.g., 'email.smtp_server')
            default: Default value if key not found

        Returns:
            Configuration value

        Example:
            config.get('monitoring.cpu_threshold')  # Returns 80.0
            config.get('email.smtp_server')         # Returns 'smtp.gmail.com'
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def section(self, name: str) -> Dict[str, Any]:
        """Return a copy of one top-level section"""
        return copy.deepcopy(self.config.get(name, {}))

    def save_to_file(self, path: Optional[str] = None):
        """Write the effective configuration as pretty-printed JSON"""
        path = path or self.config_path
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)
            f.write('\n')


def load_config(config_path: str = 'config.json') -> ConfigLoader:
    """
    Load configuration, falling back to built-in defaults on any failure

    Args:
        config_path: Path to the configuration file

    Returns:
        ConfigLoader holding either the file's or the default configuration
    """
    loader = ConfigLoader(config_path)
    try:
        loader.load()
        logger.info("Configuration loaded", path=config_path)
    except ConfigLoadError as e:
        logger.warning("Using default configuration", path=config_path, error=str(e))
    return loader


# Example usage
if __name__ == '__main__':
    config = load_config()

    print(f"🎯 CPU Threshold: {config.get('monitoring.cpu_threshold')}%")
    print(f"⏱️  Check Interval: {config.get('monitoring.check_interval')} seconds")
    print(f"📧 SMTP Server: {config.get('email.smtp_server')}:{config.get('email.smtp_port')}")
    print(f"📬 Recipient: {config.get('email.recipient_email') or 'not set'}")

#!/usr/bin/env python3
"""
Configuration Management Module for Good4Work CLI

Handles hierarchical configuration loading from defaults, profiles, config
files, .env files and environment variables.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import dotenv_values

from nft.config import StorageConfig
from nft.exceptions import ConfigurationError

# Configuration file locations in order of precedence (highest to lowest)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.good4work.yml',
    Path.cwd() / '.good4work.json',
    Path.home() / '.good4work' / 'config.yml',
    Path.home() / '.good4work' / 'config.json',
]

# Environment variable prefix; nested keys are separated by a double underscore
# e.g. G4W_STORAGE__TIMEOUT -> {'storage': {'timeout': ...}}
ENV_PREFIX = 'G4W_'
ENV_NESTING = '__'

# Well-known variable names mapped onto configuration paths
ENV_ALIASES = {
    'API_KEY': 'storage.api_key',
    'API_SECRET': 'storage.api_secret',
    'STORAGE_TOKEN': 'storage.storage_token',
    'PINATA_API_KEY': 'storage.api_key',
    'PINATA_SECRET_KEY': 'storage.api_secret',
    'WEB3_STORAGE_TOKEN': 'storage.storage_token',
    'RPC_URL': 'minting.rpc_url',
    'NFT_CONTRACT': 'minting.contract_address',
    'PRIVATE_KEY': 'minting.private_key',
}

SECRET_KEYS = {'api_key', 'api_secret', 'storage_token', 'private_key'}

# Default configuration values
DEFAULT_CONFIG = {
    'storage': {
        'service': 'pinata',  # pinata, web3.storage
        'timeout': 120,
        'max_attempts': 1,
        'retry_backoff': 1.0,
        'transport_retries': 3,
        'temp_dir': None,
    },
    'minting': {
        'rpc_url': 'https://rpc.sepolia.org',
        'contract_address': None,
        'abi_path': 'out/Good4WorkNFT.sol/Good4WorkNFT.json',
        'receipt_timeout': 120,
    },
    'cli': {
        'output_format': 'table',  # table, json, yaml
    },
}

# Configuration profiles
PROFILES = {
    'production': {
        'storage': {'max_attempts': 3, 'retry_backoff': 2.0},
    },
    'development': {
        'storage': {'timeout': 30},
        'minting': {'rpc_url': 'http://127.0.0.1:8545'},
    },
}


class ConfigurationManager:
    """Manages hierarchical configuration with environment variable support."""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None,
                 env_file: Optional[str] = '.env', environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path
            profile: Configuration profile to load (production, development)
            env_file: Path of a dotenv file to read, or None to skip
            environ: Environment mapping (defaults to os.environ)
        """
        self.logger = logging.getLogger('g4w-cli.config')
        self.config_file = config_file
        self.profile = profile
        self.env_file = env_file
        self.environ = os.environ if environ is None else environ
        self._config_cache = None
        self._config_sources = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigurationError: If an explicit config file is missing or invalid
        """
        if self._config_cache is not None:
            return self._config_cache

        configs = [copy.deepcopy(DEFAULT_CONFIG)]
        self._config_sources = ["defaults"]

        if self.profile:
            if self.profile not in PROFILES:
                raise ConfigurationError(f"Unknown configuration profile: {self.profile}")
            configs.append(PROFILES[self.profile])
            self._config_sources.append(f"profile:{self.profile}")
            self.logger.debug(f"Applied profile: {self.profile}")

        if self.config_file:
            configs.append(self._load_config_file(Path(self.config_file)))
            self._config_sources.append(f"file:{self.config_file}")
        else:
            for config_path in CONFIG_SEARCH_PATHS:
                if config_path.exists():
                    configs.append(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break  # Use first found config file

        if self.env_file and Path(self.env_file).exists():
            configs.append(self._map_environment(dotenv_values(self.env_file)))
            self._config_sources.append(f"dotenv:{self.env_file}")

        env_config = self._map_environment(self.environ)
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")

        self._config_cache = self._deep_merge(*configs)
        return self._config_cache

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path, 'r') as f:
                if path.suffix in ('.yml', '.yaml'):
                    data = yaml.safe_load(f)
                elif path.suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unknown config file format: {path}")
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")
        return data

    def _map_environment(self, environ) -> Dict[str, Any]:
        """Map environment variables onto the configuration structure."""
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if value is None or value == "":
                continue

            if key in ENV_ALIASES:
                self._set_path(env_config, ENV_ALIASES[key].split('.'), value)
            elif key.startswith(ENV_PREFIX):
                parts = key[len(ENV_PREFIX):].lower().split(ENV_NESTING)
                if parts[-1] not in SECRET_KEYS:
                    value = self._parse_env_value(value)
                self._set_path(env_config, parts, value)

        return env_config

    @staticmethod
    def _set_path(config: Dict[str, Any], parts: List[str], value: Any):
        current = config
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ('true', 'yes'):
            return True
        if value.lower() in ('false', 'no'):
            return False

        try:
            return json.loads(value)
        except ValueError:
            return value

    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result = {}

        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = value

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'storage.timeout')
            default: Default value if key not found
        """
        current = self.load()

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def storage_config(self) -> StorageConfig:
        """Build the storage configuration struct from the merged settings."""
        return StorageConfig.from_mapping(self.get('storage', {}))

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return self._config_sources

    def masked(self) -> Dict[str, Any]:
        """Get the merged configuration with secrets masked."""
        def mask(obj):
            if isinstance(obj, dict):
                return {
                    k: ("***" if k in SECRET_KEYS and v else mask(v))
                    for k, v in obj.items()
                }
            return obj

        return mask(self.load())

    def reset(self):
        """Reset configuration cache."""
        self._config_cache = None
        self._config_sources = []

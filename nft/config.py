"""
Good4Work NFT Tools - Storage Configuration

Explicit configuration for the storage backends and the upload orchestrator.
Built once at process start and passed into each component.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

PINATA_ENDPOINT = "https://api.pinata.cloud/pinning/pinFileToIPFS"
WEB3_STORAGE_ENDPOINT = "https://api.web3.storage/upload"

_TEXT_SETTINGS = ('api_key', 'api_secret', 'storage_token',
                  'pinata_endpoint', 'web3_storage_endpoint')


class StorageService(str, Enum):
    """Supported IPFS pinning services."""
    PINATA = "pinata"
    WEB3_STORAGE = "web3.storage"


@dataclass(frozen=True)
class StorageConfig:
    """Credentials and upload behavior for the storage backends."""

    # Pinata credentials
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    # web3.storage credentials
    storage_token: Optional[str] = None

    # Behavior
    timeout: float = 120.0  # seconds per upload request
    max_attempts: int = 1
    retry_backoff: float = 1.0
    transport_retries: int = 3
    temp_dir: Optional[str] = None

    # Endpoints
    pinata_endpoint: str = PINATA_ENDPOINT
    web3_storage_endpoint: str = WEB3_STORAGE_ENDPOINT

    def __post_init__(self):
        if self.timeout <= 0:
            raise ConfigurationError(f"Upload timeout must be positive: {self.timeout}")
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1: {self.max_attempts}")
        if self.retry_backoff < 0:
            raise ConfigurationError(f"retry_backoff cannot be negative: {self.retry_backoff}")

    @property
    def has_pinata_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def has_web3_storage_credentials(self) -> bool:
        return bool(self.storage_token)

    def available_services(self):
        """List services whose credentials are configured."""
        services = []
        if self.has_pinata_credentials:
            services.append(StorageService.PINATA)
        if self.has_web3_storage_credentials:
            services.append(StorageService.WEB3_STORAGE)
        return services

    def validate(self) -> 'StorageConfig':
        """
        Ensure at least one backend is usable.

        Raises:
            ConfigurationError: If neither Pinata nor web3.storage credentials are set
        """
        if not self.available_services():
            raise ConfigurationError(
                "No IPFS service credentials found. Please set API_KEY and API_SECRET "
                "or STORAGE_TOKEN"
            )
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'StorageConfig':
        """Create from a mapping, ignoring unknown keys and empty values."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {
            key: value for key, value in data.items()
            if key in known and value not in (None, "")
        }

        # Credentials and endpoints are text even when env or YAML parsing made them numbers
        for key in _TEXT_SETTINGS:
            if key in values:
                values[key] = str(values[key])

        # Coerce numeric settings that may arrive as strings from files or env
        try:
            for key, cast in (('timeout', float), ('retry_backoff', float),
                              ('max_attempts', int), ('transport_retries', int)):
                if key in values:
                    values[key] = cast(values[key])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid storage setting: {e}") from e

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with credentials masked."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ('api_key', 'api_secret', 'storage_token') and value:
                value = "***"
            result[f.name] = value
        return result

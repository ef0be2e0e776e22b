"""
Good4Work NFT Tools - IPFS Storage Backends

Uploads files to IPFS pinning services behind one interface. Provider failures
are never raised to the caller: every upload returns an UploadResult that is
either a success carrying the content identifier or a failure carrying the
error message.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import StorageConfig, StorageService
from .exceptions import ConfigurationError, UploadError

IPFS_SCHEME = "ipfs://"


@dataclass(frozen=True)
class UploadResult:
    """Outcome of an upload: success with a content id, or failure with an error."""

    success: bool
    content_id: Optional[str] = None
    uri: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, content_id: str) -> 'UploadResult':
        return cls(success=True, content_id=content_id, uri=f"{IPFS_SCHEME}{content_id}")

    @classmethod
    def failed(cls, error: str) -> 'UploadResult':
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire format handed to minting code."""
        if self.success:
            return {
                "success": True,
                "contentId": self.content_id,
                "uri": self.uri
            }
        return {
            "success": False,
            "error": self.error
        }


def create_session(config: StorageConfig) -> requests.Session:
    """Create an HTTP session with transport-level retries."""
    session = requests.Session()
    retry_strategy = Retry(
        total=config.transport_retries,
        backoff_factor=config.retry_backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset(["POST"])
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class StorageBackend(ABC):
    """Abstract base class for IPFS pinning backends."""

    display_name = "storage backend"

    def __init__(self, config: StorageConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self._check_credentials()
        self.session = session or create_session(config)

    @abstractmethod
    def _check_credentials(self) -> None:
        """Raise ConfigurationError when credentials are missing."""
        pass

    @abstractmethod
    def _upload(self, file_path: Path, name: str) -> str:
        """Upload the file and return its content identifier."""
        pass

    @abstractmethod
    def get_service(self) -> StorageService:
        """Get service identifier."""
        pass

    def upload(self, file_path: Union[str, Path], name: Optional[str] = None) -> UploadResult:
        """
        Upload a local file.

        Args:
            file_path: Path of the file to upload
            name: Display name for the upload (defaults to the file's base name)

        Returns:
            UploadResult describing success or failure
        """
        file_path = Path(file_path)
        display_name = name or file_path.name

        try:
            content_id = self._upload(file_path, display_name)
        except requests.Timeout as e:
            message = f"{self.display_name} upload timed out after {self.config.timeout}s: {e}"
            self.logger.error(message)
            return UploadResult.failed(message)
        except (requests.RequestException, UploadError, OSError, ValueError) as e:
            self.logger.error(f"{self.display_name} upload failed: {e}")
            return UploadResult.failed(str(e))

        self.logger.info(f"Uploaded {display_name} to {self.display_name}: {content_id}")
        return UploadResult.ok(content_id)

    def _extract_content_id(self, response: requests.Response, field_name: str) -> str:
        response.raise_for_status()
        payload = response.json()
        content_id = payload.get(field_name) if isinstance(payload, dict) else None
        if not content_id:
            raise UploadError(f"{self.display_name} response missing '{field_name}': {payload!r}")
        return content_id

    def close(self):
        """Close HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class PinataBackend(StorageBackend):
    """Pinata pinning service authenticated with an API key pair."""

    display_name = "Pinata"

    def _check_credentials(self) -> None:
        if not self.config.api_key or not self.config.api_secret:
            raise ConfigurationError("Pinata requires both API_KEY and API_SECRET")

    def _headers(self) -> Dict[str, str]:
        return {
            "pinata_api_key": self.config.api_key,
            "pinata_secret_api_key": self.config.api_secret
        }

    def _upload(self, file_path: Path, name: str) -> str:
        data = {"pinataMetadata": json.dumps({"name": name})}

        with open(file_path, 'rb') as f:
            response = self.session.post(
                self.config.pinata_endpoint,
                files={"file": (name, f)},
                data=data,
                headers=self._headers(),
                timeout=self.config.timeout
            )

        return self._extract_content_id(response, "IpfsHash")

    def get_service(self) -> StorageService:
        return StorageService.PINATA


class Web3StorageBackend(StorageBackend):
    """web3.storage content-addressed store authenticated with a bearer token."""

    display_name = "web3.storage"

    def _check_credentials(self) -> None:
        if not self.config.storage_token:
            raise ConfigurationError("web3.storage requires STORAGE_TOKEN")

    def _upload(self, file_path: Path, name: str) -> str:
        content = file_path.read_bytes()

        response = self.session.post(
            self.config.web3_storage_endpoint,
            data=content,
            headers={
                "Authorization": f"Bearer {self.config.storage_token}",
                "X-NAME": quote(name)
            },
            timeout=self.config.timeout
        )

        return self._extract_content_id(response, "cid")

    def get_service(self) -> StorageService:
        return StorageService.WEB3_STORAGE


def create_backend(service: Union[StorageService, str],
                   config: StorageConfig,
                   session: Optional[requests.Session] = None) -> StorageBackend:
    """
    Create the backend for a service.

    Raises:
        ConfigurationError: If the service is unknown or its credentials are missing
    """
    try:
        service = StorageService(service)
    except ValueError:
        raise ConfigurationError(f"Unknown storage service: {service}")

    if service is StorageService.PINATA:
        return PinataBackend(config, session=session)
    if service is StorageService.WEB3_STORAGE:
        return Web3StorageBackend(config, session=session)

    raise ConfigurationError(f"Unsupported storage service: {service.value}")

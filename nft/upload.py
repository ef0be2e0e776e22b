"""
Good4Work NFT Tools - Upload Orchestration

Serializes content to a transient local file, hands it to the selected storage
backend and always removes the transient file before returning.
"""

import json
import logging
import os
import re
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from .config import StorageConfig, StorageService
from .ipfs import StorageBackend, UploadResult, create_backend

RAW_CONTENT_TYPES = (bytes, bytearray, memoryview)

BackendFactory = Callable[[StorageService, StorageConfig], StorageBackend]


def serialize_content(content: Any) -> bytes:
    """Return raw bytes unchanged; serialize anything else as pretty-printed JSON."""
    if isinstance(content, RAW_CONTENT_TYPES):
        return bytes(content)
    return json.dumps(content, indent=2, ensure_ascii=False).encode('utf-8')


def _safe_suffix(file_name: str) -> str:
    base = Path(file_name).name
    return "_" + re.sub(r'[^A-Za-z0-9._-]', '_', base)


class UploadOrchestrator:
    """Uploads bytes or JSON documents through a pluggable storage backend."""

    def __init__(self, config: StorageConfig,
                 backend_factory: Optional[BackendFactory] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.backend_factory = backend_factory or create_backend
        self.logger = logging.getLogger(__name__)
        self._sleep = sleep

    @contextmanager
    def _transient_file(self, data: bytes, file_name: str) -> Iterator[Path]:
        """Write data to a uniquely named temp file, removed on every exit path."""
        path: Optional[Path] = None
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix="upload_",
                suffix=_safe_suffix(file_name),
                dir=self.config.temp_dir
            )
            path = Path(temp_name)
            try:
                f = os.fdopen(fd, 'wb')
            except Exception:
                os.close(fd)
                raise
            with f:
                f.write(data)
            yield path
        finally:
            if path is not None and path.exists():
                path.unlink()
                self.logger.debug(f"Removed transient file {path}")

    def upload_content(self, content: Any, file_name: str,
                       service: Union[StorageService, str] = StorageService.PINATA) -> UploadResult:
        """
        Upload content under the given file name.

        Args:
            content: Raw bytes, or any JSON-serializable value
            file_name: Display name for the upload
            service: Storage service to use (defaults to Pinata)

        Returns:
            UploadResult; write and upload errors are reported as failures

        Raises:
            ConfigurationError: If the selected service is not configured
        """
        backend = self.backend_factory(service, self.config)

        try:
            data = serialize_content(content)
            with self._transient_file(data, file_name) as path:
                return self._upload_with_retries(backend, path, file_name)
        except Exception as e:
            self.logger.error(f"Upload of {file_name} failed: {e}")
            return UploadResult.failed(str(e))
        finally:
            backend.close()

    def _upload_with_retries(self, backend: StorageBackend, path: Path,
                             file_name: str) -> UploadResult:
        attempts = self.config.max_attempts
        result = None

        for attempt in range(1, attempts + 1):
            result = backend.upload(path, file_name)
            if result.success:
                return result

            if attempt < attempts:
                delay = self.config.retry_backoff * 2 ** (attempt - 1)
                self.logger.warning(
                    f"Upload attempt {attempt}/{attempts} for {file_name} failed: "
                    f"{result.error}; retrying in {delay:.1f}s"
                )
                self._sleep(delay)

        return result


def upload_content(content: Any, file_name: str,
                   service: Union[StorageService, str] = StorageService.PINATA,
                   config: Optional[StorageConfig] = None) -> UploadResult:
    """Upload content with a one-off orchestrator."""
    return UploadOrchestrator(config or StorageConfig()).upload_content(content, file_name, service)

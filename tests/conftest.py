"""
Pytest configuration and fixtures for Good4Work NFT tool tests.
"""

import pytest
import requests
from unittest.mock import Mock

from nft.config import StorageConfig


@pytest.fixture
def transient_dir(tmp_path):
    """Directory used for transient upload files."""
    path = tmp_path / "transient"
    path.mkdir()
    return path


@pytest.fixture
def storage_config(transient_dir):
    """Storage configuration with credentials for both services."""
    return StorageConfig(
        api_key="test-api-key",
        api_secret="test-api-secret",
        storage_token="test-storage-token",
        timeout=5,
        retry_backoff=0,
        temp_dir=str(transient_dir)
    )


@pytest.fixture
def metadata_fields():
    """Minimal valid metadata fields."""
    return {
        "name": "Cert1",
        "description": "Completed task",
        "image": "ipfs://bafyTEST",
        "attributes": []
    }


def make_response(payload=None, status_error=None):
    """Create a mocked requests response."""
    response = Mock(spec=requests.Response)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    else:
        response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


@pytest.fixture
def mock_session():
    """Mocked HTTP session."""
    return Mock(spec=requests.Session)


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file paths."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def response_factory():
    """Factory for mocked HTTP responses."""
    return make_response

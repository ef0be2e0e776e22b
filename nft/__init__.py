"""
Good4Work NFT Tools - Metadata and IPFS Pipeline

This package builds ERC-721 metadata, hashes it for on-chain verification,
uploads files and documents to IPFS pinning services and mints tokens.
"""

from .exceptions import (
    NFTToolError,
    ValidationError,
    ConfigurationError,
    SerializationError,
    UploadError,
    MintError
)

from .metadata import (
    Trait,
    normalize_attributes,
    generate_metadata,
    create_protected_metadata,
    compose_protected_with_hash,
    MetadataSchema,
    MetadataValidator
)

from .hashing import canonical_bytes, compute_metadata_hash, verify_metadata_hash

from .config import StorageConfig, StorageService

from .ipfs import (
    UploadResult,
    StorageBackend,
    PinataBackend,
    Web3StorageBackend,
    create_backend
)

from .upload import UploadOrchestrator, upload_content

from .minting import MintResult, NFTMinter, load_contract_abi

__version__ = "1.0.0"

__all__ = [
    # Errors
    "NFTToolError",
    "ValidationError",
    "ConfigurationError",
    "SerializationError",
    "UploadError",
    "MintError",

    # Metadata
    "Trait",
    "normalize_attributes",
    "generate_metadata",
    "create_protected_metadata",
    "compose_protected_with_hash",
    "MetadataSchema",
    "MetadataValidator",

    # Hashing
    "canonical_bytes",
    "compute_metadata_hash",
    "verify_metadata_hash",

    # Storage
    "StorageConfig",
    "StorageService",
    "UploadResult",
    "StorageBackend",
    "PinataBackend",
    "Web3StorageBackend",
    "create_backend",
    "UploadOrchestrator",
    "upload_content",

    # Minting
    "MintResult",
    "NFTMinter",
    "load_contract_abi"
]

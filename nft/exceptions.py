"""
Exceptions for Good4Work NFT Tools

This module defines the error taxonomy shared by the metadata pipeline,
storage backends and minting helpers.
"""


class NFTToolError(Exception):
    """Base exception for all Good4Work NFT tool errors."""
    pass


class ValidationError(NFTToolError):
    """Raised when required metadata fields are missing or malformed."""
    pass


class ConfigurationError(NFTToolError):
    """Raised when required credentials or settings are missing."""
    pass


class SerializationError(NFTToolError):
    """Raised when a document cannot be canonically serialized."""
    pass


class UploadError(NFTToolError):
    """Raised inside storage backends when a provider rejects an upload."""
    pass


class MintError(NFTToolError):
    """Raised when a mint transaction fails or reverts."""
    pass

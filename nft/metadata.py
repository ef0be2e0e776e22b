"""
Good4Work NFT Tools - Metadata Management

This module builds ERC-721 metadata documents, normalizes trait inputs into the
standard trait schema, layers protected payloads on top of public metadata and
validates finished documents against JSON schemas.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from jsonschema import Draft7Validator
from jsonschema import ValidationError as SchemaValidationError

from .exceptions import ValidationError
from .hashing import compute_metadata_hash

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_SCHEMES = ('ipfs://', 'https://')
REQUIRED_FIELDS = ('name', 'description', 'image')

# Accepted keys for public data handed to the protected composer
_PUBLIC_DATA_ALIASES = {
    'name': 'name',
    'description': 'description',
    'image': 'image',
    'external_url': 'external_url',
    'externalUrl': 'external_url',
    'attributes': 'attributes',
    'additional_fields': 'additional_fields',
    'additionalFields': 'additional_fields',
}


@dataclass
class Trait:
    """Single NFT trait in the standard ``{trait_type, value}`` shape."""

    trait_type: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "trait_type": self.trait_type,
            "value": self.value
        }

    @classmethod
    def from_mapping(cls, data: Mapping) -> 'Trait':
        """Create a Trait from a canonical or single-key mapping."""
        normalized = _normalize_attribute(data)
        if not _is_canonical(normalized):
            raise ValidationError(f"Cannot interpret trait: {data!r}")
        return cls(trait_type=normalized['trait_type'], value=normalized['value'])


def _is_canonical(attr: Any) -> bool:
    return isinstance(attr, Mapping) and bool(attr.get('trait_type')) and 'value' in attr


def _normalize_attribute(attr: Any) -> Any:
    if isinstance(attr, Trait):
        return attr.to_dict()

    if _is_canonical(attr):
        return attr

    # Simple key-value mapping becomes a trait
    if isinstance(attr, Mapping) and len(attr) == 1:
        key, value = next(iter(attr.items()))
        return {
            "trait_type": key,
            "value": value
        }

    return attr


def normalize_attributes(attributes: Sequence[Any]) -> List[Any]:
    """
    Normalize trait inputs into the standard trait format.

    Canonical ``{trait_type, value}`` mappings are returned unchanged, single-key
    mappings ``{K: V}`` are rewritten to ``{"trait_type": K, "value": V}`` and any
    other value passes through as-is.

    Args:
        attributes: Ordered sequence of trait-like values

    Returns:
        List of the same length with each element normalized
    """
    return [_normalize_attribute(attr) for attr in attributes]


def _require_text(field_name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field_name} is required and must be a non-empty string")


def _validate_required(document: Mapping) -> None:
    for field_name in REQUIRED_FIELDS:
        _require_text(field_name, document.get(field_name))

    image = document['image']
    if not image.startswith(ALLOWED_IMAGE_SCHEMES):
        raise ValidationError(f"Image must be an IPFS URI (ipfs://...) or HTTPS URL: {image}")


def generate_metadata(name: Optional[str] = None,
                      description: Optional[str] = None,
                      image: Optional[str] = None,
                      external_url: Optional[str] = None,
                      attributes: Optional[Sequence[Any]] = None,
                      additional_fields: Optional[Mapping] = None) -> Dict[str, Any]:
    """
    Generate a standard ERC-721 metadata document.

    Fields are merged in this order, later writes winning: the base fields,
    the normalized attributes, the spread of ``additional_fields`` and finally
    ``external_url`` when given. Additional fields may override base keys, but
    the merged document must still carry a valid name, description and image,
    and an overriding ``attributes`` list is normalized as well.

    Args:
        name: NFT name
        description: NFT description
        image: Image URI (ipfs://... or https://...)
        external_url: Optional external URL
        attributes: NFT traits, canonical or single-key mappings
        additional_fields: Extra top-level fields

    Returns:
        Metadata document

    Raises:
        ValidationError: If a required field is missing or the image URI is invalid
    """
    _validate_required({'name': name, 'description': description, 'image': image})

    metadata = {
        "name": name,
        "description": description,
        "image": image,
        "attributes": normalize_attributes(attributes or []),
    }

    if additional_fields:
        metadata.update(additional_fields)
        if 'attributes' in additional_fields and isinstance(metadata['attributes'], (list, tuple)):
            metadata['attributes'] = normalize_attributes(metadata['attributes'])
        _validate_required(metadata)

    if external_url:
        metadata["external_url"] = external_url

    return metadata


def _public_kwargs(public_data: Mapping) -> Dict[str, Any]:
    kwargs = {}
    for key, value in public_data.items():
        if key not in _PUBLIC_DATA_ALIASES:
            raise ValidationError(f"Unknown public metadata field: {key}")
        kwargs[_PUBLIC_DATA_ALIASES[key]] = value
    return kwargs


def create_protected_metadata(public_data: Mapping, private_data: Mapping) -> Dict[str, Any]:
    """
    Create metadata carrying a protected section next to the public fields.

    The public hash contract covers the public document only: hash the result of
    ``generate_metadata`` before composing, or use ``compose_protected_with_hash``.

    Args:
        public_data: Keyword arguments for ``generate_metadata``
        private_data: Payload visible only to authorized viewers

    Returns:
        Metadata document with ``protected_data`` and ``has_protected_data``
    """
    metadata = generate_metadata(**_public_kwargs(public_data))
    metadata["protected_data"] = private_data
    metadata["has_protected_data"] = True
    return metadata


def compose_protected_with_hash(public_data: Mapping,
                                private_data: Mapping) -> Tuple[Dict[str, Any], str]:
    """Compose protected metadata and return it with the public document's hash."""
    public_document = generate_metadata(**_public_kwargs(public_data))
    public_hash = compute_metadata_hash(public_document)

    protected = dict(public_document)
    protected["protected_data"] = private_data
    protected["has_protected_data"] = True

    logger.debug(f"Composed protected metadata for {public_document['name']} ({public_hash})")
    return protected, public_hash


class MetadataSchema:
    """JSON Schema definitions for metadata validation."""

    ERC721_SCHEMA = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "Good4Work ERC-721 Metadata",
        "type": "object",
        "required": ["name", "description", "image", "attributes"],
        "properties": {
            "name": {
                "type": "string",
                "minLength": 1,
                "description": "Name of the NFT"
            },
            "description": {
                "type": "string",
                "minLength": 1,
                "description": "Description of the NFT"
            },
            "image": {
                "type": "string",
                "pattern": "^(ipfs|https)://",
                "description": "URI pointing to the NFT's image"
            },
            "external_url": {
                "type": "string",
                "minLength": 1,
                "description": "External URL for the NFT"
            },
            "attributes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["trait_type", "value"],
                    "properties": {
                        "trait_type": {
                            "type": "string",
                            "minLength": 1
                        }
                    }
                }
            }
        }
    }

    PROTECTED_SCHEMA = {
        **ERC721_SCHEMA,
        "title": "Good4Work Protected Metadata",
        "required": ERC721_SCHEMA["required"] + ["protected_data", "has_protected_data"],
        "properties": {
            **ERC721_SCHEMA["properties"],
            "protected_data": {
                "type": "object",
                "description": "Payload visible only to authorized viewers"
            },
            "has_protected_data": {
                "const": True
            }
        }
    }

    @classmethod
    def get_schema(cls, schema_type: str = "erc721") -> Dict[str, Any]:
        """Get schema by type."""
        schemas = {
            "erc721": cls.ERC721_SCHEMA,
            "protected": cls.PROTECTED_SCHEMA
        }
        if schema_type not in schemas:
            raise ValueError(f"Unknown schema type: {schema_type}")
        return schemas[schema_type]


class MetadataValidator:
    """Validates metadata documents against JSON schemas."""

    SCHEMA_TYPES = ("erc721", "protected")

    def __init__(self):
        self.validators = {
            schema_type: Draft7Validator(MetadataSchema.get_schema(schema_type))
            for schema_type in self.SCHEMA_TYPES
        }

    def validate(self, metadata: Mapping, schema_type: str = "erc721") -> bool:
        """
        Validate metadata against the specified schema.

        Args:
            metadata: Metadata document
            schema_type: Schema type to use ('erc721', 'protected')

        Returns:
            True if valid

        Raises:
            ValidationError: If metadata is invalid
        """
        validator = self._get_validator(schema_type)
        try:
            validator.validate(metadata)
        except SchemaValidationError as e:
            raise ValidationError(f"Metadata does not match {schema_type} schema: {e.message}") from e
        return True

    def get_validation_errors(self, metadata: Mapping, schema_type: str = "erc721") -> List[str]:
        """
        Get list of validation errors without raising.

        Returns:
            List of error messages (empty if valid)
        """
        validator = self._get_validator(schema_type)
        errors = []

        for error in validator.iter_errors(metadata):
            error_path = " -> ".join(str(p) for p in error.path) if error.path else "root"
            errors.append(f"{error_path}: {error.message}")

        return errors

    def is_valid(self, metadata: Mapping, schema_type: str = "erc721") -> bool:
        """Check if metadata is valid without raising exceptions."""
        return not self.get_validation_errors(metadata, schema_type)

    def _get_validator(self, schema_type: str) -> Draft7Validator:
        if schema_type not in self.validators:
            raise ValueError(f"Unknown schema type: {schema_type}")
        return self.validators[schema_type]

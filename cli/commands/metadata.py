#!/usr/bin/env python3
"""
Metadata Commands for Good4Work CLI

Create, hash and validate ERC-721 metadata documents.
"""

from typing import Optional, Tuple

import click

from nft.hashing import compute_metadata_hash
from nft.metadata import MetadataValidator, generate_metadata

from ..context import CLIContext, handle_cli_error, load_json_file, pass_context, save_json_file


def parse_attribute(value: str) -> dict:
    """Parse a ``TRAIT=VALUE`` option into a single-key trait mapping."""
    trait_type, sep, trait_value = value.partition('=')
    if not sep or not trait_type:
        raise click.BadParameter(f"Attribute must be in TRAIT=VALUE form: {value}")
    return {trait_type: trait_value}


@click.group('metadata')
def metadata():
    """
    Metadata management commands.

    Build ERC-721 metadata documents, compute their on-chain hash and
    validate existing documents.
    """


@metadata.command('create')
@click.option('--name', '-n', required=True, help='Name of the NFT')
@click.option('--description', '-d', required=True, help='Description of the NFT')
@click.option('--image', '-i', required=True, help='Image URI (ipfs://... or https://...)')
@click.option('--external-url', help='External URL for the NFT')
@click.option('--attribute', '-a', 'attributes', multiple=True,
              help='Trait in TRAIT=VALUE form (repeatable)')
@click.option('--out', 'out_file', type=click.Path(dir_okay=False),
              help='Write the metadata document to this file')
@pass_context
@handle_cli_error
def create(ctx: CLIContext, name: str, description: str, image: str,
           external_url: Optional[str], attributes: Tuple[str, ...], out_file: Optional[str]):
    """
    Create a metadata document and print its hash.

    Examples:
        good4work metadata create -n "Cert1" -d "Completed task" -i ipfs://bafy...
        good4work metadata create -n "Cert1" -d "Done" -i ipfs://bafy... -a Type=Gold --out cert1.json
    """
    document = generate_metadata(
        name=name,
        description=description,
        image=image,
        external_url=external_url,
        attributes=[parse_attribute(a) for a in attributes]
    )
    metadata_hash = compute_metadata_hash(document)

    if out_file:
        save_json_file(document, out_file)
        ctx.logger.info(f"Metadata written to {out_file}")

    ctx.output({"metadata": document, "hash": metadata_hash})


@metadata.command('hash')
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@pass_context
@handle_cli_error
def hash_metadata(ctx: CLIContext, file_path: str):
    """Compute the on-chain verification hash of a metadata file."""
    document = load_json_file(file_path)
    ctx.output({"file": file_path, "hash": compute_metadata_hash(document)})


@metadata.command('validate')
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema', type=click.Choice(MetadataValidator.SCHEMA_TYPES),
              default='erc721', help='Schema to validate against')
@pass_context
@handle_cli_error
def validate(ctx: CLIContext, file_path: str, schema: str):
    """Validate a metadata file against a JSON schema."""
    document = load_json_file(file_path)
    errors = MetadataValidator().get_validation_errors(document, schema)

    ctx.output({"file": file_path, "schema": schema, "valid": not errors, "errors": errors})
    if errors:
        raise click.ClickException(f"{file_path} is not valid {schema} metadata")

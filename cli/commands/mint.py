#!/usr/bin/env python3
"""
Minting Commands for Good4Work CLI

Uploads a certificate image and its metadata to IPFS, then mints a
Good4Work NFT pointing at the metadata URI.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
from web3 import Web3

from nft.config import StorageService
from nft.exceptions import UploadError
from nft.hashing import compute_metadata_hash
from nft.metadata import generate_metadata
from nft.minting import NFTMinter, load_contract_abi
from nft.upload import UploadOrchestrator

from ..context import CLIContext, handle_cli_error, pass_context
from ..output import StatusIndicator

CERTIFICATE_TYPE = "Good4Work Certificate"


def _required_text(value: str) -> str:
    if not value.strip():
        raise click.BadParameter("Value is required")
    return value


def _ethereum_address(value: str) -> str:
    if not Web3.is_address(value):
        raise click.BadParameter(f"Invalid Ethereum address: {value}")
    return value


def metadata_file_name(name: str) -> str:
    """File name used when uploading the metadata document."""
    return re.sub(r'\s+', '_', name) + "_metadata.json"


@click.command('mint')
@click.option('--image', '-i', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to the image file')
@click.option('--name', '-n', help='Name of the NFT')
@click.option('--description', '-d', help='Description of the NFT')
@click.option('--recipient', '-r', help='Ethereum address of the recipient')
@click.option('--contract', help='Good4Work NFT contract address')
@click.option('--rpc', help='Ethereum RPC URL')
@click.option('--private-key', help='Private key for signing transactions')
@click.option('--abi', 'abi_path', type=click.Path(dir_okay=False),
              help='Contract ABI or build artifact (defaults to minting.abi_path)')
@click.option('--service', '-s', type=click.Choice([s.value for s in StorageService]),
              help='Pinning service (defaults to storage.service from config)')
@pass_context
@handle_cli_error
def mint(ctx: CLIContext, image: Optional[Path], name: Optional[str],
         description: Optional[str], recipient: Optional[str], contract: Optional[str],
         rpc: Optional[str], private_key: Optional[str], abi_path: Optional[str],
         service: Optional[str]):
    """
    Mint a new Good4Work NFT.

    Missing options are prompted for interactively.

    Examples:
        good4work mint -i cert.png -n "Cert1" -d "Completed task" -r 0xabc...
    """
    abi = load_contract_abi(abi_path or ctx.get_config('minting.abi_path'))

    # Gather missing information
    if image is None:
        image = click.prompt('Path to the image file',
                             type=click.Path(exists=True, dir_okay=False, path_type=Path))
    if not name:
        name = click.prompt('Name of the NFT', value_proc=_required_text)
    if not description:
        description = click.prompt('Description of the NFT', value_proc=_required_text)
    if recipient:
        _ethereum_address(recipient)
    else:
        recipient = click.prompt('Ethereum address of the recipient', value_proc=_ethereum_address)
    if not contract:
        contract = click.prompt('Good4Work NFT contract address',
                                default=ctx.get_config('minting.contract_address'),
                                value_proc=_ethereum_address)
    if not rpc:
        rpc = click.prompt('Ethereum RPC URL', default=ctx.get_config('minting.rpc_url'))
    if not private_key:
        private_key = click.prompt('Private key for signing transactions', hide_input=True,
                                   default=ctx.get_config('minting.private_key'),
                                   show_default=False)

    service = service or ctx.get_config('storage.service', StorageService.PINATA.value)
    orchestrator = UploadOrchestrator(ctx.config_manager.storage_config().validate())

    StatusIndicator.emit('running', 'Uploading image to IPFS...')
    image_upload = orchestrator.upload_content(image.read_bytes(), image.name, service)
    if not image_upload.success:
        raise UploadError(f"Failed to upload image: {image_upload.error}")
    StatusIndicator.emit('success', f"Image uploaded to IPFS: {image_upload.uri}")

    document = generate_metadata(
        name=name,
        description=description,
        image=image_upload.uri,
        attributes=[
            {"trait_type": "Type", "value": CERTIFICATE_TYPE},
            {"trait_type": "Created", "value": datetime.now(timezone.utc).date().isoformat()}
        ]
    )

    StatusIndicator.emit('running', 'Uploading metadata to IPFS...')
    metadata_upload = orchestrator.upload_content(document, metadata_file_name(name), service)
    if not metadata_upload.success:
        raise UploadError(f"Failed to upload metadata: {metadata_upload.error}")
    StatusIndicator.emit('success', f"Metadata uploaded to IPFS: {metadata_upload.uri}")

    metadata_hash = compute_metadata_hash(document)
    StatusIndicator.emit('info', f"Metadata hash: {metadata_hash}")

    StatusIndicator.emit('running', f"Minting NFT to {recipient}...")
    minter = NFTMinter(rpc, private_key, contract, abi)
    result = minter.mint(recipient, metadata_upload.uri,
                         timeout=ctx.get_config('minting.receipt_timeout', 120))
    StatusIndicator.emit('success', f"NFT successfully minted! Transaction: {result.tx_hash}")

    ctx.output({
        "image_uri": image_upload.uri,
        "metadata_uri": metadata_upload.uri,
        "metadata_hash": metadata_hash,
        **result.to_dict()
    })

#!/usr/bin/env python3
"""
Upload Commands for Good4Work CLI

Uploads local files to an IPFS pinning service.
"""

from pathlib import Path
from typing import Optional

import click

from nft.config import StorageService
from nft.upload import UploadOrchestrator

from ..context import CLIContext, handle_cli_error, pass_context

SERVICE_CHOICES = [service.value for service in StorageService]


@click.command('upload')
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--service', '-s',
              type=click.Choice(SERVICE_CHOICES),
              help='Pinning service (defaults to storage.service from config)')
@click.option('--name', '-n', help='Display name for the upload (defaults to the file name)')
@pass_context
@handle_cli_error
def upload(ctx: CLIContext, file_path: Path, service: Optional[str], name: Optional[str]):
    """
    Upload a file to IPFS.

    Examples:
        good4work upload certificate.png
        good4work upload certificate.png --service web3.storage --name cert.png
    """
    service = service or ctx.get_config('storage.service', StorageService.PINATA.value)
    config = ctx.config_manager.storage_config().validate()

    orchestrator = UploadOrchestrator(config)
    result = orchestrator.upload_content(file_path.read_bytes(), name or file_path.name, service)

    ctx.output(result.to_dict())
    if not result.success:
        raise click.ClickException(f"Upload failed: {result.error}")

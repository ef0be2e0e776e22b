#!/usr/bin/env python3
"""
Good4Work NFT Tools - Command Line Interface

A CLI for building ERC-721 metadata, uploading content to IPFS pinning
services and minting Good4Work NFTs.
"""

from typing import Optional

import click

from . import __version__

from .commands.config import config
from .commands.metadata import metadata
from .commands.mint import mint
from .commands.upload import upload
from .context import CLIContext, handle_cli_error, pass_context


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              help='Path to configuration file')
@click.option('--profile', '-p',
              type=click.Choice(['production', 'development']),
              help='Configuration profile')
@click.option('--output-format', '-o',
              type=click.Choice(['table', 'json', 'yaml']),
              default='table',
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, '--version', prog_name='good4work')
@pass_context
@handle_cli_error
def cli(ctx: CLIContext, config_file: Optional[str], profile: Optional[str],
        output_format: str, verbose: int):
    """
    Good4Work NFT Command Line Interface

    Build ERC-721 metadata, upload files to IPFS and mint Good4Work NFTs.

    Examples:
        good4work metadata create -n "Cert1" -d "Completed task" -i ipfs://bafy...
        good4work upload certificate.png --service pinata
        good4work mint --image certificate.png --recipient 0xabc...
    """
    ctx.config_file = config_file
    ctx.profile = profile
    ctx.output_format = output_format
    ctx.verbose = verbose

    ctx.setup_logging()
    ctx.load_config()

    ctx.logger.debug("CLI initialized with context")


def register_commands():
    """Register all command modules with the main CLI."""
    cli.add_command(config)
    cli.add_command(metadata)
    cli.add_command(upload)
    cli.add_command(mint)


register_commands()


def main():
    cli()


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
Configuration Commands for Good4Work CLI

Inspect the merged configuration, its sources and the available profiles.
Credentials are always masked.
"""

from typing import Optional

import click

from ..config import CONFIG_SEARCH_PATHS, ENV_ALIASES, ENV_PREFIX, PROFILES
from ..context import CLIContext, handle_cli_error, pass_context


@click.group('config')
def config():
    """
    Configuration management commands.

    Show the effective configuration built from defaults, profiles, config
    files, .env files and environment variables.
    """


@config.command('show')
@click.option('--key', help='Specific configuration key to show (dot notation)')
@click.option('--sources', is_flag=True, help='Show configuration sources')
@pass_context
@handle_cli_error
def show_config(ctx: CLIContext, key: Optional[str], sources: bool):
    """
    Display current configuration settings.

    Examples:
        good4work config show
        good4work config show --key storage.timeout
        good4work config show --sources
    """
    manager = ctx.config_manager

    if sources:
        ctx.output(manager.get_sources())
        return

    masked = manager.masked()
    if key:
        value = masked
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                raise click.ClickException(f"Configuration key not found: {key}")
            value = value[part]
        ctx.output({key: value})
    else:
        ctx.output(masked, 'yaml' if ctx.output_format == 'table' else None)


@config.command('list-profiles')
@pass_context
@handle_cli_error
def list_profiles(ctx: CLIContext):
    """List predefined configuration profiles and the settings they change."""
    rows = []
    for name, overrides in PROFILES.items():
        changes = [
            f"{section}.{setting}={value}"
            for section, settings in overrides.items()
            for setting, value in settings.items()
        ]
        rows.append({'profile': name, 'overrides': ', '.join(changes)})

    ctx.output(rows)


@config.command('search-paths')
@pass_context
@handle_cli_error
def search_paths(ctx: CLIContext):
    """Show configuration file search paths and recognized environment variables."""
    ctx.output({
        'search_paths': [
            {'path': str(path), 'exists': path.exists()} for path in CONFIG_SEARCH_PATHS
        ],
        'env_prefix': ENV_PREFIX,
        'env_aliases': sorted(ENV_ALIASES),
    })

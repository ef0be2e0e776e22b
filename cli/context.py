#!/usr/bin/env python3
"""
Shared CLI context for Good4Work commands.

The group callback fills a CLIContext with the global options, configures
logging and loads the merged configuration; every command receives it through
``pass_context`` and reports tool errors through ``handle_cli_error``.
"""

import functools
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional

import click

from nft.exceptions import (
    ConfigurationError,
    MintError,
    NFTToolError,
    UploadError,
    ValidationError,
)

from .config import ConfigurationManager
from .output import OutputFormatter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are only shown at -vv
NOISY_LOGGERS = ('requests', 'urllib3', 'web3')

ERROR_LABELS = (
    (ValidationError, "Invalid input"),
    (ConfigurationError, "Configuration error"),
    (UploadError, "Upload error"),
    (MintError, "Mint error"),
)


class CLIContext:
    """Global options, configuration and output settings shared by commands."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.profile: Optional[str] = None
        self.output_format: str = "table"
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger = logging.getLogger('g4w-cli')

    def setup_logging(self):
        """Send log records to stderr at a level chosen by the -v count."""
        level = (logging.WARNING, logging.INFO, logging.DEBUG)[min(self.verbose, 2)]

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(level)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(level if self.verbose >= 2 else logging.WARNING)

    def load_config(self):
        self.config_manager = ConfigurationManager(self.config_file, self.profile)
        self.config_manager.load()
        self.logger.info(f"Configuration sources: {', '.join(self.config_manager.get_sources())}")

    def get_config(self, key: str, default: Any = None) -> Any:
        if self.config_manager is None:
            self.load_config()
        return self.config_manager.get(key, default)

    def output(self, data: Any, format_override: Optional[str] = None):
        """Write a command result to stdout in the selected format."""
        click.echo(OutputFormatter(format_override or self.output_format).format(data))


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def _error_label(error: NFTToolError) -> str:
    for error_type, label in ERROR_LABELS:
        if isinstance(error, error_type):
            return label
    return "Error"


def handle_cli_error(func):
    """Report NFTToolError as a one-line message on stderr and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NFTToolError as e:
            ctx = click.get_current_context().find_object(CLIContext)
            verbose = ctx.verbose if ctx else 0

            click.secho(f"Error: {e}", fg='red', err=True)
            if verbose >= 2:
                click.echo(traceback.format_exc(), err=True)
            else:
                click.echo(f"{_error_label(e)}. Use -vv for detailed error information.", err=True)

            sys.exit(1)

    return wrapper


def load_json_file(file_path: str) -> Dict[str, Any]:
    """Load a JSON object from disk, reporting problems as click file errors."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise click.FileError(file_path, hint=e.strerror or str(e))
    except json.JSONDecodeError as e:
        raise click.FileError(file_path, hint=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise click.FileError(file_path, hint="expected a JSON object")
    return data


def save_json_file(data: Dict[str, Any], file_path: str):
    """Write a metadata document as indented UTF-8 JSON."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + '\n', encoding='utf-8')

#!/usr/bin/env python3
"""
Output Formatting Module for Good4Work CLI

Renders command results as tables, JSON or YAML. Results are plain dicts
and lists; nested mappings such as a metadata document are flattened into
dotted keys for table output.
"""

import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import yaml
from tabulate import tabulate


def to_plain(data: Any) -> Any:
    """Convert result objects into JSON-compatible values."""
    if hasattr(data, 'to_dict'):
        return to_plain(data.to_dict())
    if isinstance(data, dict):
        return {str(k): to_plain(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_plain(item) for item in data]
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    if isinstance(data, Path):
        return str(data)
    return data


def flatten(data: Dict[str, Any], prefix: str = '') -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys; lists are kept as values."""
    rows: Dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict) and value:
            rows.update(flatten(value, path))
        else:
            rows[path] = value
    return rows


class OutputFormatter:
    """Formats command results for the terminal."""

    FORMATS = ('table', 'json', 'yaml')

    def __init__(self, format_type: str = 'table', color: Optional[bool] = None):
        """
        Args:
            format_type: Output format (table, json, yaml)
            color: Force color on or off; detected from stdout when None
        """
        if format_type not in self.FORMATS:
            raise ValueError(f"Unknown output format: {format_type}")
        self.format_type = format_type
        self.color = color if color is not None else click.get_text_stream('stdout').isatty()

    def format(self, data: Any) -> str:
        data = to_plain(data)
        renderers = {
            'json': self.format_json,
            'yaml': self.format_yaml,
            'table': self.format_table,
        }
        return renderers[self.format_type](data)

    def format_json(self, data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)

    def format_yaml(self, data: Any) -> str:
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False,
                              allow_unicode=True).rstrip('\n')

    def format_table(self, data: Any) -> str:
        """Key/value table for mappings, grid for lists of mappings."""
        if isinstance(data, dict):
            rows = [[self._style(key, fg='cyan', bold=True), self._cell(value)]
                    for key, value in flatten(data).items()]
            return tabulate(rows, tablefmt='plain')

        if isinstance(data, list):
            if not data:
                return "No results"
            if all(isinstance(item, dict) for item in data):
                headers = self._headers(data)
                rows = [[self._cell(item.get(h)) for h in headers] for item in data]
                return tabulate(rows, headers=[self._style(h, fg='blue', bold=True) for h in headers],
                                tablefmt='grid')
            return '\n'.join(self._cell(item) for item in data)

        return self._cell(data)

    @staticmethod
    def _headers(rows: List[Dict[str, Any]]) -> List[str]:
        headers: List[str] = []
        for row in rows:
            headers.extend(key for key in row if key not in headers)
        return headers

    def _cell(self, value: Any) -> str:
        if value is None:
            return self._style('-', dim=True)
        if isinstance(value, bool):
            return self._style('yes' if value else 'no', fg='green' if value else 'red')
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)

    def _style(self, text: str, **styles) -> str:
        return click.style(text, **styles) if self.color else text


class StatusIndicator:
    """Step-by-step progress lines written to stderr."""

    SYMBOLS = {
        'success': ('✅', 'green'),
        'error': ('❌', 'red'),
        'info': ('ℹ️', None),
        'running': ('🔄', 'yellow'),
    }

    @classmethod
    def format_status(cls, status: str, text: str) -> str:
        symbol, _ = cls.SYMBOLS.get(status, ('•', None))
        return f"{symbol} {text}"

    @classmethod
    def emit(cls, status: str, text: str):
        _, color = cls.SYMBOLS.get(status, ('•', None))
        click.secho(cls.format_status(status, text), fg=color, err=True)


__all__ = [
    'OutputFormatter',
    'StatusIndicator',
    'flatten',
    'to_plain',
]

"""CLI argument parsing and handling."""

from __future__ import annotations

from ssmhop.cli.parsing import (
    apply_cli_overrides,
    parse_copy_command,
    parse_endpoint,
    parse_port_parameter,
    parse_shell_command,
    split_command,
)

__all__ = [
    "apply_cli_overrides",
    "parse_copy_command",
    "parse_endpoint",
    "parse_port_parameter",
    "parse_shell_command",
    "split_command",
]

"""Parsing of ssh/scp command strings and CLI parameter conversion.

Command strings are split with shell quoting rules, so quoted paths with
spaces stay a single token. Host extraction is heuristic:

- ``user@host:path`` yields user ``user`` and host ``host``;
- with several ``@`` characters the host is the text after the last one;
- ``.``, ``..`` and tokens starting with ``/``, ``./``, ``../`` or ``~``
  are local paths;
- a copy-style token without ``@``, ``:`` or a ``.`` in its host part is
  treated as a local file name.
"""

from __future__ import annotations

import shlex
from typing import Any

from ssmhop.core.exceptions import InvalidCommand
from ssmhop.core.models import ConnectionSpec

LOCAL_PATH_PREFIXES = ("/", "./", "../", "~")


def split_command(raw_command: str | None, program: str) -> list[str]:
    """Split a command string into tokens, dropping a leading program name.

    Parameters
    ----------
    raw_command : str | None
        Command string as typed by the user
    program : str
        Program name (``ssh`` or ``scp``) removed when it is the first token

    Returns
    -------
    list[str]
        Argument tokens

    Raises
    ------
    InvalidCommand
        If the command is empty or has unbalanced quotes
    """
    if raw_command is None or not str(raw_command).strip():
        raise InvalidCommand("exec argument is required")

    try:
        tokens = shlex.split(str(raw_command))
    except ValueError as e:
        raise InvalidCommand(f"invalid exec argument: {e}") from None

    if tokens and tokens[0] == program:
        tokens = tokens[1:]

    return tokens


def parse_endpoint(token: str) -> tuple[str | None, str | None, bool]:
    """Extract user and host from a copy-style endpoint.

    Parameters
    ----------
    token : str
        Endpoint such as ``ubuntu@10.0.0.5:/tmp`` or ``./file.txt``

    Returns
    -------
    tuple[str | None, str | None, bool]
        (user, host, is_remote). ``is_remote`` is True when the endpoint
        carries an ``@``, a ``:`` separator, or a dotted host part
    """
    if token in (".", "..") or token.startswith(LOCAL_PATH_PREFIXES):
        return None, None, False

    host_part, separator, _ = token.partition(":")
    user, at, host = host_part.rpartition("@")

    if not host:
        return (user or None), None, False

    is_remote = bool(at or separator or "." in host)
    return (user or None), host, is_remote


def parse_copy_command(raw_command: str | None) -> ConnectionSpec:
    """Parse an scp-style command string.

    The destination is the last token and the source the token before it.

    Parameters
    ----------
    raw_command : str | None
        e.g. ``scp ./file.txt ubuntu@10.0.0.5:/tmp``

    Returns
    -------
    ConnectionSpec
        Parsed endpoints and the arguments to forward to scp

    Raises
    ------
    InvalidCommand
        If fewer than two tokens remain after removing the program name
    """
    tokens = split_command(raw_command, "scp")
    if len(tokens) < 2:
        raise InvalidCommand("invalid exec argument: expected a source and a destination")

    source_user, source_host, source_is_remote = parse_endpoint(tokens[-2])
    dest_user, dest_host, dest_is_remote = parse_endpoint(tokens[-1])

    return ConnectionSpec(
        source_user=source_user,
        source_host=source_host,
        dest_user=dest_user,
        dest_host=dest_host,
        arguments=tuple(tokens),
        source_is_remote=source_is_remote,
        dest_is_remote=dest_is_remote,
    )


def parse_shell_command(raw_command: str | None) -> ConnectionSpec:
    """Parse an ssh-style command string.

    The last token is the destination ``[user@]host``; it is always
    considered remote.

    Parameters
    ----------
    raw_command : str | None
        e.g. ``ssh -i key.pem ubuntu@bastion.example.com``

    Returns
    -------
    ConnectionSpec
        Parsed destination and the arguments to forward to ssh

    Raises
    ------
    InvalidCommand
        If no destination token is present
    """
    tokens = split_command(raw_command, "ssh")
    if not tokens:
        raise InvalidCommand("invalid exec argument: expected a destination")

    user, _, host = tokens[-1].rpartition("@")
    if not host:
        raise InvalidCommand(f"invalid exec argument: no host in '{tokens[-1]}'")

    return ConnectionSpec(
        dest_user=user or None,
        dest_host=host,
        arguments=tuple(tokens),
        dest_is_remote=True,
    )


def parse_port_parameter(port: Any, name: str = "port") -> int:
    """Parse a port parameter into an integer with validation.

    Parameters
    ----------
    port : Any
        Port value from the command line (int or numeric string)
    name : str
        Parameter name used in error messages

    Returns
    -------
    int
        Port number

    Raises
    ------
    ValueError
        If the value is not numeric or outside 1-65535
    """
    try:
        value = int(str(port).strip())
    except ValueError:
        raise ValueError(f"Invalid {name} value: '{port}' is not numeric") from None

    if not 1 <= value <= 65535:
        raise ValueError(f"Invalid {name} value: {value}. Port must be between 1 and 65535")

    return value


def apply_cli_overrides(
    config: dict[str, Any],
    region: str | None,
    target: str | None,
    profile: str | None,
) -> None:
    """Apply CLI option overrides to merged configuration.

    Parameters
    ----------
    config : dict[str, Any]
        Configuration dictionary to modify in-place
    region : str | None
        AWS region
    target : str | None
        Instance id
    profile : str | None
        AWS profile name
    """
    if region is not None:
        config["region"] = region

    if target is not None:
        config["target"] = target

    if profile is not None:
        config["profile"] = profile


__all__ = [
    "split_command",
    "parse_endpoint",
    "parse_copy_command",
    "parse_shell_command",
    "parse_port_parameter",
    "apply_cli_overrides",
]

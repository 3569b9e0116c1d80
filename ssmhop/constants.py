"""Global constants for ssmhop.

This module contains application-wide constants shared by the resolver,
the session broker, and the CLI layer.
"""

from enum import Enum

SESSION_OPEN_TIMEOUT_SECONDS = 15
"""Deadline in seconds for a StartSession request.

A timed-out request leaves the remote session state unknown, so the call
is never retried automatically.
"""

SESSION_TERMINATE_TIMEOUT_SECONDS = 10
"""Deadline in seconds for a TerminateSession request.

Termination is best-effort: the service may already have reaped the
session after inactivity.
"""

PROMPT_PAGE_SIZE = 20
"""Number of options visible at once in the interactive selection prompt."""

DEFAULT_PLUGIN_PATH = "session-manager-plugin"
"""Executable used for shell and port-forwarding sessions."""

DEFAULT_SSH_BINARY = "ssh"
"""Executable used for ssh sessions."""

DEFAULT_SCP_BINARY = "scp"
"""Executable used for scp sessions."""

DEFAULT_PROFILE = "default"
"""Profile name displayed when neither configuration nor AWS_PROFILE names one."""

EXIT_ERROR = 1
"""Exit code indicating a general application error."""

EXIT_CONFIG_ERROR = 2
"""Exit code indicating a configuration error."""

EXIT_SIGINT = 130
"""Exit code used when the process is interrupted with SIGINT."""

EXIT_SIGTERM = 143
"""Exit code used when the process is terminated with SIGTERM."""


class InstanceState(str, Enum):
    """Instance state values."""

    RUNNING = "running"
    STOPPED = "stopped"
    TERMINATED = "terminated"


class SessionMode(str, Enum):
    """Kinds of sessions ssmhop can broker."""

    SHELL = "start"
    SSH = "ssh"
    SCP = "scp"
    PORT_FORWARD = "fwd"

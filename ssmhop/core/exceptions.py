"""Resolution and transport errors raised by the ssmhop core."""

from __future__ import annotations


class SSMHopError(Exception):
    """Base class for errors raised by the resolution and session layers."""


class InvalidCommand(SSMHopError):
    """Raised when an ssh/scp command string cannot be parsed."""


class MissingRegion(SSMHopError):
    """Raised when no region is configured and none could be selected."""

    def __init__(self, message: str = "region is not set") -> None:
        super().__init__(message)


class MissingTarget(SSMHopError):
    """Raised when no target instance is configured and none could be selected."""

    def __init__(self, message: str = "target is not set") -> None:
        super().__init__(message)


class NoSelectionMade(SSMHopError):
    """Raised when the user aborts an interactive prompt."""


class NoRunningInstances(MissingTarget):
    """Raised when a region has no running instances to choose from.

    Parameters
    ----------
    region : str
        Region that was searched
    """

    def __init__(self, region: str) -> None:
        super().__init__(f"no running instances in {region}")
        self.region = region


class TransportFailed(SSMHopError):
    """Raised when the delegated transport process fails.

    Parameters
    ----------
    message : str
        Description of the failure
    returncode : int | None
        Exit status of the child process, or None if it never started
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode

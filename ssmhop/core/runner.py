"""Execution of the delegated transport process."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from ssmhop.core.exceptions import TransportFailed
from ssmhop.core.signals import InterruptAbsorber

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Run a transport executable attached to the current terminal.

    The child inherits stdin, stdout and stderr. Interrupts delivered to
    this process while the child runs are absorbed, so Ctrl+C reaches the
    child (and the remote session) without killing ssmhop before it can
    close the session.

    Attributes
    ----------
    absorbed_interrupts : int
        Interrupts discarded during the most recent run
    """

    def __init__(self) -> None:
        self.absorbed_interrupts = 0

    def run(self, executable: str, args: Sequence[str]) -> int:
        """Run an executable to completion.

        Parameters
        ----------
        executable : str
            Program to run
        args : Sequence[str]
            Arguments passed to the program

        Returns
        -------
        int
            The child's exit status (always 0; failures raise)

        Raises
        ------
        TransportFailed
            If the program cannot be started or exits non-zero
        """
        command = [executable, *args]
        logger.debug("Running transport %s", executable)

        absorber = InterruptAbsorber()
        try:
            with absorber:
                try:
                    result = subprocess.run(command, check=False)
                except OSError as e:
                    raise TransportFailed(f"failed to start {executable}: {e}") from e
        finally:
            self.absorbed_interrupts = absorber.absorbed

        if result.returncode != 0:
            raise TransportFailed(
                f"{executable} exited with status {result.returncode}",
                returncode=result.returncode,
            )

        return result.returncode

"""Session execution: open, run the transport, always close."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from typing import Any

from ssmhop.constants import (
    SESSION_OPEN_TIMEOUT_SECONDS,
    SESSION_TERMINATE_TIMEOUT_SECONDS,
    SessionMode,
)
from ssmhop.core.cleanup import SessionCleanup
from ssmhop.core.models import ConnectionSpec, ResolvedTarget, SessionHandle
from ssmhop.core.runner import ProcessRunner
from ssmhop.providers.aws.constants import (
    PORT_FORWARD_DOCUMENT,
    SSH_SESSION_DOCUMENT,
    SSH_SESSION_PORT,
)
from ssmhop.providers.aws.session import SessionBroker, build_plugin_arguments

logger = logging.getLogger(__name__)


def build_proxy_command(plugin_path: str, plugin_args: list[str]) -> str:
    """Render the plugin invocation as an ssh ProxyCommand value.

    ssh expands ``%`` tokens in ProxyCommand, so literal percent signs are
    doubled.

    Parameters
    ----------
    plugin_path : str
        session-manager-plugin executable
    plugin_args : list[str]
        Arguments from build_plugin_arguments

    Returns
    -------
    str
        Shell-quoted command line
    """
    return shlex.join([plugin_path, *plugin_args]).replace("%", "%%")


class SessionExecutor:
    """Run one session against a resolved target.

    Parameters
    ----------
    config : dict[str, Any]
        Merged configuration (plugin_path, ssh_binary, scp_binary,
        open_timeout, close_timeout, profile)
    broker_factory : Callable[..., SessionBroker]
        Factory creating a broker for a region; called with the region and
        the open/close timeouts as keyword arguments
    runner : ProcessRunner | None
        Transport runner (default: ProcessRunner())
    cleanup : SessionCleanup | None
        Exactly-once session closer shared with signal handlers
    """

    def __init__(
        self,
        config: dict[str, Any],
        broker_factory: Callable[..., SessionBroker],
        runner: ProcessRunner | None = None,
        cleanup: SessionCleanup | None = None,
    ) -> None:
        self.config = config
        self.broker_factory = broker_factory
        self.runner = runner or ProcessRunner()
        self.cleanup = cleanup or SessionCleanup()

    def execute(
        self,
        mode: SessionMode,
        target: ResolvedTarget,
        spec: ConnectionSpec | None = None,
        remote_port: int | None = None,
        local_port: int | None = None,
    ) -> int:
        """Open a session, run the transport and close the session.

        The session is closed even when the transport fails or the call is
        interrupted; close failures are logged only.

        Parameters
        ----------
        mode : SessionMode
            Kind of session to run
        target : ResolvedTarget
            Region and instance to connect to
        spec : ConnectionSpec | None
            Parsed ssh/scp command (required for SSH and SCP modes)
        remote_port : int | None
            Remote port (required for PORT_FORWARD mode)
        local_port : int | None
            Local port for PORT_FORWARD mode (defaults to remote_port)

        Returns
        -------
        int
            Transport exit status

        Raises
        ------
        SessionOpenFailed
            If the session cannot be started
        TransportFailed
            If the transport process fails (after the session is closed)
        """
        document_name, parameters = self._session_document(mode, remote_port, local_port)

        broker = self.broker_factory(
            target.region,
            open_timeout=self.config.get("open_timeout", SESSION_OPEN_TIMEOUT_SECONDS),
            close_timeout=self.config.get(
                "close_timeout", SESSION_TERMINATE_TIMEOUT_SECONDS
            ),
        )
        handle = broker.open(
            target.instance_id, document_name=document_name, parameters=parameters
        )
        self.cleanup.track(broker, handle)

        try:
            executable, args = self._transport_command(mode, handle, spec)
            return self.runner.run(executable, args)
        finally:
            self.cleanup.close()

    def _session_document(
        self, mode: SessionMode, remote_port: int | None, local_port: int | None
    ) -> tuple[str | None, dict[str, list[str]] | None]:
        if mode in (SessionMode.SSH, SessionMode.SCP):
            return SSH_SESSION_DOCUMENT, {"portNumber": [SSH_SESSION_PORT]}

        if mode == SessionMode.PORT_FORWARD:
            if remote_port is None:
                raise ValueError("remote_port is required for port forwarding")
            return PORT_FORWARD_DOCUMENT, {
                "portNumber": [str(remote_port)],
                "localPortNumber": [str(local_port or remote_port)],
            }

        return None, None

    def _transport_command(
        self, mode: SessionMode, handle: SessionHandle, spec: ConnectionSpec | None
    ) -> tuple[str, list[str]]:
        plugin_path = self.config["plugin_path"]
        plugin_args = build_plugin_arguments(handle, self.config.get("profile", ""))

        if mode in (SessionMode.SHELL, SessionMode.PORT_FORWARD):
            return plugin_path, plugin_args

        if spec is None:
            raise ValueError(f"{mode.value} sessions require a parsed command")

        binary = self.config["ssh_binary" if mode == SessionMode.SSH else "scp_binary"]
        proxy = build_proxy_command(plugin_path, plugin_args)
        return binary, ["-o", f"ProxyCommand={proxy}", *spec.arguments]

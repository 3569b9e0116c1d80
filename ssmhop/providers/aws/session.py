"""SSM session negotiation.

This module opens and terminates Session Manager sessions and renders the
argument vector expected by ``session-manager-plugin``.

Classes
-------
SessionBroker
    Opens and closes sessions in one region

Notes
-----
StartSession is never retried. After a timeout the remote state is unknown
and a second request could leave a duplicate session behind.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from typing import Any

import boto3
from botocore.config import Config

from ssmhop.constants import (
    SESSION_OPEN_TIMEOUT_SECONDS,
    SESSION_TERMINATE_TIMEOUT_SECONDS,
)
from ssmhop.core.models import SessionHandle
from ssmhop.providers.aws.constants import PLUGIN_OPERATION
from ssmhop.providers.aws.errors import handle_aws_errors
from ssmhop.providers.exceptions import SessionCloseFailed, SessionOpenFailed

logger = logging.getLogger(__name__)


def _deadline_config(timeout: float) -> Config:
    return Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1},
    )


def _call_with_deadline(
    call: Callable[[], Any],
    timeout: float,
    error_class: type[SessionOpenFailed] | type[SessionCloseFailed],
    operation: str,
) -> Any:
    """Run a control-plane request, giving up after ``timeout`` seconds overall.

    Socket timeouts bound each read separately; this bounds the whole call,
    credential resolution included. The request runs on a daemon thread, so
    an abandoned request does not hold up process exit.

    Raises
    ------
    SessionOpenFailed or SessionCloseFailed
        An ``error_class`` with error code ``Timeout`` when the deadline passes
    """
    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["result"] = call()
        except BaseException as e:
            outcome["error"] = e

    thread = threading.Thread(target=worker, name=f"ssm-{operation}", daemon=True)
    thread.start()
    thread.join(timeout)

    if thread.is_alive():
        logger.debug("%s did not finish within %ss", operation, timeout)
        raise error_class(
            message=f"{operation}: no response within {timeout}s", error_code="Timeout"
        )

    if "error" in outcome:
        raise outcome["error"]

    return outcome["result"]


class SessionBroker:
    """Open and close SSM sessions in a region.

    Parameters
    ----------
    region : str
        AWS region for SSM operations
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    open_timeout : float
        Deadline in seconds for StartSession
    close_timeout : float
        Deadline in seconds for TerminateSession
    """

    def __init__(
        self,
        region: str,
        boto3_client_factory: Callable[..., Any] | None = None,
        open_timeout: float = SESSION_OPEN_TIMEOUT_SECONDS,
        close_timeout: float = SESSION_TERMINATE_TIMEOUT_SECONDS,
    ) -> None:
        self.region = region
        self.boto3_client_factory = boto3_client_factory or boto3.client
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout

    def _ssm_client(self, timeout: float) -> Any:
        return self.boto3_client_factory(
            "ssm", region_name=self.region, config=_deadline_config(timeout)
        )

    def open(
        self,
        target: str,
        document_name: str | None = None,
        parameters: dict[str, list[str]] | None = None,
    ) -> SessionHandle:
        """Start a session against an instance.

        Parameters
        ----------
        target : str
            Instance id to connect to
        document_name : str | None
            SSM document to run, or None for an interactive shell
        parameters : dict[str, list[str]] | None
            Document parameters

        Returns
        -------
        SessionHandle
            The negotiated session

        Raises
        ------
        SessionOpenFailed
            If the request is rejected or does not finish within the deadline
        ProviderCredentialsError
            If credentials are missing
        """
        request: dict[str, Any] = {"Target": target}
        if document_name:
            request["DocumentName"] = document_name
        if parameters:
            request["Parameters"] = parameters

        client = self._ssm_client(self.open_timeout)

        with handle_aws_errors(SessionOpenFailed, "StartSession"):
            response = _call_with_deadline(
                lambda: client.start_session(**request),
                self.open_timeout,
                SessionOpenFailed,
                "StartSession",
            )

        handle = SessionHandle(
            session_id=response["SessionId"],
            stream_url=response["StreamUrl"],
            token_value=response["TokenValue"],
            region=self.region,
            endpoint_url=client.meta.endpoint_url,
            request=request,
        )
        logger.debug("Started session %s on %s", handle.session_id, target)
        return handle

    def close(self, handle: SessionHandle) -> bool:
        """Terminate a session.

        The handle is marked closed before the request is sent, so each
        handle is terminated at most once.

        Parameters
        ----------
        handle : SessionHandle
            Session to terminate

        Returns
        -------
        bool
            True if a terminate request succeeded, False if the handle was
            already closed

        Raises
        ------
        SessionCloseFailed
            If the terminate request fails
        """
        if handle.closed:
            logger.warning("Session %s is already closed", handle.session_id)
            return False

        handle.closed = True
        logger.info("Deleting session %s", handle.session_id)

        client = self._ssm_client(self.close_timeout)
        with handle_aws_errors(SessionCloseFailed, "TerminateSession"):
            _call_with_deadline(
                lambda: client.terminate_session(SessionId=handle.session_id),
                self.close_timeout,
                SessionCloseFailed,
                "TerminateSession",
            )

        return True


def build_plugin_arguments(handle: SessionHandle, profile: str = "") -> list[str]:
    """Render the positional arguments for session-manager-plugin.

    Parameters
    ----------
    handle : SessionHandle
        Open session
    profile : str
        AWS profile name passed through to the plugin

    Returns
    -------
    list[str]
        Arguments in the order the plugin expects: session response JSON,
        region, operation, profile, request JSON, endpoint URL
    """
    return [
        json.dumps(handle.response_payload()),
        handle.region,
        PLUGIN_OPERATION,
        profile,
        json.dumps(handle.request),
        handle.endpoint_url,
    ]

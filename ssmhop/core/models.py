"""Data types shared by the resolver, session broker and executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ConnectionSpec:
    """Endpoints parsed from an ssh/scp command line.

    Attributes
    ----------
    source_user : str | None
        User part of the source endpoint (copy-style commands only)
    source_host : str | None
        Host part of the source endpoint, None for local paths
    dest_user : str | None
        User part of the destination endpoint
    dest_host : str | None
        Host part of the destination endpoint
    arguments : tuple[str, ...]
        Tokens to forward to the transport binary, program name removed
    source_is_remote : bool
        Whether the source endpoint should be looked up as a host
    dest_is_remote : bool
        Whether the destination endpoint should be looked up as a host
    """

    source_user: str | None = None
    source_host: str | None = None
    dest_user: str | None = None
    dest_host: str | None = None
    arguments: tuple[str, ...] = ()
    source_is_remote: bool = False
    dest_is_remote: bool = False

    def candidate_hosts(self) -> list[str]:
        """Return hosts worth a DNS lookup, destination first.

        Returns
        -------
        list[str]
            Host names in lookup priority order
        """
        hosts = []
        if self.dest_is_remote and self.dest_host:
            hosts.append(self.dest_host)
        if self.source_is_remote and self.source_host:
            hosts.append(self.source_host)
        return hosts


@dataclass(frozen=True)
class ResolvedTarget:
    """A definite region and instance to open a session against."""

    region: str
    instance_id: str

    def __post_init__(self) -> None:
        if not self.region:
            raise ValueError("resolved target requires a region")
        if not self.instance_id:
            raise ValueError("resolved target requires an instance id")


@dataclass
class SessionHandle:
    """Server-issued session returned by StartSession.

    The id, stream URL and token are opaque; they are only handed to the
    transport plugin.

    Attributes
    ----------
    session_id : str
        SSM session id
    stream_url : str
        WebSocket URL the plugin connects to
    token_value : str
        Token authorizing the data channel
    region : str
        Region the session was opened in
    endpoint_url : str
        SSM endpoint that issued the session
    request : dict[str, Any]
        StartSession request parameters, forwarded to the plugin
    closed : bool
        Whether a terminate request was already issued
    """

    session_id: str
    stream_url: str
    token_value: str
    region: str
    endpoint_url: str = ""
    request: dict[str, Any] = field(default_factory=dict)
    closed: bool = False

    def response_payload(self) -> dict[str, str]:
        """Return the StartSession response fields in wire form."""
        return {
            "SessionId": self.session_id,
            "StreamUrl": self.stream_url,
            "TokenValue": self.token_value,
        }


@dataclass
class ResolutionContext:
    """Selection state threaded through resolution and session calls.

    Fields start empty and are filled in as resolution progresses. A caller
    may pre-seed any of them to skip the matching prompt.
    """

    region: str = ""
    target: str = ""
    profile: str = ""

    def resolved(self) -> ResolvedTarget:
        """Return the current selection as a ResolvedTarget.

        Raises
        ------
        ValueError
            If region or target is still empty
        """
        return ResolvedTarget(region=self.region, instance_id=self.target)

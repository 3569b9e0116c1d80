"""Core ssmhop functionality."""

from __future__ import annotations

from ssmhop.core.exceptions import (
    InvalidCommand,
    MissingRegion,
    MissingTarget,
    NoRunningInstances,
    NoSelectionMade,
    SSMHopError,
    TransportFailed,
)
from ssmhop.core.models import (
    ConnectionSpec,
    ResolutionContext,
    ResolvedTarget,
    SessionHandle,
)

__all__ = [
    "ConnectionSpec",
    "ResolutionContext",
    "ResolvedTarget",
    "SessionHandle",
    "SSMHopError",
    "InvalidCommand",
    "MissingRegion",
    "MissingTarget",
    "NoSelectionMade",
    "NoRunningInstances",
    "TransportFailed",
]

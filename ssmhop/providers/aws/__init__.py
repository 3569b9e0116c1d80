"""AWS provider: EC2 inventory and SSM sessions."""

from __future__ import annotations

from ssmhop.providers.aws.directory import InstanceDirectory
from ssmhop.providers.aws.session import SessionBroker, build_plugin_arguments

__all__ = [
    "InstanceDirectory",
    "SessionBroker",
    "build_plugin_arguments",
]

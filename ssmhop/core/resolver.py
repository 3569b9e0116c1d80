"""Resolution of a session target from partial connection information.

A target is derived, in order, from:

1. an instance id already present on the ResolutionContext;
2. a host found in an ssh/scp command, mapped to an IPv4 address via DNS
   and then to a running instance via its public or private address;
3. an interactive choice.

DNS and address matching are best-effort: any miss falls through to the
prompt instead of failing the command.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Callable

from ssmhop.cli.parsing import parse_copy_command, parse_shell_command
from ssmhop.core.exceptions import MissingRegion, NoRunningInstances
from ssmhop.core.models import ConnectionSpec, ResolutionContext, ResolvedTarget
from ssmhop.core.selector import InteractiveSelector
from ssmhop.providers.aws.directory import InstanceDirectory
from ssmhop.providers.exceptions import LookupFailed

logger = logging.getLogger(__name__)


def lookup_ipv4(host: str) -> str | None:
    """Resolve a host name to its first IPv4 address.

    Parameters
    ----------
    host : str
        Host name or literal address

    Returns
    -------
    str | None
        Dotted-quad address, or None if the name does not resolve to IPv4
    """
    try:
        infos = socket.getaddrinfo(host, None, family=socket.AF_INET)
    except (socket.gaierror, UnicodeError, OSError) as e:
        logger.debug("DNS lookup for %s failed: %s", host, e)
        return None

    for _family, _type, _proto, _canonname, sockaddr in infos:
        return str(sockaddr[0])

    return None


class TargetResolver:
    """Turn ambiguous input into a definite region and instance id.

    Parameters
    ----------
    directory : InstanceDirectory
        Inventory used for address matching
    selector : InteractiveSelector
        Fallback prompt for region and target
    dns_lookup : Callable[[str], str | None]
        Forward lookup returning an IPv4 address (default: lookup_ipv4)
    """

    def __init__(
        self,
        directory: InstanceDirectory,
        selector: InteractiveSelector,
        dns_lookup: Callable[[str], str | None] = lookup_ipv4,
    ) -> None:
        self.directory = directory
        self.selector = selector
        self.dns_lookup = dns_lookup

    def resolve_region(self, context: ResolutionContext) -> str:
        """Ensure the context has a region, prompting if needed.

        Raises
        ------
        MissingRegion
            If no region was chosen
        NoSelectionMade
            If the user aborts the prompt
        """
        if not context.region:
            context.region = self.selector.select_region()

        if not context.region:
            raise MissingRegion()

        return context.region

    def resolve_target(self, context: ResolutionContext) -> ResolvedTarget:
        """Ensure the context has a target, prompting if needed.

        Parameters
        ----------
        context : ResolutionContext
            Selection state; must already carry a region

        Returns
        -------
        ResolvedTarget
            The context's region and instance id

        Raises
        ------
        MissingRegion
            If the context has no region
        NoRunningInstances
            If the region has nothing to choose from
        NoSelectionMade
            If the user aborts the prompt
        """
        if not context.region:
            raise MissingRegion()

        if not context.target:
            context.target = self.selector.select_target(context.region)

        if not context.target:
            raise NoRunningInstances(context.region)

        return context.resolved()

    def resolve_for_copy_style(
        self, raw_command: str | None, context: ResolutionContext
    ) -> ResolvedTarget:
        """Resolve the target of an scp-style command.

        Raises
        ------
        InvalidCommand
            If the command has fewer than two tokens
        MissingRegion
            If the context has no region
        """
        spec = parse_copy_command(raw_command)
        return self._resolve_from_spec(spec, context)

    def resolve_for_shell_style(
        self, raw_command: str | None, context: ResolutionContext
    ) -> ResolvedTarget:
        """Resolve the target of an ssh-style command.

        Raises
        ------
        InvalidCommand
            If the command has no destination
        MissingRegion
            If the context has no region
        """
        spec = parse_shell_command(raw_command)
        return self._resolve_from_spec(spec, context)

    def _resolve_from_spec(
        self, spec: ConnectionSpec, context: ResolutionContext
    ) -> ResolvedTarget:
        if not context.region:
            raise MissingRegion()

        if context.target:
            return context.resolved()

        instance_id = self._match_instance(spec, context.region)
        if instance_id:
            context.target = instance_id
            return context.resolved()

        return self.resolve_target(context)

    def _match_instance(self, spec: ConnectionSpec, region: str) -> str | None:
        address = None
        for host in spec.candidate_hosts():
            address = self.dns_lookup(host)
            if address:
                logger.debug("Resolved %s to %s", host, address)
                break

        if not address:
            return None

        try:
            return self.directory.find_instance_id_by_ip(region, address)
        except LookupFailed as e:
            logger.warning("Could not match %s to an instance: %s", address, e)
            return None

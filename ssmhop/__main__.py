#!/usr/bin/env python3
"""ssmhop - connect to EC2 instances through AWS Systems Manager."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ssmhop.core.signals import set_cleanup_instance, setup_signal_handlers

setup_signal_handlers()

for _boto_module in ["botocore", "boto3", "urllib3"]:
    logging.getLogger(_boto_module).setLevel(logging.WARNING)

from ssmhop.cli.main import main  # noqa: E402
from ssmhop.cli.parsing import (  # noqa: E402
    apply_cli_overrides,
    parse_copy_command,
    parse_port_parameter,
    parse_shell_command,
)
from ssmhop.constants import DEFAULT_PROFILE, SessionMode  # noqa: E402
from ssmhop.core.cleanup import SessionCleanup  # noqa: E402
from ssmhop.core.config import ConfigLoader  # noqa: E402
from ssmhop.core.models import ResolutionContext, ResolvedTarget  # noqa: E402
from ssmhop.core.resolver import TargetResolver  # noqa: E402
from ssmhop.core.run_executor import SessionExecutor  # noqa: E402
from ssmhop.core.runner import ProcessRunner  # noqa: E402
from ssmhop.core.selector import InteractiveSelector  # noqa: E402
from ssmhop.providers.aws.directory import InstanceDirectory  # noqa: E402
from ssmhop.providers.aws.session import SessionBroker  # noqa: E402
from ssmhop.providers.aws.utils import (  # noqa: E402
    make_client_factory,
    region_from_profile,
)
from ssmhop.tui.prompt import SelectPrompt, TextualSelectPrompt  # noqa: E402

logger = logging.getLogger(__name__)


class SSMHop:
    """Main CLI interface for ssmhop."""

    def __init__(
        self,
        boto3_client_factory: Callable[..., Any] | None = None,
        prompt: SelectPrompt | None = None,
        runner: ProcessRunner | None = None,
        dns_lookup: Callable[[str], str | None] | None = None,
    ) -> None:
        """Initialize SSMHop with optional dependency injection."""
        self._config_loader = ConfigLoader()
        self._boto3_client_factory_override = boto3_client_factory
        self._prompt = prompt or TextualSelectPrompt()
        self._runner = runner or ProcessRunner()
        self._dns_lookup = dns_lookup
        self._cleanup = SessionCleanup()
        self.merged_config: dict[str, Any] = {}

        set_cleanup_instance(self._cleanup)

    def _client_factory(self, profile: str) -> Callable[..., Any]:
        if self._boto3_client_factory_override is not None:
            return self._boto3_client_factory_override
        return make_client_factory(profile)

    def _prepare(
        self,
        preset: str | None,
        region: str | None,
        target: str | None,
        profile: str | None,
    ) -> tuple[ResolutionContext, TargetResolver, SessionExecutor]:
        raw_config = self._config_loader.load_config()
        config = self._config_loader.get_preset_config(raw_config, preset)
        apply_cli_overrides(config, region=region, target=target, profile=profile)
        self._config_loader.validate_config(config)
        self.merged_config = config

        context = ResolutionContext(
            region=config.get("region") or "",
            target=config.get("target") or "",
            profile=config.get("profile") or "",
        )
        if not context.region:
            context.region = region_from_profile(context.profile)

        client_factory = self._client_factory(context.profile)
        directory = InstanceDirectory(boto3_client_factory=client_factory)
        selector = InteractiveSelector(directory, self._prompt)
        if self._dns_lookup is not None:
            resolver = TargetResolver(directory, selector, dns_lookup=self._dns_lookup)
        else:
            resolver = TargetResolver(directory, selector)

        def broker_factory(region: str, **kwargs: Any) -> SessionBroker:
            return SessionBroker(region, boto3_client_factory=client_factory, **kwargs)

        executor = SessionExecutor(
            config=config,
            broker_factory=broker_factory,
            runner=self._runner,
            cleanup=self._cleanup,
        )
        return context, resolver, executor

    def _print_ready(self, mode: SessionMode, context: ResolutionContext) -> None:
        logger.info(
            "[%s] profile: %s, region: %s, target: %s",
            mode.value,
            context.profile or DEFAULT_PROFILE,
            context.region,
            context.target,
            extra={"stream": "stdout"},
        )

    def start(
        self,
        preset: str | None = None,
        region: str | None = None,
        target: str | None = None,
        profile: str | None = None,
    ) -> None:
        """Start an interactive shell session on an instance."""
        context, resolver, executor = self._prepare(preset, region, target, profile)

        resolver.resolve_region(context)
        resolved = resolver.resolve_target(context)

        self._print_ready(SessionMode.SHELL, context)
        executor.execute(SessionMode.SHELL, resolved)

    def ssh(
        self,
        exec_command: str | None = None,
        preset: str | None = None,
        region: str | None = None,
        target: str | None = None,
        profile: str | None = None,
    ) -> None:
        """Run ssh through a Session Manager tunnel.

        Parameters
        ----------
        exec_command : str | None
            ssh arguments, e.g. "-i key.pem ubuntu@10.0.0.5"
        """
        context, resolver, executor = self._prepare(preset, region, target, profile)
        spec = parse_shell_command(exec_command)

        resolver.resolve_region(context)
        resolved = resolver.resolve_for_shell_style(exec_command, context)

        self._print_ready(SessionMode.SSH, context)
        executor.execute(SessionMode.SSH, resolved, spec=spec)

    def scp(
        self,
        exec_command: str | None = None,
        preset: str | None = None,
        region: str | None = None,
        target: str | None = None,
        profile: str | None = None,
    ) -> None:
        """Copy files with scp through a Session Manager tunnel.

        Parameters
        ----------
        exec_command : str | None
            scp arguments, e.g. "./file.txt ubuntu@10.0.0.5:/tmp"
        """
        context, resolver, executor = self._prepare(preset, region, target, profile)
        spec = parse_copy_command(exec_command)

        resolver.resolve_region(context)
        resolved = resolver.resolve_for_copy_style(exec_command, context)

        self._print_ready(SessionMode.SCP, context)
        executor.execute(SessionMode.SCP, resolved, spec=spec)

    def fwd(
        self,
        remote_port: int | str | None = None,
        local_port: int | str | None = None,
        preset: str | None = None,
        region: str | None = None,
        target: str | None = None,
        profile: str | None = None,
    ) -> None:
        """Forward a remote port of an instance to localhost.

        Parameters
        ----------
        remote_port : int | str | None
            Port on the instance
        local_port : int | str | None
            Local port to listen on (defaults to remote_port)
        """
        if remote_port is None:
            raise ValueError("remote_port is required")

        remote = parse_port_parameter(remote_port, "remote_port")
        local = parse_port_parameter(local_port, "local_port") if local_port else remote

        context, resolver, executor = self._prepare(preset, region, target, profile)

        resolver.resolve_region(context)
        resolved: ResolvedTarget = resolver.resolve_target(context)

        self._print_ready(SessionMode.PORT_FORWARD, context)
        logger.info("Forwarding localhost:%s -> %s:%s", local, resolved.instance_id, remote)
        executor.execute(
            SessionMode.PORT_FORWARD, resolved, remote_port=remote, local_port=local
        )


if __name__ == "__main__":
    main()

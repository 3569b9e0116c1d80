"""CLI entry point for ssmhop."""

from __future__ import annotations

import logging
import os
import sys

import fire

from ssmhop.constants import EXIT_CONFIG_ERROR, EXIT_ERROR, EXIT_SIGINT
from ssmhop.core.exceptions import SSMHopError, TransportFailed
from ssmhop.logging import StreamFormatter, StreamRoutingFilter
from ssmhop.providers import ProviderAPIError, ProviderCredentialsError
from ssmhop.providers.aws.utils import get_aws_credentials_error_message


def get_ssmhop_base_class() -> type:
    """Get SSMHop class on-demand to avoid circular imports.

    Returns
    -------
    type
        SSMHop class
    """
    from ssmhop.__main__ import SSMHop

    return SSMHop


def handle_credentials_error(debug_mode: bool) -> None:
    """Handle provider credentials error.

    Parameters
    ----------
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCredentialsError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(get_aws_credentials_error_message(), file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_value_error(error: ValueError, debug_mode: bool) -> None:
    """Handle configuration and argument errors.

    Parameters
    ----------
    error : ValueError
        The value error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ValueError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Configuration error: {error}", file=sys.stderr)
    sys.exit(EXIT_CONFIG_ERROR)


def handle_api_error(error: ProviderAPIError, debug_mode: bool) -> None:
    """Handle provider API error with context-specific messages.

    Parameters
    ----------
    error : ProviderAPIError
        The API error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderAPIError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    error_code = error.error_code

    if error_code in ["AccessDeniedException", "UnauthorizedOperation", "AccessDenied"]:
        print("Insufficient IAM permissions\n", file=sys.stderr)
        print("Your credentials need:", file=sys.stderr)
        print("  - ec2:DescribeRegions, ec2:DescribeInstances", file=sys.stderr)
        print("  - ssm:StartSession, ssm:TerminateSession", file=sys.stderr)
    elif error_code in ["ExpiredToken", "RequestExpired", "ExpiredTokenException"]:
        print("AWS credentials have expired\n", file=sys.stderr)
        print("Fix it:", file=sys.stderr)
        print("  aws sso login           # If using AWS SSO", file=sys.stderr)
        print("  aws configure           # Re-configure credentials", file=sys.stderr)
    elif error_code == "TargetNotConnected":
        print(f"Target is not connected to Session Manager: {error}\n", file=sys.stderr)
        print("This usually means:", file=sys.stderr)
        print("  - The SSM agent is not running on the instance", file=sys.stderr)
        print("  - The instance profile lacks AmazonSSMManagedInstanceCore", file=sys.stderr)
    else:
        print(f"AWS API error: {error}", file=sys.stderr)

    sys.exit(EXIT_ERROR)


def handle_transport_error(error: TransportFailed, debug_mode: bool) -> None:
    """Handle a failed transport process.

    The child's own exit status is propagated when known; a child killed by
    a signal exits with 128 plus the signal number, as a shell reports it.

    Parameters
    ----------
    error : TransportFailed
        The transport error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    TransportFailed
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    returncode = error.returncode
    if returncode is not None and returncode < 0:
        returncode = 128 + abs(returncode)

    print(f"[err] {error}", file=sys.stderr)
    sys.exit(returncode or EXIT_ERROR)


def handle_resolution_error(error: SSMHopError, debug_mode: bool) -> None:
    """Handle errors from command parsing and target resolution.

    Parameters
    ----------
    error : SSMHopError
        The error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    SSMHopError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"[err] {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def configure_logging(debug_mode: bool = False) -> None:
    """Install stdout/stderr handlers routed by the ``stream`` extra.

    Parameters
    ----------
    debug_mode : bool
        Whether to log at DEBUG level
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
    )


def main() -> None:
    """Entry point for Fire CLI with graceful error handling.

    Fire maps the SSMHop methods (start, ssh, scp, fwd) to subcommands.
    Set SSMHOP_DEBUG=1 to see tracebacks instead of one-line errors.
    """
    debug_mode = os.environ.get("SSMHOP_DEBUG") == "1"
    configure_logging(debug_mode)

    try:
        fire.Fire(get_ssmhop_base_class())
    except ProviderCredentialsError:
        handle_credentials_error(debug_mode)
    except ValueError as e:
        handle_value_error(e, debug_mode)
    except ProviderAPIError as e:
        handle_api_error(e, debug_mode)
    except TransportFailed as e:
        handle_transport_error(e, debug_mode)
    except SSMHopError as e:
        handle_resolution_error(e, debug_mode)
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        sys.exit(EXIT_SIGINT)

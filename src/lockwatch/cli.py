"""Command line entry point for the lock watcher daemon.

Usage:
    lockwatch --process WallpaperAerialsExtension --event unlock --verbose
    lockwatch --wait-for-displays --display-timeout-ms 8000 --force-after-ms 300

Every option falls back to a ``LOCKWATCH_*`` environment variable (or a
``.env`` entry) before its built-in default.
"""

from __future__ import annotations

import argparse
import hashlib
import logging
import sys
from typing import Optional, Sequence

from .config import ConfigurationError, env_bool, env_list, env_milliseconds, env_str
from .errors import SubscriptionError
from .logging_config import setup_logging
from .policy import (
    DEFAULT_DISPLAY_TIMEOUT_MS,
    DEFAULT_PROCESS_NAME,
    DEFAULT_SETTLE_DELAY_MS,
    SignalKind,
    TerminationPolicy,
    TriggerEvent,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "lockwatch"

EXIT_OK = 0
EXIT_SUBSCRIPTION_FAILED = 1
EXIT_ALREADY_RUNNING = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVICE_NAME,
        description="Terminate named processes when the screen is unlocked or locked.",
    )
    parser.add_argument(
        "--process",
        dest="processes",
        action="append",
        metavar="NAME",
        help=f"Process name to terminate (repeatable). Default: {DEFAULT_PROCESS_NAME}",
    )
    parser.add_argument("--event", choices=[event.value for event in TriggerEvent], help="Event to trigger on. Default: unlock")
    parser.add_argument("--signal", metavar="TERM|KILL", help="Primary signal. Default: TERM")
    parser.add_argument(
        "--force-after-ms",
        type=int,
        metavar="MS",
        help="If >0, send --force-signal after this delay. Default: 0 (disabled)",
    )
    parser.add_argument("--force-signal", metavar="KILL|TERM", help="Force signal. Default: KILL")
    parser.add_argument(
        "--wait-for-displays",
        action="store_true",
        default=None,
        help="Wait for external displays to be ready before killing (multi-monitor fix)",
    )
    parser.add_argument(
        "--display-timeout-ms",
        type=int,
        metavar="MS",
        help=f"Fallback timeout when waiting for displays. Default: {DEFAULT_DISPLAY_TIMEOUT_MS}",
    )
    parser.add_argument(
        "--settle-delay-ms",
        type=int,
        metavar="MS",
        help=f"Delay before killing when an external display is already attached. Default: {DEFAULT_SETTLE_DELAY_MS}",
    )
    parser.add_argument("--log-file", metavar="PATH", help="Also write log lines to PATH")
    parser.add_argument("--verbose", action="store_true", default=None, help="Print actions to stderr")
    return parser


def _milliseconds(cli_value: Optional[int], env_name: str, default: int) -> int:
    if cli_value is not None:
        return max(cli_value, 0)
    return env_milliseconds(env_name, or_value=default)


def _flag(cli_value: Optional[bool], env_name: str) -> bool:
    if cli_value is not None:
        return cli_value
    return bool(env_bool(env_name, or_value=False))


def build_policy(args: argparse.Namespace) -> TerminationPolicy:
    """
    Merge parsed arguments with environment defaults into a policy.

    Raises:
        ConfigurationError: If any value is malformed
    """
    if args.processes:
        names = [name.strip() for name in args.processes]
    else:
        names = list(env_list("LOCKWATCH_PROCESSES", or_value=[DEFAULT_PROCESS_NAME]))

    return TerminationPolicy.for_processes(
        names,
        primary_signal=SignalKind.parse(args.signal or env_str("LOCKWATCH_SIGNAL", "TERM")),
        force_signal=SignalKind.parse(args.force_signal or env_str("LOCKWATCH_FORCE_SIGNAL", "KILL")),
        grace_period_ms=_milliseconds(args.force_after_ms, "LOCKWATCH_FORCE_AFTER_MS", 0),
        trigger=TriggerEvent.parse(args.event or env_str("LOCKWATCH_EVENT", "unlock")),
        wait_for_displays=_flag(args.wait_for_displays, "LOCKWATCH_WAIT_FOR_DISPLAYS"),
        display_timeout_ms=_milliseconds(args.display_timeout_ms, "LOCKWATCH_DISPLAY_TIMEOUT_MS", DEFAULT_DISPLAY_TIMEOUT_MS),
        settle_delay_ms=_milliseconds(args.settle_delay_ms, "LOCKWATCH_SETTLE_DELAY_MS", DEFAULT_SETTLE_DELAY_MS),
        verbose=_flag(args.verbose, "LOCKWATCH_VERBOSE"),
    )


def instance_name(policy: TerminationPolicy) -> str:
    """Lock name for one agent: its trigger polarity plus its target set.

    Agents watching different events or different processes run side by
    side; only an exact duplicate is refused.
    """
    digest = hashlib.sha1("\n".join(sorted(policy.process_names)).encode("utf-8")).hexdigest()[:12]
    return f"{SERVICE_NAME}-{policy.trigger.value}-{digest}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments and run the daemon until it is stopped.

    Returns 0 after a normal shutdown, 1 when the event sources cannot be
    subscribed or an identical agent (same event and process set) is
    already running, and 2 for invalid configuration. ``argparse`` itself exits
    with 2 on unknown arguments and 0 for ``--help``.
    """
    from .daemon import run_daemon
    from .service_runner import SingleInstanceError, run_async_service

    args = build_parser().parse_args(argv)
    try:
        policy = build_policy(args)
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_USAGE

    setup_logging(verbose=policy.verbose, log_file=args.log_file)
    logger.debug("Starting with policy %s", policy)

    try:
        run_async_service(
            lambda: run_daemon(policy),
            service_name=instance_name(policy),
            shutdown_message="Lock watcher stopped",
        )
    except SingleInstanceError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_ALREADY_RUNNING
    except SubscriptionError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_SUBSCRIPTION_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

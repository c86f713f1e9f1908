"""CLI handling for clipshield.

This module provides the command-line interface for clipshield, handling
argument parsing via click, logging configuration, and dispatching to
monitor or scan mode based on user-specified options.

Usage:
    clipshield --monitor [--delay N] [--paste-delay N] [--no-cc] [--no-ssn]
               [--no-sin] [--no-notify] [--disabled] [--verbose | --quiet]
    clipshield --scan [--no-cc] [--no-ssn] [--no-sin] [--no-notify]
"""

import sys

import click

from clipshield.main_logging import configure_logging
from clipshield.main_options import MutuallyExclusiveOption, selected_mode
from clipshield.settings import SettingsStore


@click.command()
@click.option(
    "--monitor",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["scan"],
    help="Watch the clipboard and clear sensitive data after a delay",
)
@click.option(
    "--scan",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["monitor"],
    help="Check the clipboard once and clear it if it holds sensitive data",
)
@click.option(
    "--delay",
    type=click.IntRange(min=1),
    default=30,
    show_default=True,
    help="Seconds before detected data is cleared",
)
@click.option(
    "--paste-delay",
    type=click.IntRange(min=1),
    default=2,
    show_default=True,
    help="Seconds before clearing once the data has been pasted",
)
@click.option("--no-cc", is_flag=True, help="Do not detect credit card numbers")
@click.option("--no-ssn", is_flag=True, help="Do not detect US Social Security numbers")
@click.option("--no-sin", is_flag=True, help="Do not detect Canadian Social Insurance numbers")
@click.option("--no-notify", is_flag=True, help="Do not show desktop notifications")
@click.option(
    "--disabled",
    is_flag=True,
    help="Start with monitoring paused (send SIGUSR1 to resume)",
)
@click.option(
    "--verbose",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["quiet"],
    help="Enable DEBUG-level logging",
)
@click.option(
    "--quiet",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["verbose"],
    help="Only log warnings and errors",
)
def main(
    monitor: bool,
    scan: bool,
    delay: int,
    paste_delay: int,
    no_cc: bool,
    no_ssn: bool,
    no_sin: bool,
    no_notify: bool,
    disabled: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Clear credit card and national ID numbers from the X11 clipboard."""
    mode = selected_mode({"monitor": monitor, "scan": scan})

    configure_logging(verbose, quiet)

    settings = SettingsStore(
        enabled=not disabled,
        clear_delay=delay,
        post_paste_delay=paste_delay,
        enable_cc=not no_cc,
        enable_ssn=not no_ssn,
        enable_sin=not no_sin,
        show_notification=not no_notify,
    )
    if not settings.snapshot().enabled_patterns:
        raise click.UsageError("At least one pattern must stay enabled")

    _run_mode(mode, settings)


def _run_mode(mode: str, settings: SettingsStore) -> None:
    """Run the appropriate mode (monitor or scan).

    Args:
        mode: "monitor" or "scan".
        settings: Settings built from the command line.
    """
    import asyncio

    from clipshield.runner import run_monitor, run_scan
    from clipshield.x11_display import DisplayUnavailableError

    try:
        if mode == "scan":
            result = asyncio.run(run_scan(settings))
            click.echo(result.message)
        else:
            asyncio.run(run_monitor(settings))
    except DisplayUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

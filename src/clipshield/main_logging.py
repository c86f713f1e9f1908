"""Logging configuration for the clipshield CLI."""
import logging


def log_level(verbose: bool, quiet: bool) -> int:
    """Pick the root log level for the given flags.

    Args:
        verbose: Show DEBUG messages.
        quiet: Show only warnings and errors. Ignored if verbose is set.

    Returns:
        A logging level constant. INFO by default, so detections and
        clears are reported while monitoring.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    """Configure the root logger to write to stderr.

    Args:
        verbose: If True, set DEBUG level.
        quiet: If True (and not verbose), set WARNING level.

    Errors are always printed to stderr regardless of verbosity.
    """
    logging.basicConfig(
        level=log_level(verbose, quiet),
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )

"""Click option helpers for the --monitor/--scan mode switch."""
import click

MODES: tuple[str, ...] = ("monitor", "scan")


def selected_mode(flags: dict[str, bool]) -> str:
    """Return the one mode whose flag is set.

    Args:
        flags: Mode name to flag value, e.g. {"monitor": True, "scan": False}.

    Returns:
        Name of the selected mode.

    Raises:
        click.UsageError: If no mode is selected.
    """
    for name in MODES:
        if flags.get(name):
            return name
    options = " or ".join(f"--{name}" for name in MODES)
    raise click.UsageError(f"Either {options} must be specified")


class MutuallyExclusiveOption(click.Option):
    """Click option that refuses to be combined with the named options."""

    def __init__(self, *args, **kwargs):
        """Initialize with exclusive_with, the names of conflicting options."""
        self.exclusive_with = tuple(kwargs.pop("exclusive_with", ()))
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        """Raise UsageError if a conflicting option was also given."""
        if self.name in opts:
            conflicts = [other for other in self.exclusive_with if other in opts]
            if conflicts:
                others = ", ".join(f"--{other}" for other in conflicts)
                raise click.UsageError(
                    f"Options --{self.name} and {others} are mutually exclusive"
                )
        return super().handle_parse_result(ctx, opts, args)

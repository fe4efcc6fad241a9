import sys

from rich.pretty import pprint

from schemargs import *

help = Slot()
verbose = Slot(0)

resize = Schema(
    Positional("images", "images to resize", kind=ValueKind.FILE, list=True),
    Positional("output", "destination directory", kind=ValueKind.DIR),
    Option("-w", "--width", metavar="PIXELS", descr="target width", kind=ValueKind.UINT32, default=1024),
    Option("-q", "--quality", metavar="N", descr="jpeg quality", kind=ValueKind.UINT8, default=90),
    Option(
        "-f", "--filter", descr="resampling filter", kind=ValueKind.CHOICE,
        choices=ChoiceSet(("nearest", "fastest"), ("bilinear", "balanced"), ("lanczos", "sharpest")),
    ),
    Flag("-v", "--verbose", descr="more output (repeatable)", kind=FlagKind.COUNT, slot=verbose),
    help_flag(help, config=True),
    descr="Resize images into a directory.",
    list_terminator="::",
)

inspect = Schema(
    Positional("images", "images to inspect", kind=ValueKind.FILE, list=True),
    Option("--budget", metavar="SIZE", descr="warn above this size", kind=ValueKind.SIZE, default=10 * 1024 ** 2),
    Flag("-v", "--verbose", descr="more output (repeatable)", kind=FlagKind.COUNT, slot=verbose),
    help_flag(help, config=True),
    descr="Print image metadata.",
)

command = Positional(
    "command",
    kind=ValueKind.SUBCOMMAND,
    subcommands=SubcommandSet(
        Subcommand("resize", resize, "resize images"),
        Subcommand("inspect", inspect, "print image metadata"),
    ),
)

root = Schema(
    Flag("-v", "--verbose", descr="more output (repeatable)", kind=FlagKind.COUNT, slot=verbose),
    command,
    help_flag(help, config=True),
    descr="Small image toolbox.",
    ignore_prefix="#",
)


if __name__ == '__main__':
    if failed := root.parse():
        render_usage(" ".join(schema.name for schema in failed.path), failed)
        sys.exit(failed.error)
    if help.value is not None:
        render_usage(" ".join(schema.name for schema in help.value.path), help.value)
        sys.exit(0)
    pprint(command.value.schema)
    root.release()
    command.value.schema.release()

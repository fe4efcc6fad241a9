"""
Schemargs usage rendering.

render_usage() prints a usage summary of one schema with rich: the synopsis,
the description, one section per argument group, the subcommands table and
a notes section explaining the schema's token conventions. It only reads the
schema; slots, errors and ledgers are left untouched.

Palette keys
- usage-label, program-name, description-section
- group-label, argument-name, option-name, flag-name, metavar, choice,
  argument-description
- children-title, children-table, children, children-description
- notes-label, notes-dot, note

Define a mapping named __styles__ in __main__ to override any palette entry.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .arguments import Positional, Option, Flag, FlagKind
from .utils import *
from .values import ValueKind

ALIGNMENT = 36


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "description-section": "italic #A3A3A3",

        "group-label": "bold #FFFFFF",
        "argument-name": "bold #FFD600",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "#FFD600",
        "choice": "bold #FF4D94",
        "argument-description": "#9CA3AF",

        "children-title": "bold #FFFFFF",
        "children-table": "#4B5563",
        "children": "bold #36C5F0",
        "children-description": "#9CA3AF",

        "notes-label": "bold #00E6FF",
        "notes-dot": "#00E6FF dim",
        "note": "#D1D5DB",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _value(argument, styles):
    """
    Metavar of a value-bearing argument: inline choices, explicit metavar, or kind.
    """
    if argument.kind is ValueKind.CHOICE and not argument.choices.details:
        value = Text.assemble("{", Text(",").join(Text(choice.value, styles["choice"]) for choice in argument.choices), "}")
    elif argument.kind is ValueKind.SUBCOMMAND:
        value = Text("command", styles["metavar"])
    elif isinstance(argument, Option) and argument.metavar:
        value = Text(argument.metavar, styles["metavar"])
    elif isinstance(argument, Positional):
        value = Text(argument.name, styles["argument-name"])
    else:
        value = Text(argument.kind.label, styles["metavar"])
    return value


def _synopsis(argument, styles):
    if isinstance(argument, Flag):
        return Text.assemble("[", Text(argument.names[0], styles["flag-name"]), "]")
    if isinstance(argument, Option):
        return Text.assemble(
            "[", Text(argument.names[0], styles["option-name"]), " ", "<", _value(argument, styles), ">",
            "..." if argument.list else "", "]",
        )
    left, right = ("[", "]") if argument.optional else ("<", ">")
    return Text.assemble(left, _value(argument, styles), right, "..." if argument.list else "")


def _names(switch, styles):
    style = styles["flag-name"] if isinstance(switch, Flag) else styles["option-name"]
    return Text(", ").join(Text(name, style) for name in switch.names)


def _row(label, descr, styles):
    row = Text("  ").append(label)
    if descr:
        if len(row) >= ALIGNMENT - 2:
            row.append("\n").append(" " * ALIGNMENT)
        else:
            row.append(" " * (ALIGNMENT - len(row)))
        row.append(Text(str(descr), styles["argument-description"]) if isinstance(descr, str) else descr)
    return row


def _details(argument, styles):
    rows = []
    if argument.kind is ValueKind.CHOICE and argument.choices.details:
        for choice in argument.choices:
            rows.append(_row(Text.assemble("  ", Text(choice.value, styles["choice"])), choice.descr, styles))
    return rows


def _notes(schema):
    options = schema.options
    notes = []
    if options.ignore_prefix is not None:
        notes.append("arguments starting with %r are ignored" % options.ignore_prefix)
    if options.list_terminator is not None and any(argument.list for argument in schema.positionals):
        notes.append("%r ends the current list of positional values" % options.list_terminator)
    if options.toggle:
        notes.append("'--' turns option and flag parsing off, a second '--' turns it back on")
    else:
        notes.append("'--' makes the next argument positional even if it starts with '-'")
    if any(switch.exit for switch in schema.switches if isinstance(switch, Flag)):
        notes.append("%s stop%s parsing immediately" % (
            ", ".join(switch.names[-1] for switch in schema.switches if isinstance(switch, Flag) and switch.exit),
            "s" if sum(isinstance(switch, Flag) and switch.exit for switch in schema.switches) == 1 else "",
        ))
    if any(isinstance(switch, Flag) and switch.kind is FlagKind.COUNT for switch in schema.switches):
        notes.append("counting flags may be repeated (e.g. -vvv)")
    return notes


def render_usage(prog, schema, /, console=Unset):
    """
    Print the usage of schema as invoked under prog.

    Parameters
    - prog: program or route name shown in the synopsis (e.g. "tool init").
    - schema: the schema to describe.
    - console: Unset | rich Console; defaults to a stdout console.
    """
    if not isinstance(prog, str):
        raise TypeError("render_usage() first argument must be a string")
    if not callable(getattr(schema, "__schema__", None)):
        raise TypeError("render_usage() second argument must be a schema")
    schema = schema.__schema__()
    console = coalesce(console, Console())
    styles = _styles()

    renders = []

    usage = Text()
    usage.append("usage", styles["usage-label"]).append(": ")
    usage.append(prog, styles["program-name"])
    for argument in (*schema.switches, *schema.positionals):
        usage.append(" ").append(_synopsis(argument, styles))
    renders.append(usage)

    if descr := schema.options.descr:
        renders.append(Text("\n").append(Text(str(descr), styles["description-section"]) if isinstance(descr, str) else descr))

    groups = (
        ("positionals", schema.positionals),
        ("options", [switch for switch in schema.switches if isinstance(switch, Option)]),
        ("flags", [switch for switch in schema.switches if isinstance(switch, Flag)]),
    )
    for group, arguments in groups:
        if not arguments:
            continue
        section = Text("\n").append(group, styles["group-label"]).append(":")
        for argument in arguments:
            if isinstance(argument, Positional):
                label = _synopsis(argument, styles)
            elif isinstance(argument, Option):
                label = Text.assemble(_names(argument, styles), " <", _value(argument, styles), ">")
            else:
                label = _names(argument, styles)
            section.append("\n").append(_row(label, argument.descr, styles))
            for row in _details(argument, styles):
                section.append("\n").append(row)
        renders.append(section)

    for positional in schema.positionals:
        if positional.kind is not ValueKind.SUBCOMMAND:
            continue
        table = Table(
            "name", "help",
            title=Text(positional.name, styles["children-title"]),
            box=ROUNDED,
            style=styles["children-table"],
            header_style=styles["children-title"],
        )
        for subcommand in positional.subcommands:
            table.add_row(
                Text(subcommand.name, styles["children"]),
                Text(str(subcommand.descr or "no description"), styles["children-description"]),
            )
        renders.append(Text(""))
        renders.append(table)

    if schema.options.notes and (notes := _notes(schema)):
        dot = Text(" • ", styles["notes-dot"])
        section = Text("\n").append("notes", styles["notes-label"]).append(":")
        for note in notes:
            section.append("\n").append(dot).append(note, styles["note"])
        renders.append(section)

    console.print(Group(*renders), highlight=False)


__all__ = (
    "render_usage",
)

"""
Schemargs faults: error kinds, log levels and the log sink.

Scope
- ErrorKind: the closed set of parse outcomes recorded on a schema. Parsing
  never raises for user input; the failing schema carries one of these.
- error_description(): static, human-readable text for every ErrorKind.
- LogLevel: severity of diagnostics, plus NO_LOGS which silences everything.
- log(): route a %-formatted message through a schema's sink, filtered by the
  schema's minimum level.

Rendering
- Without a custom sink, diagnostics are printed on stderr through a shared
  rich console as "[ <route> | <level> ]" followed by the message.
- The palette can be overridden with a __styles__ mapping in __main__
  (keys: prog-name, info, warning, error, config-warning, config-error,
  message).
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Console
from rich.text import Text

console = Console(stderr=True)


class ErrorKind(IntEnum):
    """
    last error recorded on a schema.

    OK is the only falsey member, so `if schema.error:` reads naturally.
    """
    OK                 = 0
    INVALID_CONFIG     = 1
    INVALID_VALUE      = 2
    INVALID_OPTION     = 3
    TOO_MANY_ARGUMENTS = 4
    TOO_FEW_ARGUMENTS  = 5

    def describe(self):
        return _descriptions[self]


_descriptions = {
    ErrorKind.OK: "no error",
    ErrorKind.INVALID_CONFIG: "configuration is invalid",
    ErrorKind.INVALID_VALUE: "argument value does not match expected type or criteria",
    ErrorKind.INVALID_OPTION: "unrecognized option or flag syntax",
    ErrorKind.TOO_MANY_ARGUMENTS: "too many positional arguments provided",
    ErrorKind.TOO_FEW_ARGUMENTS: "required positional arguments missing",
}


class LogLevel(IntEnum):
    """
    severity of a diagnostic, ordered from least to most severe.

    a schema logs a message only when its level is at least the schema's
    minimum level; NO_LOGS as minimum level therefore disables all output.
    """
    INFO           = 0
    WARNING        = 1
    ERROR          = 2
    CONFIG_WARNING = 3
    CONFIG_ERROR   = 4
    NO_LOGS        = 5

    @property
    def label(self):
        return self.name.lower().replace("_", " ")


def error_description(kind, /):
    """
    Return the static description of an ErrorKind.

    Raises
    - TypeError: if kind is not an ErrorKind (plain integers are accepted when
      they name a member).
    """
    try:
        return _descriptions[ErrorKind(kind)]
    except ValueError:
        raise TypeError("error_description() argument must be an error kind") from None


def _render(route, level, message):
    styles = defaultdict(str, {
        "prog-name": "bold #E6E6F0",
        "info": "bold #36C5F0",
        "warning": "bold #FFB400",
        "error": "bold #FF4DA6",
        "config-warning": "bold #F97316",
        "config-error": "bold #EF4444",
        "message": "#C8C8D0",
    } | getattr(__import__("__main__"), "__styles__", {}))

    header = Text.assemble(
        "[ ",
        Text(route or "?", styles["prog-name"]),
        " | ",
        Text(level.label, styles[level.label.replace(" ", "-")]),
        " ] ",
    )
    console.print(Text.assemble(header, Text(message, styles["message"])), highlight=False)


def log(schema, level, message, /, *args):
    """
    Log a diagnostic on behalf of a schema.

    Parameters
    - schema: the schema whose options (sink, level) apply.
    - level: LogLevel of the message. NO_LOGS is never emitted.
    - message: %-style format string, formatted with args when args are given.

    Behavior
    - Messages below schema.options.level are dropped before formatting.
    - schema.options.sink, when set, receives (level, formatted message);
      otherwise the message is rendered on the shared stderr console.
    """
    if not isinstance(level, LogLevel):
        raise TypeError("log() level must be a log level")
    if level is LogLevel.NO_LOGS or level < schema.options.level:
        return
    if args:
        message = message % args
    if (sink := schema.options.sink) is not None:
        sink(level, message)
        return
    _render(" ".join(str(step.name) for step in schema.path if step.name), level, message)


__all__ = (
    "ErrorKind",
    "LogLevel",
    "error_description",
    "log",
)

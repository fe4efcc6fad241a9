"""
Schemargs schemas: the declaration of one (sub)command and its ledger.

Overview
- Options: settings shared by one or more schemas (description, ignore
  prefix, list terminator, "--" toggling, string duplication, log sink and
  minimum level, usage notes, filesystem collaborator).
- Schema: ordered argument specs plus the state a parse leaves behind: the
  name it was invoked under, a weak link to the parent schema, the ledger of
  duplicated strings and the last error.

Lifecycle
- Build schemas once at definition time, nested schemas first (they are
  referenced by Subcommand entries).
- parse() assigns names and parent links, fills the slots and records errors.
- release() (or release_allocations()/release_list()) drops what the parse
  accumulated; nothing is released implicitly.
"""
import weakref
from collections import namedtuple

from rich.text import Text

from .arguments import Positional, Option, Flag
from .faults import ErrorKind, LogLevel
from .lists import TypedList
from .parsing import parse
from .utils import *


class Options(namedtuple("Options", (
    "descr",
    "ignore_prefix",
    "list_terminator",
    "toggle",
    "duplicate",
    "sink",
    "level",
    "notes",
    "filesystem",
), defaults=(None, None, None, False, False, None, LogLevel.INFO, True, None))):
    """
    Schema settings.

    Fields
    - descr: description of the (sub)command shown in the usage.
    - ignore_prefix: tokens starting with it are skipped entirely.
    - list_terminator: token closing the current list positional.
    - toggle: "--" switches option parsing off until the next "--" (without
      it, "--" only protects the single next token).
    - duplicate: strings stored in slots are recorded in the schema ledger.
    - sink: callable(level, message) receiving diagnostics.
    - level: minimum LogLevel emitted; LogLevel.NO_LOGS silences everything.
    - notes: show the notes section in the usage.
    - filesystem: collaborator answering exists/isfile/isdir for paths.
    """
    __slots__ = ()


def _sanitize_options(options, /):
    if not isinstance(descr := options.descr, str | Text | None):
        raise TypeError("schema 'descr' must be a string")
    elif isinstance(descr, str) and not descr.strip():
        raise ValueError("schema 'descr' cannot be empty")

    for field in ("ignore_prefix", "list_terminator"):
        if not isinstance(value := getattr(options, field), str | None):
            raise TypeError(f"schema '{field}' must be a string")
        elif isinstance(value, str) and not value:
            raise ValueError(f"schema '{field}' cannot be empty")

    if options.list_terminator is not None and options.list_terminator == "--":
        raise ValueError("schema 'list_terminator' cannot be '--'")
    if options.sink is not None and not callable(options.sink):
        raise TypeError("schema 'sink' must be callable")
    if not isinstance(options.level, LogLevel):
        raise TypeError("schema 'level' must be a log level")
    if options.filesystem is not None and not all(
        callable(getattr(options.filesystem, name, None)) for name in ("exists", "isfile", "isdir")
    ):
        raise TypeError("schema 'filesystem' must provide exists(), isfile() and isdir()")

    return options._replace(
        toggle=bool(options.toggle),
        duplicate=bool(options.duplicate),
        notes=bool(options.notes),
    )


def _override_options(options, settings, /):
    if unknown := sorted(settings.keys() - Options._fields):
        raise TypeError("schema got unexpected settings: " + ", ".join(unknown))
    return options._replace(**settings)


class Schema:
    """
    Declarative description of one (sub)command.

    Parameters
    - *arguments: Positional, Option and Flag specs, positionals in order.
    - name: Unset | str, overrides the name assigned by parse().
    - options: Unset | Options, settings possibly shared with other schemas.
    - **settings: per-field overrides applied on top of options
      (e.g. Schema(..., descr="...", list_terminator="::")).

    Public state
    - name, parent (None or the schema this one was reached from), error,
      allocations, options (assignable), arguments, positionals, switches.
    """

    name = mirror("name")
    error = mirror("error")
    arguments = mirror("arguments")
    allocations = mirror("allocations")

    def __init__(self, *arguments, name=Unset, options=Unset, **settings):
        for argument in arguments:
            if not isinstance(argument, Positional | Option | Flag):
                raise TypeError("schema arguments must be positionals, options or flags")
        if not isinstance(name, str | Unset):
            raise TypeError("schema 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError("schema 'name' cannot be empty")
        if not isinstance(options := coalesce(options, Options()), Options):
            raise TypeError("schema 'options' must be an options tuple")

        options = _override_options(options, settings)

        self._arguments = arguments
        self._options = _sanitize_options(options)
        self._name = coalesce(name)
        self._parent = None
        self._allocations = []
        self._error = ErrorKind.OK

    def __schema__(self):
        return self

    @property
    def options(self):
        return self._options

    @options.setter
    def options(self, options):
        if not isinstance(options, Options):
            raise TypeError("schema 'options' must be an options tuple")
        self._options = _sanitize_options(options)

    def configure(self, **settings):
        """Replace some option fields, keeping the others."""
        self.options = _override_options(self._options, settings)
        return self

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def positionals(self):
        return tuple(argument for argument in self._arguments if isinstance(argument, Positional))

    @property
    def switches(self):
        return tuple(argument for argument in self._arguments if isinstance(argument, Option | Flag))

    @property
    def root(self):
        """
        The outermost schema of the chain that led to this one.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Schemas from the root down to this one, e.g. for "prog sub" routes.
        """
        path = [schema := self]
        while schema.parent:
            path.append(schema := schema.parent)
        return tuple(reversed(path))

    def duplicate(self, string, /):
        """
        Return string, recording it in the ledger when duplication is enabled.
        """
        if not isinstance(string, str):
            raise TypeError("duplicate() argument must be a string")
        if not self._options.duplicate:
            return string
        # str is immutable: the ledger tracks ownership, the text needs no copy
        self._allocations.append(string)
        return string

    def release_allocations(self):
        self._allocations.clear()

    def release(self):
        """
        Release every list bound to this schema's arguments and the ledger.

        Subcommand schemas are not visited; release them on their own.
        """
        for argument in self._arguments:
            if isinstance(argument, Positional | Option) and isinstance(argument.value, TypedList):
                argument.value.release()
        self.release_allocations()

    def parse(self, args=Unset, /, prog=Unset):
        """Shorthand for parse(args, self, prog=prog)."""
        return parse(args, self, prog=prog)

    def _attach(self, name, parent, /):
        self._name = name
        self._parent = weakref.ref(parent) if parent is not None else None

    def _fail(self, kind, /):
        self._error = kind
        return self

    def _reset(self):
        self._error = ErrorKind.OK

    def __rich_repr__(self):
        yield "name", self.name
        yield "arguments", self.arguments
        yield "error", self.error

    def __repr__(self):
        return "schema(name=%r, arguments=%r, error=%r)" % (self.name, self.arguments, self.error)


def duplicate_string(schema, string, /):
    """
    Return string unchanged when duplication is disabled on schema, otherwise
    an owned copy recorded in the schema's allocation ledger.
    """
    if not isinstance(schema, Schema):
        raise TypeError("duplicate_string() first argument must be a schema")
    return schema.duplicate(string)


def release_allocations(schema, /):
    """
    Drop every string recorded in the schema's ledger. Idempotent.
    """
    if not isinstance(schema, Schema):
        raise TypeError("release_allocations() argument must be a schema")
    schema.release_allocations()


__all__ = (
    "Options",
    "Schema",
    "duplicate_string",
    "release_allocations",
)

r"""
Schemargs argument specifications.

Overview
- Specs
  • Positional: value-bearing argument matched by position (optionally a list,
    optionally omitted, or a subcommand selector).
  • Option: named value-bearing argument (-o VALUE, -oVALUE, --output VALUE,
    --output=VALUE), optionally repeated into a list.
  • Flag: named presence-only switch (bool, counter, schema capture or
    callback), optionally stopping the parse on the spot (exit=True).

- Storage
  • Slot: mutable cell receiving the parsed value. Each spec creates its own
    unless one is passed in, which lets several specs share storage (e.g. one
    verbosity counter for the root command and every subcommand).

- Payloads
  • ChoiceSet / Choice: closed set of literals for CHOICE values.
  • SubcommandSet / Subcommand: named nested schemas for SUBCOMMAND values.
  • verify: user callable for CUSTOM values,
    verify(schema, name, token, slot) -> bool.

- Introspection & representation
  • ArgumentType metaclass exposes the names in __introspectable__ as
    read-only properties and provides __repr__/__rich_repr__.

Metadata (sanitized on construction)
- descr: Unset | str | Text, non-empty when provided; explicit None rejected.
- names (Option/Flag): at most one short "-x" and one long "--name"; at least
  one of them. Long names follow r"--[^\W\d_](-?[^\W_]+)*".
- kind/payload: exactly the payload selected by the kind must be given:
  CUSTOM → verify, CHOICE → choices, SUBCOMMAND → subcommands, anything
  else → none of them.
- list: the slot must hold a TypedList; SUBCOMMAND values cannot be listed.
- default/slot: mutually exclusive.

Quick example:
    >>> from schemargs import Positional, Option, Flag, FlagKind, ValueKind
    >>> files = Positional("files", "input files", list=True)
    >>> jobs = Option("-j", "--jobs", metavar="N", kind=ValueKind.UINT8, default=1)
    >>> verbose = Flag("-v", "--verbose", kind=FlagKind.COUNT)
"""
import functools
import operator
import re
from collections.abc import Iterable
from enum import IntEnum

from rich.text import Text

from .lists import TypedList
from .utils import *
from .values import ValueKind


class ArgumentType(type):
    """
    Metaclass for specs and payload entries.

    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - Every name in __introspectable__ becomes a read-only property over the
      private "_{name}" attribute.
    - __displayable__ (if set) narrows the fields shown by __rich_repr__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class FlagKind(IntEnum):
    """
    effect of a flag occurrence.

    - BOOL: store True (default)
    - COUNT: increment an integer counter
    - CONFIG: store the schema in which the flag was given
    - CALLBACK: call callback(schema)
    """
    BOOL     = 0
    COUNT    = 1
    CONFIG   = 2
    CALLBACK = 3


class Slot:
    """
    Mutable storage cell for a parsed value.

    The parser assigns slot.value; applications read it back after parse().
    default keeps the value the slot was created with.
    """

    __slots__ = ("value", "_default")

    def __init__(self, default=None, /):
        self.value = default
        self._default = default

    @property
    def default(self):
        return self._default

    def __repr__(self):
        return "slot(%r)" % (self.value,)


def _sanitize_descr(cls, metadata, /):
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Choice(metaclass=ArgumentType):
    """
    One allowed literal of a ChoiceSet with its description.
    """

    __introspectable__ = (
        "value",
        "descr",
    )

    def __init__(self, value, /, descr=Unset):
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__typename__} 'value' must be a string")
        if not value:
            raise ValueError(f"{type(self).__typename__} 'value' cannot be empty")
        metadata = {"descr": descr}
        _sanitize_descr(type(self), metadata)
        self._value = value
        self._descr = metadata["descr"]


class ChoiceSet(metaclass=ArgumentType):
    """
    Ordered, closed set of Choice entries.

    Entries may be given as Choice objects, plain strings, or (value, descr)
    pairs. Values must be unique; with insensitive=True they must also be
    unique after case folding. details=False asks the usage renderer to list
    the literals inline instead of describing each one.
    """

    __introspectable__ = (
        "choices",
        "insensitive",
        "details",
    )

    def __init__(self, *choices, insensitive=False, details=True):
        if not choices:
            raise TypeError(f"{type(self).__typename__} must contain at least one choice")

        sanitized = []
        seen = set()
        for choice in choices:
            match choice:
                case Choice():
                    pass
                case str():
                    choice = Choice(choice)
                case (str() as value, str() | Text() as descr):
                    choice = Choice(value, descr)
                case _:
                    raise TypeError(f"{type(self).__typename__} entries must be choices, strings or (value, descr) pairs")
            if (key := choice.value.casefold() if insensitive else choice.value) in seen:
                raise ValueError(f"{type(self).__typename__} cannot contain duplicates ({choice.value!r})")
            seen.add(key)
            sanitized.append(choice)

        self._choices = tuple(sanitized)
        self._insensitive = bool(insensitive)
        self._details = bool(details)

    def __iter__(self):
        return iter(self._choices)

    def __len__(self):
        return len(self._choices)

    def __getitem__(self, index):
        return self._choices[index]


class Subcommand(metaclass=ArgumentType):
    """
    One named nested schema of a SubcommandSet.

    schema is anything exposing a __schema__() hook (Schema does).
    """

    __introspectable__ = (
        "name",
        "descr",
        "schema",
    )

    __displayable__ = (
        "name",
        "descr",
    )

    def __init__(self, name, schema, /, descr=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        if not name.strip() or name != name.strip() or name.startswith("-"):
            raise ValueError(f"{type(self).__typename__} 'name' must be a non-empty word not starting with '-'")
        if not callable(getattr(schema, "__schema__", None)):
            raise TypeError(f"{type(self).__typename__} 'schema' must be a schema")
        metadata = {"descr": descr}
        _sanitize_descr(type(self), metadata)
        self._name = name
        self._schema = schema.__schema__()
        self._descr = metadata["descr"]


class SubcommandSet(metaclass=ArgumentType):
    """
    Ordered set of Subcommand entries with unique names.
    """

    __introspectable__ = (
        "subcommands",
    )

    def __init__(self, *subcommands):
        if not subcommands:
            raise TypeError(f"{type(self).__typename__} must contain at least one subcommand")
        names = set()
        for subcommand in subcommands:
            if not isinstance(subcommand, Subcommand):
                raise TypeError(f"{type(self).__typename__} entries must be subcommands")
            if subcommand.name in names:
                raise ValueError(f"{type(self).__typename__} names cannot contain duplicates ({subcommand.name!r})")
            names.add(subcommand.name)
        self._subcommands = subcommands

    def __iter__(self):
        return iter(self._subcommands)

    def __len__(self):
        return len(self._subcommands)

    def __getitem__(self, index):
        return self._subcommands[index]

    def find(self, name, /):
        """Return the entry called name, or None."""
        for subcommand in self._subcommands:
            if subcommand.name == name:
                return subcommand
        return None


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: split names into one short and one long form.

    Accepted forms are "-x" (any single letter or digit) and "--name" with
    hyphen-separated segments (Unicode letters allowed, no underscores, no
    leading digit). Duplicated forms are rejected.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    short = long = None
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"-[^\W_]", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} can have only one short name")
            short = name
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} can have only one long name")
            long = name
        else:
            raise ValueError(f"{cls.__typename__} names must look like '-x' or '--name' (unicodes are allowed)")

    metadata["short"] = short
    metadata["long"] = long
    del metadata["names"]


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate kind, payload and storage of Positional and Option.

    Responsibilities
    - kind must be a ValueKind; exactly the payload it selects is required.
    - choices may be given as any iterable and are normalized to a ChoiceSet.
    - list storage must be a TypedList (created from the kind when omitted;
      CUSTOM lists have no implied size and must bring their own).
    - default and slot are mutually exclusive; the resulting Slot is stored
      under 'slot'.
    """
    if not isinstance(kind := metadata["kind"], ValueKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a value kind")

    verify = metadata["verify"]
    choices = metadata["choices"]
    subcommands = metadata.get("subcommands", Unset)

    if (kind is ValueKind.CUSTOM) != (verify is not Unset):
        raise TypeError(f"{cls.__typename__} 'verify' is required for custom values and only for them")
    if verify is not Unset and not callable(verify):
        raise TypeError(f"{cls.__typename__} 'verify' must be callable")

    if (kind is ValueKind.CHOICE) != (choices is not Unset):
        raise TypeError(f"{cls.__typename__} 'choices' is required for choice values and only for them")
    if choices is not Unset and not isinstance(choices, ChoiceSet):
        if not isinstance(choices, Iterable) or isinstance(choices, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be a choice-set or an iterable of choices")
        metadata["choices"] = choices = ChoiceSet(*choices)

    if kind is ValueKind.SUBCOMMAND and "subcommands" not in metadata:
        raise TypeError(f"{cls.__typename__} cannot hold subcommand values")
    if (kind is ValueKind.SUBCOMMAND) != (subcommands is not Unset):
        raise TypeError(f"{cls.__typename__} 'subcommands' is required for subcommand values and only for them")
    if subcommands is not Unset and not isinstance(subcommands, SubcommandSet):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be a subcommand-set")

    if metadata["list"] and kind is ValueKind.SUBCOMMAND:
        raise TypeError(f"{cls.__typename__} subcommand values cannot be collected in a list")

    if (slot := metadata["slot"]) is not Unset:
        if metadata["default"] is not Unset:
            raise TypeError(f"{cls.__typename__} cannot have both 'default' and 'slot'")
        if not isinstance(slot, Slot):
            raise TypeError(f"{cls.__typename__} 'slot' must be a slot")
        if metadata["list"] and not isinstance(slot.value, TypedList):
            raise TypeError(f"{cls.__typename__} list 'slot' must hold a typed-list")
    elif metadata["list"]:
        if (default := metadata["default"]) is Unset:
            if kind.itemsize is None:
                raise TypeError(f"{cls.__typename__} custom list needs a typed-list 'default' declaring its itemsize")
            default = TypedList.of(kind)
        elif not isinstance(default, TypedList):
            raise TypeError(f"{cls.__typename__} list 'default' must be a typed-list")
        slot = Slot(default)
    else:
        slot = Slot(coalesce(metadata["default"]))

    metadata["slot"] = slot
    del metadata["default"]


class Positional(metaclass=ArgumentType):
    """
    Positional, value-bearing argument specification.

    Positionals are matched in declaration order. A list positional keeps
    taking tokens until the schema's list terminator, or until only as many
    tokens are left as the required positionals after it need. A SUBCOMMAND
    positional selects a nested schema which then parses every remaining token.

    Properties
    - The names listed in __introspectable__ are read-only; value reads the slot.
    """

    __introspectable__ = (
        "name",
        "descr",
        "kind",
        "list",
        "optional",
        "verify",
        "choices",
        "subcommands",
        "slot",
    )

    __displayable__ = (
        "name",
        "descr",
        "kind",
        "list",
        "optional",
        "slot",
    )

    def __init__(
            self,
            name,
            descr=Unset,
            /,
            kind=ValueKind.STRING,
            *,
            list=False,
            optional=False,
            verify=Unset,
            choices=Unset,
            subcommands=Unset,
            default=Unset,
            slot=Unset,
    ):
        """
        Parameters
        - name: str, label shown in usage and diagnostics.
        - descr: Unset | str, short description.
        - kind: ValueKind (STRING by default).
        - list: collect every matching token into a TypedList.
        - optional: the positional may be omitted.
        - verify / choices / subcommands: payload selected by kind.
        - default: initial slot value (None, or an empty TypedList for lists).
        - slot: externally owned Slot (excludes default).
        """
        cls = type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        metadata = {
            "descr": descr,
            "kind": kind,
            "list": bool(list),
            "optional": bool(optional),
            "verify": verify,
            "choices": choices,
            "subcommands": subcommands,
            "default": default,
            "slot": slot,
        }
        _sanitize_descr(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self._name = name
        for key, object in metadata.items():
            setattr(self, "_" + key, coalesce(object))

    @property
    def value(self):
        return self._slot.value


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing option specification.

    Every occurrence converts one value; a list option appends each of them,
    a plain option keeps the last one. Options are always optional.
    """

    __introspectable__ = (
        "short",
        "long",
        "metavar",
        "descr",
        "kind",
        "list",
        "verify",
        "choices",
        "slot",
    )

    __displayable__ = (
        "short",
        "long",
        "metavar",
        "descr",
        "kind",
        "list",
        "slot",
    )

    def __init__(
            self,
            *names,
            metavar=Unset,
            descr=Unset,
            kind=ValueKind.STRING,
            list=False,
            verify=Unset,
            choices=Unset,
            default=Unset,
            slot=Unset,
    ):
        """
        Parameters
        - names: "-x" and/or "--name".
        - metavar: Unset | str, value label in usage (defaults to the kind).
        - descr, kind, list, verify, choices, default, slot: see Positional.
        """
        cls = type(self)
        if not isinstance(metavar, str | Unset):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")

        metadata = {
            "names": names,
            "descr": descr,
            "kind": kind,
            "list": bool(list),
            "verify": verify,
            "choices": choices,
            "default": default,
            "slot": slot,
        }
        _sanitize_descr(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self._metavar = coalesce(metavar)
        for key, object in metadata.items():
            setattr(self, "_" + key, coalesce(object))

    @property
    def names(self):
        return tuple(name for name in (self._short, self._long) if name)

    @property
    def value(self):
        return self._slot.value


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only switch specification.

    Effects by kind: BOOL stores True, COUNT increments, CONFIG stores the
    active schema, CALLBACK calls callback(schema). With exit=True the parse of
    the active schema stops right after the effect, successfully.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "kind",
        "exit",
        "callback",
        "slot",
    )

    def __init__(
            self,
            *names,
            descr=Unset,
            kind=FlagKind.BOOL,
            exit=False,
            callback=Unset,
            slot=Unset,
    ):
        cls = type(self)
        metadata = {
            "names": names,
            "descr": descr,
        }
        _sanitize_descr(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        if not isinstance(kind, FlagKind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a flag kind")
        if (kind is FlagKind.CALLBACK) != (callback is not Unset):
            raise TypeError(f"{cls.__typename__} 'callback' is required for callback flags and only for them")
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")

        if slot is Unset:
            slot = Slot({FlagKind.BOOL: False, FlagKind.COUNT: 0}.get(kind))
        elif not isinstance(slot, Slot):
            raise TypeError(f"{cls.__typename__} 'slot' must be a slot")

        for key, object in metadata.items():
            setattr(self, "_" + key, coalesce(object))
        self._kind = kind
        self._exit = bool(exit)
        self._callback = coalesce(callback)
        self._slot = slot

    @property
    def names(self):
        return tuple(name for name in (self._short, self._long) if name)

    @property
    def value(self):
        return self._slot.value


def help_flag(slot=Unset, /, *, config=False):
    """
    Stock -h/--help flag that stops parsing when given.

    With config=True the slot receives the schema in which the flag appeared,
    so the caller can render the usage of that exact (sub)command.
    """
    return Flag(
        "-h", "--help",
        descr="print this help dialog",
        kind=FlagKind.CONFIG if config else FlagKind.BOOL,
        exit=True,
        slot=slot,
    )


def choice_index(choices, choice, /):
    """
    Return the position of choice (by identity) in choices, or None.
    """
    if not isinstance(choices, ChoiceSet):
        raise TypeError("choice_index() first argument must be a choice-set")
    for index, candidate in enumerate(choices):
        if candidate is choice:
            return index
    return None


def subcommand_index(subcommands, subcommand, /):
    """
    Return the position of subcommand (by identity) in subcommands, or None.
    """
    if not isinstance(subcommands, SubcommandSet):
        raise TypeError("subcommand_index() first argument must be a subcommand-set")
    for index, candidate in enumerate(subcommands):
        if candidate is subcommand:
            return index
    return None


__all__ = (
    "FlagKind",
    "Slot",
    "Choice",
    "ChoiceSet",
    "Subcommand",
    "SubcommandSet",
    "Positional",
    "Option",
    "Flag",
    "help_flag",
    "choice_index",
    "subcommand_index",
)

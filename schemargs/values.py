"""
Schemargs value kinds and verifiers.

Overview
- ValueKind: closed set of value types an argument can carry. Each kind knows
  the byte size of one list element (itemsize) so typed lists can be checked
  against the argument they are bound to.
- Filesystem: the collaborator answering existence questions for PATH, FILE
  and DIR values. The default implementation asks os.path; tests and embedders
  may pass their own through Options.filesystem.
- convert(): the single dispatch point turning a raw token into a typed value.

Contract
- convert() either returns the converted value or raises ValueError whose
  message explains the rejection. It never writes anywhere: storing the result
  (or appending it to a list) is the matcher's job, so a rejected token leaves
  the bound storage untouched.
- Every built-in kind rejects the empty string.
- CUSTOM and SUBCOMMAND are not handled here; the matcher delegates them to
  the user verifier and to the subcommand resolver.
"""
import math
import os.path
import re
from decimal import Decimal
from enum import IntEnum

from .utils import *


class ValueKind(IntEnum):
    """
    value type of a positional or option.

    STRING is the default kind of every value-bearing argument.
    """
    BOOL       = 0
    INT8       = 1
    UINT8      = 2
    INT32      = 3
    UINT32     = 4
    INT64      = 5
    UINT64     = 6
    DOUBLE     = 7
    STRING     = 8
    PATH       = 9
    FILE       = 10
    DIR        = 11
    SIZE       = 12
    TIME_S     = 13
    TIME_NS    = 14
    CHOICE     = 15
    SUBCOMMAND = 16
    CUSTOM     = 17

    @property
    def itemsize(self):
        """
        byte size of one list element of this kind; None when the kind has no
        fixed size (CUSTOM lists declare their own, SUBCOMMAND cannot be listed).
        """
        match self:
            case ValueKind.BOOL | ValueKind.INT8 | ValueKind.UINT8:
                return 1
            case ValueKind.INT32 | ValueKind.UINT32:
                return 4
            case ValueKind.CUSTOM | ValueKind.SUBCOMMAND:
                return None
            case _:
                return 8

    @property
    def label(self):
        return _labels.get(self, self.name.lower())


_labels = {
    ValueKind.TIME_S: "time (s)",
    ValueKind.TIME_NS: "time (ns)",
}

_bounds = {
    ValueKind.INT8: (-2 ** 7, 2 ** 7 - 1),
    ValueKind.UINT8: (0, 2 ** 8 - 1),
    ValueKind.INT32: (-2 ** 31, 2 ** 31 - 1),
    ValueKind.UINT32: (0, 2 ** 32 - 1),
    ValueKind.INT64: (-2 ** 63, 2 ** 63 - 1),
    ValueKind.UINT64: (0, 2 ** 64 - 1),
}

_truthy = frozenset({"true", "yes", "1", "on"})
_falsy = frozenset({"false", "no", "0", "off"})

_sizes = {
    "": 1,
    "b": 1,
    "k": 1024, "kib": 1024, "kb": 1000,
    "m": 1024 ** 2, "mib": 1024 ** 2, "mb": 1000 ** 2,
    "g": 1024 ** 3, "gib": 1024 ** 3, "gb": 1000 ** 3,
    "t": 1024 ** 4, "tib": 1024 ** 4, "tb": 1000 ** 4,
}

_seconds = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}
_nanoseconds = {
    "": 1,
    "ns": 1,
    "us": 10 ** 3,
    "ms": 10 ** 6,
    "s": 10 ** 9,
    "m": 60 * 10 ** 9,
    "h": 3600 * 10 ** 9,
    "d": 86400 * 10 ** 9,
}

# strtol-like: leading blanks allowed, nothing after the digits
_signed = re.compile(r"\s*[+-]?\d+", re.ASCII)
_unsigned = re.compile(r"\s*\+?\d+", re.ASCII)
_decimal = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE | re.ASCII,
)
_hexadecimal = re.compile(
    r"\s*[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?\d+)?",
    re.IGNORECASE | re.ASCII,
)
_magnitude = re.compile(r"(?P<magnitude>\d+(?:\.\d+)?|\.\d+)(?:\s*(?P<unit>[a-z]+))?", re.IGNORECASE | re.ASCII)
_duration = re.compile(
    r"(?P<magnitude>[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?|inf(?:inity)?|nan))(?:\s*(?P<unit>[a-z]+))?",
    re.IGNORECASE | re.ASCII,
)


class Filesystem:
    """
    Existence predicates used by PATH, FILE and DIR values (backed by os.path).
    """

    def exists(self, path, /):
        return os.path.exists(path)

    def isfile(self, path, /):
        return os.path.isfile(path)

    def isdir(self, path, /):
        return os.path.isdir(path)


filesystem = Filesystem()


def _integer(token, kind):
    if not (_signed if _bounds[kind][0] else _unsigned).fullmatch(token):
        if "-" in token and not _bounds[kind][0]:
            raise ValueError("%s does not accept a sign" % kind.label)
        raise ValueError("not a base-10 integer")
    value = int(token)
    lower, upper = _bounds[kind]
    if not lower <= value <= upper:
        raise ValueError("out of range for %s [%d, %d]" % (kind.label, lower, upper))
    return value


def _double(token):
    if _hexadecimal.fullmatch(token):
        try:
            return float.fromhex(token)
        except OverflowError:
            raise ValueError("out of range for double") from None
    if not _decimal.fullmatch(token):
        raise ValueError("not a floating-point number")
    # only the inf/infinity literals may produce an infinite value
    if math.isinf(value := float(token)) and "inf" not in token.lower():
        raise ValueError("out of range for double")
    return value


def _bool(token):
    if (folded := token.casefold()) in _truthy:
        return True
    if folded in _falsy:
        return False
    raise ValueError("expected one of %s" % ", ".join(sorted(_truthy | _falsy)))


def _size(token):
    if not (match := _magnitude.fullmatch(token)):
        raise ValueError("not an unsigned size (e.g. 10, 1.5MiB, 4KB)")
    try:
        multiplier = _sizes[(match["unit"] or "").lower()]
    except KeyError:
        raise ValueError("unknown size unit %r" % match["unit"]) from None
    value = int(Decimal(match["magnitude"]) * multiplier)
    if value > _bounds[ValueKind.UINT64][1]:
        raise ValueError("size does not fit in 64 bits")
    return value


def _time(token, kind):
    if not (match := _duration.fullmatch(token)):
        raise ValueError("not a duration (e.g. 90, 1.5h, 250ms)")
    units = _seconds if kind is ValueKind.TIME_S else _nanoseconds
    try:
        factor = units[(match["unit"] or "").lower()]
    except KeyError:
        raise ValueError("unknown duration unit %r (expected %s)" % (
            match["unit"], ", ".join(unit for unit in units if unit)
        )) from None
    if not (magnitude := Decimal(match["magnitude"])).is_finite():
        raise ValueError("duration must be finite")
    if magnitude < 0:
        raise ValueError("duration cannot be negative")
    try:
        value = int(magnitude * factor)
    except ArithmeticError:
        raise ValueError("duration out of range") from None
    if value > _bounds[ValueKind.UINT64][1]:
        raise ValueError("duration does not fit in 64 bits")
    return value


def _choice(token, choices):
    for choice in choices:
        if choice.value == token or (choices.insensitive and choice.value.casefold() == token.casefold()):
            return choice
    raise ValueError("expected one of %s" % ", ".join(repr(choice.value) for choice in choices))


def convert(schema, token, kind, /, choices=Unset):
    """
    Convert a raw token according to kind.

    Parameters
    - schema: the schema being parsed; consulted for string duplication and
      for its filesystem collaborator.
    - token: the raw command-line token.
    - kind: the ValueKind of the argument.
    - choices: the ChoiceSet of a CHOICE argument.

    Returns
    - bool | int | float | str | Choice, depending on kind.

    Raises
    - ValueError: the token does not satisfy the kind; the message explains why.
    - TypeError: kind is CUSTOM or SUBCOMMAND (handled by the matcher).
    """
    if not token:
        raise ValueError("empty value")

    match kind:
        case ValueKind.BOOL:
            return _bool(token)
        case ValueKind.INT8 | ValueKind.UINT8 | ValueKind.INT32 | ValueKind.UINT32 | ValueKind.INT64 | ValueKind.UINT64:
            return _integer(token, kind)
        case ValueKind.DOUBLE:
            return _double(token)
        case ValueKind.STRING:
            return schema.duplicate(token)
        case ValueKind.PATH | ValueKind.FILE | ValueKind.DIR:
            fs = schema.options.filesystem or filesystem
            if not fs.exists(token):
                raise ValueError("path does not exist")
            if kind is ValueKind.FILE and not fs.isfile(token):
                raise ValueError("path is not a file")
            if kind is ValueKind.DIR and not fs.isdir(token):
                raise ValueError("path is not a directory")
            return schema.duplicate(token)
        case ValueKind.SIZE:
            return _size(token)
        case ValueKind.TIME_S | ValueKind.TIME_NS:
            return _time(token, kind)
        case ValueKind.CHOICE:
            return _choice(token, choices)
        case ValueKind.CUSTOM | ValueKind.SUBCOMMAND:
            raise TypeError("convert() cannot handle %s values" % kind.label)
        case _:
            raise RuntimeError("unreachable")


__all__ = (
    "ValueKind",
    "Filesystem",
    "filesystem",
    "convert",
)

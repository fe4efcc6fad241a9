"""
Schemargs parsing: tokenizer, matcher and subcommand resolver.

Phases (per schema)
- audit
  • reset the error, then check what can only be judged on the whole schema:
    duplicated switch names, required positionals after optional ones,
    positionals declared after a subcommand selector (config errors, the
    parse stops with INVALID_CONFIG) and list layouts that need a terminator
    to be unambiguous (config warnings).
- scan, token by token
  • ignore-prefixed tokens are skipped.
  • "--" protects the next token from option parsing, or toggles option
    parsing off and on when the schema allows it.
  • "--name[=value]" and "-abc" runs are resolved against the switches.
  • everything else feeds the current positional; lists keep feeding until
    the terminator or until the tokens left are exactly what the required
    positionals after the list need.
  • a subcommand selector hands every remaining token to the nested schema
    and the nested outcome becomes the outcome of this call.
- completion
  • every required positional must have received a value.

Failures
- The first failure is recorded on the active schema, logged through its
  sink, and ends the scan of that schema. parse() returns that schema; it
  returns None when every level succeeded or an exit flag was given.
"""
import difflib
import os.path
import shlex
import sys
from collections.abc import Iterable

from .arguments import Option, Flag, FlagKind, Slot
from .faults import ErrorKind, LogLevel, log
from .utils import *
from .values import ValueKind, convert


class _Failure(Exception):
    def __init__(self, kind, /):
        super().__init__(kind)
        self.kind = kind


def _hint(input, candidates):
    try:
        return " (did you mean %r?)" % difflib.get_close_matches(input, candidates, 1)[0]
    except IndexError:
        return ""


def _audit(schema):
    """
    Check cross-argument consistency; log findings and return False on errors.
    """
    valid = True

    seen = {}
    for switch in schema.switches:
        for name in switch.names:
            if name in seen:
                log(schema, LogLevel.CONFIG_ERROR, "name %r is used by more than one option or flag", name)
                valid = False
            seen[name] = switch

    positionals = schema.positionals
    terminator = schema.options.list_terminator
    for index, positional in enumerate(positionals):
        later = positionals[index + 1:]
        if positional.optional and any(not other.optional for other in later):
            log(
                schema, LogLevel.CONFIG_ERROR,
                "required positional %r cannot follow optional positional %r",
                next(other for other in later if not other.optional).name, positional.name,
            )
            valid = False
        if positional.kind is ValueKind.SUBCOMMAND and later:
            log(
                schema, LogLevel.CONFIG_ERROR,
                "positional %r is unreachable after subcommand positional %r", later[0].name, positional.name,
            )
            valid = False
        if positional.list and terminator is None:
            for other in later:
                if other.list or other.optional or other.kind is ValueKind.SUBCOMMAND:
                    log(
                        schema, LogLevel.CONFIG_WARNING,
                        "list positional %r is followed by %r; without a list terminator the tokens left for %r are ambiguous",
                        positional.name, other.name, other.name,
                    )
                    break

    if (prefix := schema.options.ignore_prefix) is not None and prefix.startswith("-"):
        log(schema, LogLevel.CONFIG_WARNING, "ignore prefix %r hides options and flags starting with it", prefix)

    return valid


class _Matcher:
    """
    One left-to-right pass over tokens against one schema.
    """

    def __init__(self, schema, tokens):
        self.schema = schema
        self.tokens = tokens
        self.index = 0
        self.positionals = schema.positionals
        self.counts = [0] * len(self.positionals)
        self.cursor = 0
        self.enabled = True
        self.protect = False
        self.given = set()
        self.outcome = None
        self.shorts = {}
        self.longs = {}
        for switch in schema.switches:
            if switch.short:
                self.shorts.setdefault(switch.short[1:], switch)
            if switch.long:
                self.longs.setdefault(switch.long, switch)

    def run(self):
        self.schema._reset()
        if not _audit(self.schema):
            return self.schema._fail(ErrorKind.INVALID_CONFIG)
        try:
            while self.index < len(self.tokens):
                token = self.tokens[self.index]
                self.index += 1
                if self._step(token):
                    return self.outcome
            self._complete()
        except _Failure as failure:
            return self.schema._fail(failure.kind)
        return None

    def _step(self, token):
        """
        Handle one token; True means this schema is done (exit flag or subcommand).
        """
        options = self.schema.options

        if options.ignore_prefix is not None and token.startswith(options.ignore_prefix):
            log(self.schema, LogLevel.INFO, "ignoring %r", token)
            return False

        if self.protect:
            self.protect = False
            return self._positional(token)

        if not self.enabled:
            if token == "--":
                self.enabled = True
                return False
            return self._positional(token)

        if token == "--":
            if options.toggle:
                self.enabled = False
            else:
                self.protect = True
            return False

        if token.startswith("--"):
            return self._long(token)
        if token.startswith("-") and len(token) > 1:
            return self._short(token)
        return self._positional(token)

    def _next(self, name):
        if self.index >= len(self.tokens):
            log(self.schema, LogLevel.ERROR, "option %r requires a value", name)
            raise _Failure(ErrorKind.INVALID_OPTION)
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _long(self, token):
        name, separator, value = token.partition("=")
        if (switch := self.longs.get(name)) is None:
            log(self.schema, LogLevel.ERROR, "unknown option or flag %r%s", name, _hint(name, self.longs.keys()))
            raise _Failure(ErrorKind.INVALID_OPTION)
        if isinstance(switch, Flag):
            if separator:
                log(self.schema, LogLevel.ERROR, "flag %r cannot take a value", name)
                raise _Failure(ErrorKind.INVALID_OPTION)
            return self._flag(switch)
        if not separator:
            value = self._next(name)
        self._option(switch, name, value)
        return False

    def _short(self, token):
        for offset, char in enumerate(token[1:], 2):
            if (switch := self.shorts.get(char)) is None:
                log(
                    self.schema, LogLevel.ERROR,
                    "unknown option or flag %r%s",
                    "-" + char, "" if len(token) == 2 else " in %r" % token,
                )
                raise _Failure(ErrorKind.INVALID_OPTION)
            if isinstance(switch, Option):
                # an option takes the rest of the run, or the next token
                self._option(switch, "-" + char, token[offset:] or self._next("-" + char))
                return False
            if self._flag(switch):
                return True
        return False

    def _flag(self, flag):
        slot = flag.slot
        match flag.kind:
            case FlagKind.BOOL:
                slot.value = True
            case FlagKind.COUNT:
                slot.value = (slot.value or 0) + 1
            case FlagKind.CONFIG:
                slot.value = self.schema
            case FlagKind.CALLBACK:
                flag.callback(self.schema)
            case _:
                raise RuntimeError("unreachable")
        return flag.exit

    def _option(self, option, name, token):
        if option in self.given and not option.list:
            log(self.schema, LogLevel.WARNING, "option %r given more than once; keeping the last value", name)
        self.given.add(option)
        self._bind(option, name, token)

    def _lookahead(self):
        """
        Count the positional tokens left after the current one.

        Returns (count, terminated): terminated tells whether a list terminator
        comes first, in which case the current list ends there.
        """
        options = self.schema.options
        enabled, protect = self.enabled, self.protect
        count = 0
        index = self.index
        while index < len(self.tokens):
            token = self.tokens[index]
            index += 1
            if options.ignore_prefix is not None and token.startswith(options.ignore_prefix):
                continue
            if protect or not enabled:
                if not protect and token == "--":
                    enabled = True
                    continue
                protect = False
            elif token == "--":
                enabled, protect = (False, False) if options.toggle else (True, True)
                continue
            elif token.startswith("--"):
                name, separator, _ = token.partition("=")
                if isinstance(self.longs.get(name), Option) and not separator:
                    index += 1
                continue
            elif token.startswith("-") and len(token) > 1:
                for offset, char in enumerate(token[1:], 2):
                    if isinstance(switch := self.shorts.get(char), Option):
                        if not token[offset:]:
                            index += 1
                        break
                    if switch is None:
                        break
                continue
            if options.list_terminator is not None and token == options.list_terminator:
                return count, True
            count += 1
        return count, False

    def _positional(self, token):
        terminator = self.schema.options.list_terminator
        while True:
            if self.cursor >= len(self.positionals):
                log(self.schema, LogLevel.ERROR, "unexpected positional argument %r", token)
                raise _Failure(ErrorKind.TOO_MANY_ARGUMENTS)
            positional = self.positionals[self.cursor]
            if not positional.list:
                break
            if terminator is not None and token == terminator:
                log(self.schema, LogLevel.INFO, "list %r terminated by %r", positional.name, token)
                self.cursor += 1
                return False
            count, terminated = self._lookahead()
            required = sum(not other.optional for other in self.positionals[self.cursor + 1:])
            if terminated or count + 1 > required or not (self.counts[self.cursor] or positional.optional):
                break
            # the tokens left are reserved for the positionals after the list
            self.cursor += 1

        if positional.kind is ValueKind.SUBCOMMAND:
            return self._subcommand(positional, token)

        self._bind(positional, positional.name, token)
        self.counts[self.cursor] += 1
        if not positional.list:
            self.cursor += 1
        return False

    def _subcommand(self, positional, token):
        if (subcommand := positional.subcommands.find(token)) is None:
            names = [subcommand.name for subcommand in positional.subcommands]
            log(
                self.schema, LogLevel.ERROR,
                "unknown subcommand %r%s; expected one of %s",
                token, _hint(token, names), ", ".join(map(repr, names)),
            )
            raise _Failure(ErrorKind.INVALID_VALUE)
        positional.slot.value = subcommand
        self.counts[self.cursor] += 1
        self.cursor += 1

        nested = subcommand.schema
        nested._attach(subcommand.name, self.schema)
        self.outcome = _Matcher(nested, self.tokens[self.index:]).run()
        self.index = len(self.tokens)
        return True

    def _bind(self, argument, name, token):
        """
        Convert token for argument and store it (or append it for lists).
        """
        slot = argument.slot
        if argument.list:
            target = slot.value
            if (expected := argument.kind.itemsize) is not None and target.itemsize != expected:
                log(
                    self.schema, LogLevel.ERROR,
                    "list of %s holds %d-byte items but %s values take %d bytes",
                    name, target.itemsize, argument.kind.label, expected,
                )
                raise _Failure(ErrorKind.INVALID_VALUE)
            slot = Slot()

        if argument.kind is ValueKind.CUSTOM:
            if not argument.verify(self.schema, name, token, slot):
                raise _Failure(ErrorKind.INVALID_VALUE)
        else:
            try:
                slot.value = convert(self.schema, token, argument.kind, choices=argument.choices)
            except ValueError as exception:
                log(self.schema, LogLevel.ERROR, "invalid value %r for %s: %s", token, name, exception)
                raise _Failure(ErrorKind.INVALID_VALUE) from None

        if argument.list:
            target.append(slot.value)

    def _complete(self):
        for positional, count in zip(self.positionals, self.counts):
            if not positional.optional and not count:
                log(self.schema, LogLevel.ERROR, "missing required positional %r", positional.name)
                raise _Failure(ErrorKind.TOO_FEW_ARGUMENTS)


def _tokenize(args):
    if args is Unset:
        return sys.argv[1:]
    if isinstance(args, str):
        return shlex.split(args)
    if isinstance(args, Iterable):
        tokens = list(args)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() first argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() first argument must be a string or an iterable of strings")


def parse(args, schema, /, prog=Unset):
    """
    Parse args against schema, filling the bound slots in place.

    Parameters
    - args:
      • Unset: sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: used as-is (tokens are not trimmed; "" and " -1" are
        values like any other).
    - schema: the root schema.
    - prog: name of the root schema; defaults to the schema's current name,
      then to the basename of sys.argv[0].

    Returns
    - None when every (sub)schema succeeded, or when an exit flag was given.
    - The schema that failed otherwise; its error holds the ErrorKind. For a
      failure inside a subcommand this is the nested schema, not the root.

    Raises
    - TypeError: for a non-schema or malformed args. User input never raises.
    """
    if not callable(getattr(schema, "__schema__", None)):
        raise TypeError("parse() second argument must be a schema")
    if not isinstance(prog, str | Unset):
        raise TypeError("parse() 'prog' must be a string")
    schema = schema.__schema__()
    tokens = _tokenize(args)
    if prog is Unset and schema.name is None and sys.argv:
        prog = os.path.basename(sys.argv[0]) or Unset
    schema._attach(coalesce(prog, schema.name), None)
    return _Matcher(schema, tokens).run()


__all__ = (
    "parse",
)

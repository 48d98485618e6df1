"""
claparse parser layer: declare options, scan tokens, query results.

What this module provides
- Parser: owns the option registry and the runtime settings (locale, shell
  mode, styling), exposes the add_*_option declaration family and parse().
- ParseResult: immutable outcome of one parse; typed values per option and
  the non-option arguments in input order.

Scanning (one left-to-right pass, first match wins per token)
1. after "--", or a lone "-": non-option argument.
2. "--": end of options; nothing is emitted.
3. long rule      "--name", "--name=value", "--name:value"
4. flags rule     "-abc" where every letter is a boolean option
5. grouped rule   "-abcs10", "-abs=10", "-s" where s takes a value
6. short rule     "-x", "/x", "-x10" for any short name (unknown ones fail)
7. anything else: non-option argument.
A value-taking option without an attached value consumes the next token,
whatever it looks like. The rules are compiled from the registry at the start
of each parse (see claparse.patterns).

Diagnostics
- Every fault names the ordinal position of the offending token ("at third
  position") and carries the option, name, token and value involved.
- Outside shell mode faults are raised; in shell mode the short usage and the
  fault are printed to stderr and the process exits with status 1.

Quick start
    from claparse import Parser

    parser = Parser()
    width = parser.add_integer_option("w", "width", "width of image", mandatory=True)
    verbose = parser.add_boolean_option("v", "verbose", many=True)
    result = parser.parse("-w 5 -vv extra")
    result.value_of(width)          # 5
    result.values_of("v")           # (True, True)
    result.nonoptions               # ('extra',)
"""
import builtins
import logging
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from . import locales, usage
from .faults import *
from .options import *
from .patterns import compile_patterns
from .registry import OptionRegistry
from .utils import Unset, coalesce, mirror, ordinal

logger = logging.getLogger(__name__)


class ParseResult:
    """
    immutable outcome of a successful parse.

    every option registered at parse time has an entry (possibly empty).
    options are looked up by instance or by name (short name first).
    """

    tokens = mirror("tokens")
    locale = mirror("locale")
    nonoptions = mirror("nonoptions")

    def __init__(self, options, values, nonoptions, *, tokens=(), locale=locales.DEFAULT_LOCALE):
        self._options = tuple(options)
        self._values = {option: tuple(values.get(option, ())) for option in self._options}
        self._nonoptions = tuple(nonoptions)
        self._tokens = tuple(tokens)
        self._locale = locale

    @property
    def options(self):
        return self._options

    @property
    def solitary_hyphen(self):
        """
        whether a lone "-" (conventionally stdin) was among the non-options.
        """
        return "-" in self._nonoptions

    def _resolve(self, option):
        if isinstance(option, Option):
            if option in self._values:
                return option
            name = str(option)
        elif isinstance(option, str):
            name = option
            found = [x for x in self._options if len(name) == 1 and x.short == name]
            found = found or [x for x in self._options if x.long == name]
            if found:
                return found[0]
        else:
            raise TypeError("option must be an option or a name")
        trigger(UnknownOptionError(
            "unknown option %r" % name,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint="only options registered before parsing have values",
            name=name,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))

    def values_of(self, option, /):
        """
        every value given for an option, in input order (an empty tuple when absent).
        """
        return self._values[self._resolve(option)]

    def value_of(self, option, /, default=None):
        """
        the single value of an option, or default when it was not given.

        raises InvalidRetrievalTypeError for options allowing many values
        (use values_of) and, for enumerated kinds, IllegalValueError when the
        default is not one of the allowed values.
        """
        option = self._resolve(option)
        if option.many:
            trigger(InvalidRetrievalTypeError(
                "option %s allows many values and cannot be read as a single value" % option,
                title="invalid retrieval type",
                code=FaultCode.INVALID_RETRIEVAL_TYPE,
                hint="use values_of() to read every value",
                option=option,
                docs=getdoc(FaultCode.INVALID_RETRIEVAL_TYPE),
            ))
        default = option.check_default(default)
        values = self._values[option]
        return values[0] if values else default

    def __getitem__(self, option):
        return self.values_of(option)

    def __len__(self):
        return len(self._options)

    def __iter__(self):
        return iter(self._values.items())

    def __repr__(self):
        return "parse-result(%s)" % ", ".join(
            ["%s=%r" % (option.long or option.short, values) for option, values in self._values.items()] +
            ["nonoptions=%r" % (self._nonoptions,)]
        )

    def __rich_repr__(self):
        for option, values in self._values.items():
            yield option.long or option.short, values
        yield "nonoptions", self._nonoptions


class _Scanner:
    """
    Internal: per-parse state (position, remaining tokens, accumulated values).

    a scanner is created for one parse() call and thrown away afterwards, so
    a failed parse leaves nothing behind and parsers can be reused freely.
    """

    def __init__(self, parser, tokens):
        self.parser = parser
        self.options = tuple(parser.options)
        self.rules = compile_patterns(self.options)
        self.tokens = deque(tokens)
        self.index = 0
        self.ended = False
        self.values = {option: [] for option in self.options}
        self.nonoptions = []

    def run(self):
        while self.tokens:
            self.index += 1
            self._scan(self.tokens.popleft())
        self._check()
        return self.values, self.nonoptions

    def fail(self, exception, message, /, **details):
        self.parser.trigger(exception(
            message,
            index=self.index,
            docs=getdoc(details["code"]),
            **details,
        ))

    def _lookup(self, name, token, *, long=False):
        registry = self.parser._registry
        option = registry.lookup_long(name) if long else registry.lookup_short(name)
        if option is None:
            self.fail(
                UnknownOptionError,
                "unknown option %r at %s position" % (("--" if long else "-") + name, ordinal(self.index)),
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                hint="check the spelling, or pass it after '--' to use it as a plain argument",
                name=name,
                token=token,
            )
        return option

    def _scan(self, token):
        if self.ended or token == "-":
            logger.debug("%s token %r is a non-option", ordinal(self.index), token)
            return self.nonoptions.append(token)

        if token == "--":
            logger.debug("%s token ends the options", ordinal(self.index))
            self.ended = True
            return

        if match := self.rules.long.fullmatch(token):
            logger.debug("%s token %r matches the long rule", ordinal(self.index), token)
            return self._assign(self._lookup(match["name"], token, long=True), match["value"], token)

        if match := self.rules.flags.fullmatch(token):
            logger.debug("%s token %r matches the flags rule", ordinal(self.index), token)
            for name in match["flags"]:
                self._flag(name, token)
            return

        if match := self.rules.grouped.fullmatch(token):
            logger.debug("%s token %r matches the grouped rule", ordinal(self.index), token)
            for name in match["flags"]:
                self._flag(name, token)
            return self._assign(self._lookup(match["name"], token), match["value"], token)

        if match := self.rules.short.fullmatch(token):
            logger.debug("%s token %r matches the short rule", ordinal(self.index), token)
            return self._assign(self._lookup(match["name"], token), match["value"], token)

        logger.debug("%s token %r is a non-option", ordinal(self.index), token)
        self.nonoptions.append(token)

    def _flag(self, name, token):
        option = self._lookup(name, token)
        if option.requires_value:
            self.fail(
                NotAFlagError,
                "option %s inside %r at %s position takes a value and cannot be grouped as a flag"
                % (option, token, ordinal(self.index)),
                title="not a flag",
                code=FaultCode.NOT_A_FLAG,
                hint="pass it on its own (for example: -%s <%s>)" % (option.short, option.usage_type),
                option=option,
                name=name,
                token=token,
            )
        self._append(option, True, token)

    def _assign(self, option, inline, token):
        if inline is not None:
            if not option.requires_value and not (option.many and len(self.values[option]) < option.max_count):
                self.fail(
                    IllegalValueError,
                    "flag %s at %s position cannot take the value %r" % (option, ordinal(self.index), inline),
                    title="unexpected value",
                    code=FaultCode.ILLEGAL_VALUE,
                    hint="remove the attached value (for example: -%s)" % option.short,
                    option=option,
                    token=token,
                    value=inline,
                )
            return self._append(option, self._convert(option, inline, token), token)

        if not option.requires_value:
            return self._append(option, True, token)

        if not self.tokens:
            self.fail(
                IllegalValueError,
                "missing value for option %s at %s position" % (option, ordinal(self.index)),
                title="missing value",
                code=FaultCode.ILLEGAL_VALUE,
                hint="add a value after it (for example: -%s <%s>)" % (option.short, option.usage_type),
                option=option,
                token=token,
            )
        self.index += 1
        text = self.tokens.popleft()
        logger.debug("%s token %r is the value of %s", ordinal(self.index), text, option)
        self._append(option, self._convert(option, text, token), token)

    def _convert(self, option, text, token):
        try:
            return option.parse_value(text, self.parser.locale)
        except (ValueError, TypeError) as exception:
            self.fail(
                IllegalValueError,
                "illegal value %r for option %s at %s position" % (text, option, ordinal(self.index)),
                title="illegal value",
                code=FaultCode.ILLEGAL_VALUE,
                hint=str(exception) or "expected a value of type <%s>" % option.usage_type,
                option=option,
                token=token,
                value=text,
                cause=exception,
            )

    def _append(self, option, value, token):
        values = self.values[option]
        if option.max_count == 0:
            self.fail(
                IllegalValueError,
                "option %s at %s position cannot be given" % (option, ordinal(self.index)),
                title="option not allowed",
                code=FaultCode.ILLEGAL_VALUE,
                hint="remove it from the command line",
                option=option,
                token=token,
                value=value,
            )
        if option.max_count == 1 and values:
            self.fail(
                DuplicateSingleValueError,
                "option %s at %s position was already given" % (option, ordinal(self.index)),
                title="duplicate value",
                code=FaultCode.DUPLICATE_SINGLE_VALUE,
                hint="give it only once",
                option=option,
                token=token,
                value=value,
            )
        if len(values) >= option.max_count:
            self.fail(
                ValueLimitExceededError,
                "option %s at %s position exceeds its limit of %d values"
                % (option, ordinal(self.index), option.max_count),
                title="too many values",
                code=FaultCode.VALUE_LIMIT_EXCEEDED,
                hint="give it at most %d times" % option.max_count,
                option=option,
                token=token,
                value=value,
            )
        values.append(value)

    def _check(self):
        for option in self.options:
            count = len(self.values[option])
            if option.mandatory and not count:
                self.parser.trigger(IllegalValueError(
                    "missing mandatory option %s" % option,
                    title="missing option",
                    code=FaultCode.ILLEGAL_VALUE,
                    hint="add it (for example: -%s%s)" % (
                        option.short, " <%s>" % option.usage_type if option.requires_value else ""),
                    option=option,
                    docs=getdoc(FaultCode.ILLEGAL_VALUE),
                ))
            if not option.min_count <= count <= option.max_count:
                self.parser.trigger(InvalidCountError(
                    "option %s was given %d %s but expects between %d and %d"
                    % (option, count, "time" if count == 1 else "times", option.min_count, option.max_count),
                    title="invalid count",
                    code=FaultCode.INVALID_COUNT,
                    hint="give it at least %d times" % option.min_count,
                    option=option,
                    docs=getdoc(FaultCode.INVALID_COUNT),
                ))


class Parser:
    """
    Command-line option parser.

    Settings
    - locale: tag used to read locale-sensitive values (decimals, booleans,
      case-insensitive enumerations); default "en_US".
    - program: name shown in usage output and fault headers; defaults to the
      basename of sys.argv[0].
    - shell: render faults (with the short usage) on stderr and exit with
      status 1 instead of raising them.
    - fancy, colorful: fault and usage styling.
    - long_names_in_short_usage: show "-w,--width" in the short usage line.

    Lifecycle
    - declare options with add_option() or the add_*_option helpers;
    - call parse() as often as needed, each call returns a fresh ParseResult;
    - values_of/value_of/nonoptions/solitary_hyphen read the last result.

    Registering or removing options while another thread parses with the
    same parser is not supported.
    """

    locale = mirror("locale")
    program = mirror("program")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    long_names_in_short_usage = mirror("long_names_in_short_usage")

    def __init__(
            self,
            locale=Unset,
            *,
            program=Unset,
            shell=False,
            fancy=False,
            colorful=True,
            long_names_in_short_usage=False,
    ):
        if not isinstance(program, str | Unset):
            raise TypeError("parser 'program' must be a string")
        elif isinstance(program, str) and not (program := program.strip()):
            raise ValueError("parser 'program' cannot be empty")

        self._locale = locales.resolve(coalesce(locale))
        self._program = coalesce(program, os.path.basename(sys.argv[0]) or "claparse")
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._long_names_in_short_usage = bool(long_names_in_short_usage)
        self._registry = OptionRegistry()
        self._result = None

    @property
    def options(self):
        return tuple(self._registry)

    def trigger(self, fault, /, **options):
        """
        surface a fault with this parser's runtime settings.

        in shell mode the short usage is printed to stderr first.
        """
        if self._shell:
            usage.print_usage(self, stderr=True)
        trigger(fault, **options, program=self._program, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    # declaration

    def add_option(self, option, /):
        """
        register an option instance; raises DuplicateNameError on a name clash.
        """
        return self._registry.register(option)

    def add_boolean_option(self, short, long=Unset, /, descr=Unset, **options):
        return self.add_option(BooleanOption(short, long, descr, **options))

    def add_integer_option(self, short, long=Unset, /, descr=Unset, **options):
        return self.add_option(IntegerOption(short, long, descr, **options))

    def add_long_option(self, short, long=Unset, /, descr=Unset, **options):
        return self.add_option(LongOption(short, long, descr, **options))

    def add_double_option(self, short, long=Unset, /, descr=Unset, **options):
        return self.add_option(DoubleOption(short, long, descr, **options))

    def add_float_option(self, short, long=Unset, /, descr=Unset, **options):
        return self.add_option(FloatOption(short, long, descr, **options))

    def add_string_option(self, short, long=Unset, /, descr=Unset, *, filter=Unset, **options):
        return self.add_option(StringOption(short, long, descr, filter=filter, **options))

    def add_file_option(self, short, long=Unset, /, descr=Unset, **options):
        """
        path option accepting any path, existing or not.
        """
        return self.add_option(PathOption(short, long, descr, **options))

    def add_file_new_option(self, short, long=Unset, /, descr=Unset, **options):
        """
        path option accepting only paths that do not exist yet.
        """
        return self.add_option(PathOption(short, long, descr, must_exist=False, **options))

    def add_file_existing_option(self, short, long=Unset, /, descr=Unset, **options):
        """
        path option accepting only existing regular files.
        """
        return self.add_option(PathOption(short, long, descr, must_exist=True, accept="file", **options))

    def add_directory_existing_option(self, short, long=Unset, /, descr=Unset, **options):
        """
        path option accepting only existing directories.
        """
        return self.add_option(PathOption(short, long, descr, must_exist=True, accept="dir", **options))

    def add_date_option(self, short, long=Unset, /, descr=Unset, *, date_format=Unset, **options):
        return self.add_option(DateOption(short, long, descr, date_format=date_format, **options))

    def add_enum_string_option(self, short, long=Unset, /, descr=Unset, *, values, ignore_case=True, **options):
        return self.add_option(EnumStringOption(short, long, descr, values=values, ignore_case=ignore_case, **options))

    def add_enum_integer_option(self, short, long=Unset, /, descr=Unset, *, values, **options):
        return self.add_option(EnumIntegerOption(short, long, descr, values=values, **options))

    # management

    def remove_option(self, option, /):
        """
        unregister an option by instance or name; raises UnknownOptionError if absent.
        """
        return self._registry.unregister(option)

    def set_hidden(self, name, /):
        """
        hide an option from usage output (it still parses).
        """
        return self._registry.set_hidden(name)

    def get_option(self, name, /, type=Unset):
        """
        find an option by short or long name.

        when type is given (a Kind, an option class, or a value type such as
        int), a mismatch raises InvalidOptionTypeError. an unknown name raises
        UnknownOptionError.
        """
        option = self._registry.require(name)
        if type is not Unset and not (
            option.kind is type if isinstance(type, Kind) else
            isinstance(option, type) if isinstance(type, builtins.type) and issubclass(type, Option) else
            option.type is type
        ):
            trigger(InvalidOptionTypeError(
                "option %s is of kind %r, not %r" % (option, option.kind.value, getattr(type, "__name__", type)),
                title="invalid option type",
                code=FaultCode.INVALID_OPTION_TYPE,
                hint="request it as %r" % option.type.__name__,
                option=option,
                name=name,
                docs=getdoc(FaultCode.INVALID_OPTION_TYPE),
            ))
        return option

    # parsing

    def parse(self, prompt=Unset, /):
        """
        Scan a token stream and return a fresh ParseResult.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used verbatim.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        - OptionError subclasses for every user error (outside shell mode).
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        self._result = None
        logger.debug("parsing %r with locale %r", tokens, self._locale)
        values, nonoptions = _Scanner(self, tokens).run()
        self._result = ParseResult(self._registry, values, nonoptions, tokens=tokens, locale=self._locale)
        return self._result

    # last result

    def _last(self):
        if self._result is None:
            raise RuntimeError("no arguments have been parsed successfully yet")
        return self._result

    def values_of(self, option, /):
        return self._last().values_of(option)

    def value_of(self, option, /, default=None):
        return self._last().value_of(option, default)

    @property
    def nonoptions(self):
        return self._last().nonoptions

    @property
    def solitary_hyphen(self):
        return self._last().solitary_hyphen

    # usage

    def render_usage(self, long=False, /, **options):
        return usage.render_usage(self, long, **options)

    def print_usage(self, long=False, /, **options):
        return usage.print_usage(self, long, **options)


__all__ = (
    "Parser",
    "ParseResult",
)

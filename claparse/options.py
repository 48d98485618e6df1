"""
claparse options (declarative option descriptors)

Scope
- Describe the options a parser accepts: names, description, occurrence
  bounds, visibility, and how a raw token becomes a typed value.

Overview
- Option[_T]
  • Abstract descriptor carrying a short name (one character of [A-Za-z0-9@?]),
    an optional long name, an optional description and [min, max] occurrence
    bounds. Instantiating Option itself raises TypeError.
- The closed set of kinds, each sealed against subclassing:
  • BooleanOption       flag, never consumes the next token
  • IntegerOption       signed 32-bit integer
  • LongOption          signed 64-bit integer
  • DoubleOption        decimal number (locale aware)
  • FloatOption         decimal number rounded to single precision
  • StringOption        free text with an optional filter predicate
  • PathOption          filesystem path with existence/type constraints
  • DateOption          calendar date in a strftime format
  • EnumStringOption    one of a fixed set of strings (substring matching)
  • EnumIntegerOption   one of a fixed set of integers
- Kind
  • Tag enum naming the kind of every concrete option class.

Conventions
- Every declared field is exposed as a read-only property (see utils.mirror).
- Invalid declarations raise TypeError/ValueError at construction, prefixed
  with the kind's typename ("integer-option 'short' must be ...").
- parse_value(text, locale) raises ValueError for rejected text; the parser
  turns that into an IllegalValueError naming the token position.
- Values are never stored on the descriptor: a parse produces a ParseResult.

Examples
    >>> width = IntegerOption("w", "width", "output width", mandatory=True)
    >>> width.requires_value, width.mandatory, width.many
    (True, True, False)
    >>> width.parse_value("80")
    80
"""
import functools
import math
import operator
import re
import struct
from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from rich.text import Text

from . import locales
from .faults import FaultCode, IllegalValueError, trigger
from .patterns import SHORT_NAME, LONG_NAME
from .utils import Unset, coalesce, mirror, rename

MAX_COUNT_LIMIT = 100
MIN_COUNT_LIMIT = 0


class Kind(Enum):
    """
    tag of every concrete option kind.

    the value doubles as the placeholder shown in usage output; BOOLEAN has
    none since flags never take a separate value.
    """
    BOOLEAN         = "boolean"
    INTEGER         = "integer"
    LONG            = "long"
    DOUBLE          = "double"
    FLOAT           = "float"
    STRING          = "string"
    PATH            = "path"
    DATE            = "date"
    ENUM_STRING     = "enum-string"
    ENUM_INTEGER    = "enum-integer"


class OptionType(type):
    """
    Metaclass that turns option classes into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Seal concrete kinds (class keyword sealed=True) against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in declaration error messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - integer-option(short='w', long='width', kind=<Kind.INTEGER: 'integer'>, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _check_counts(cls, min_count, max_count, /):
    for name, count in (("min_count", min_count), ("max_count", max_count)):
        if not isinstance(count, int) or isinstance(count, bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be an integer")
    if min_count < MIN_COUNT_LIMIT:
        raise ValueError(f"{cls.__typename__} 'min_count' cannot be lower than {MIN_COUNT_LIMIT}")
    if max_count > MAX_COUNT_LIMIT:
        raise ValueError(f"{cls.__typename__} 'max_count' cannot be greater than {MAX_COUNT_LIMIT}")
    if min_count > max_count:
        raise ValueError(f"{cls.__typename__} 'min_count' cannot be greater than 'max_count'")
    return min_count, max_count


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every kind.

    Responsibilities
    - short: required, exactly one character of [A-Za-z0-9@?].
    - long: optional (Unset becomes None), two or more characters of
      [A-Za-z0-9-] that neither start nor end with a hyphen.
    - descr: optional (Unset becomes None); non-empty after trimming.
    - counts: when Unset, derived from mandatory/many (min 1 or 0, max
      MAX_COUNT_LIMIT or 1); otherwise a (min, max) pair that wins over both
      flags. Stored as min_count/max_count.
    - hidden: coerced to bool.

    Raises
    - TypeError: wrong type for any field.
    - ValueError: malformed name, empty description, or counts out of bounds.

    Notes
    - Mutates the provided metadata dict in place.
    """
    if not isinstance(short := metadata["short"], str):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif not re.fullmatch(SHORT_NAME, short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character of [A-Za-z0-9@?]")

    if not isinstance(long := metadata["long"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif isinstance(long, str) and not re.fullmatch(LONG_NAME, long):
        raise ValueError(f"{cls.__typename__} 'long' must be two or more characters of [A-Za-z0-9-] "
                         "neither starting nor ending with a hyphen")
    metadata["long"] = coalesce(long)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    mandatory = metadata.pop("mandatory")
    many = metadata.pop("many")
    if (counts := metadata.pop("counts")) is Unset:
        counts = (1 if mandatory else 0, MAX_COUNT_LIMIT if many else 1)
    elif not isinstance(counts, Iterable) or isinstance(counts, str):
        raise TypeError(f"{cls.__typename__} 'counts' must be a (min, max) pair")
    elif len(counts := tuple(counts)) != 2:
        raise ValueError(f"{cls.__typename__} 'counts' must be a (min, max) pair")
    metadata["min_count"], metadata["max_count"] = _check_counts(cls, *counts)

    metadata["hidden"] = bool(metadata["hidden"])


class Option[_T](metaclass=OptionType):
    """
    Named option descriptor (abstract).

    Option[_T] declares one command-line option: its short and long names,
    how often it may occur and how a raw token becomes a _T. Concrete kinds
    subclass it and provide parse_value(); instantiating Option directly
    raises TypeError.

    Highlights
    - Short form: "-x", "/x", clustered flags "-abc", attached values "-x10",
      "-x=10", "-x:10". Long form: "--name", "--name=value", "--name:value".
    - Occurrences: min_count..max_count, declared through mandatory/many or
      an explicit counts=(min, max) pair (bounded by MIN_COUNT_LIMIT and
      MAX_COUNT_LIMIT).
    - Help metadata: descr and hidden (hidden options are omitted from usage
      output only; they still parse).

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "kind",
        "type",
        "requires_value",
        "min_count",
        "max_count",
        "hidden",
    )

    __displayable__ = (
        "short",
        "long",
        "kind",
        "min_count",
        "max_count",
        "hidden",
    )

    __kind__ = Unset
    __type__ = object
    __valued__ = True

    def __init__(
            self,
            short,
            long=Unset,
            /,
            descr=Unset,
            *,
            mandatory=False,
            many=False,
            counts=Unset,
            hidden=False,
    ):
        """
        Create a new option descriptor.

        Parameters
        - short: single-character short name, used as "-x".
        - long: optional long name, used as "--name".
        - descr: optional description shown in usage output.
        - mandatory: when True, at least one occurrence is required.
        - many: when True, up to MAX_COUNT_LIMIT occurrences are allowed.
        - counts: explicit (min, max) occurrence bounds; overrides mandatory/many.
        - hidden: omit from usage output.

        Raises
        - TypeError: on an abstract kind, or a field of the wrong type.
        - ValueError: on a malformed name or out-of-bounds counts.
        """
        if type(self).__kind__ is Unset:
            raise TypeError(f"cannot instantiate abstract type {type(self).__name__!r}")

        metadata = dict(
            short=short,
            long=long,
            descr=descr,
            mandatory=mandatory,
            many=many,
            counts=counts,
            hidden=hidden,
        )
        _sanitize_metadata(type(self), metadata)

        metadata["kind"] = type(self).__kind__
        metadata["type"] = type(self).__type__
        metadata["requires_value"] = type(self).__valued__

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def mandatory(self):
        return self._min_count > 0

    @property
    def many(self):
        return self._max_count > 1

    @property
    def usage_type(self):
        """
        placeholder label for the value in usage output (None for flags).
        """
        return self._kind.value if self._requires_value else None

    def set_counts(self, min_count, max_count, /):
        """
        replace the occurrence bounds after construction (same rules apply).
        """
        self._min_count, self._max_count = _check_counts(type(self), min_count, max_count)
        return self

    def hide(self):
        self._hidden = True
        return self

    def names(self):
        """
        the display names: "-x" and, when declared, "--name".
        """
        return ("-" + self._short,) + (("--" + self._long,) if self._long else ())

    def __str__(self):
        return ", ".join(self.names())

    def parse_value(self, text, locale=None, /):
        """
        convert the raw text of one occurrence into a typed value.

        raises ValueError when the text is not acceptable for this option.
        """
        raise NotImplementedError(f"{type(self).__name__}.parse_value() is not implemented")

    def check_default(self, default, /):
        """
        validate the default handed to ParseResult.value_of(); only
        enumerated kinds restrict it. returns the default.
        """
        return default


class BooleanOption(Option[bool], sealed=True):
    """
    presence flag; each occurrence appends True.

    an attached value ("-v=no", "--verbose:off") is only accepted when the
    flag allows many occurrences, and is read with locales.parse_boolean.
    """
    __kind__ = Kind.BOOLEAN
    __type__ = bool
    __valued__ = False

    def parse_value(self, text, locale=None, /):
        return locales.parse_boolean(text, locale)


def _parse_integer(text, bits, /):
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise ValueError(f"{text!r} is not an integer")
    value = int(text)
    if not -(1 << bits - 1) <= value < (1 << bits - 1):
        raise ValueError(f"{text!r} is out of the {bits}-bit integer range")
    return value


class IntegerOption(Option[int], sealed=True):
    __kind__ = Kind.INTEGER
    __type__ = int

    def parse_value(self, text, locale=None, /):
        return _parse_integer(text, 32)


class LongOption(Option[int], sealed=True):
    __kind__ = Kind.LONG
    __type__ = int

    def parse_value(self, text, locale=None, /):
        return _parse_integer(text, 64)


class DoubleOption(Option[float], sealed=True):
    """
    decimal number written in the parser's locale ("3.5", or "3,5" for de_DE).
    """
    __kind__ = Kind.DOUBLE
    __type__ = float

    def parse_value(self, text, locale=None, /):
        if not math.isfinite(value := locales.parse_decimal(text, locale)):
            raise ValueError(f"{text!r} is out of range")
        return value


class FloatOption(Option[float], sealed=True):
    """
    decimal number rounded to single precision; values beyond its range are
    rejected rather than turned into infinities.
    """
    __kind__ = Kind.FLOAT
    __type__ = float

    def parse_value(self, text, locale=None, /):
        value = locales.parse_decimal(text, locale)
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            value = math.inf
        if not math.isfinite(value):
            raise ValueError(f"{text!r} is out of the single precision range")
        return value


class StringOption(Option[str], sealed=True):
    """
    free text, optionally restricted by a filter predicate.

    the filter receives the raw text and returns a truthy value to accept it.
    """
    __introspectable__ = Option.__introspectable__ + ("filter",)

    __kind__ = Kind.STRING
    __type__ = str

    def __init__(self, short, long=Unset, /, descr=Unset, *, filter=Unset, **options):
        if filter is not Unset and not callable(filter):
            raise TypeError(f"{type(self).__typename__} 'filter' must be callable")
        super().__init__(short, long, descr, **options)
        self._filter = filter

    def parse_value(self, text, locale=None, /):
        if self._filter and not self._filter(text):
            raise ValueError(f"{text!r} is not accepted")
        return text


class PathOption(Option[Path], sealed=True):
    """
    filesystem path, yielded as a resolved pathlib.Path.

    Constraints (checked on the resolved path, existence first)
    - must_exist: True requires the path to exist, False requires it not to,
      None accepts both.
    - accept: "file" requires a regular file, "dir" a directory, None anything.
    """
    __introspectable__ = Option.__introspectable__ + ("must_exist", "accept")

    __kind__ = Kind.PATH
    __type__ = Path

    def __init__(self, short, long=Unset, /, descr=Unset, *, must_exist=None, accept=None, **options):
        if must_exist not in (True, False, None):
            raise TypeError(f"{type(self).__typename__} 'must_exist' must be a boolean or None")
        if accept not in ("file", "dir", None):
            raise ValueError(f"{type(self).__typename__} 'accept' must be 'file', 'dir' or None")
        super().__init__(short, long, descr, **options)
        self._must_exist = must_exist
        self._accept = accept

    @property
    def usage_type(self):
        return self._accept or "path"

    def parse_value(self, text, locale=None, /):
        try:
            path = Path(text).resolve()
        except (OSError, RuntimeError) as exception:
            raise ValueError(f"{text!r} is not a valid path") from exception
        if self._must_exist is True and not path.exists():
            raise ValueError(f"{text!r} does not exist")
        if self._must_exist is False and path.exists():
            raise ValueError(f"{text!r} already exists")
        if self._accept == "file" and not path.is_file():
            raise ValueError(f"{text!r} is not a file")
        if self._accept == "dir" and not path.is_dir():
            raise ValueError(f"{text!r} is not a directory")
        return path


_NAMED_DIRECTIVES = frozenset("aAbBpcxX")


class DateOption(Option[date], sealed=True):
    """
    calendar date in date_format (a strftime pattern, ISO "%Y-%m-%d" by default).

    only numeric directives are accepted: names of months and weekdays, AM/PM
    markers and the locale's preferred formats (%a %A %b %B %p %c %x %X)
    follow the process locale in strptime, so they are rejected here.
    """
    __introspectable__ = Option.__introspectable__ + ("date_format",)

    __kind__ = Kind.DATE
    __type__ = date

    def __init__(self, short, long=Unset, /, descr=Unset, *, date_format=Unset, **options):
        if not isinstance(date_format, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'date_format' must be a string")
        elif isinstance(date_format, str) and not date_format.strip():
            raise ValueError(f"{type(self).__typename__} 'date_format' cannot be empty")
        elif isinstance(date_format, str) and (named := set(re.findall(r"%(.)", date_format)) & _NAMED_DIRECTIVES):
            raise ValueError(f"{type(self).__typename__} 'date_format' cannot use locale dependent directives "
                             f"({', '.join(sorted('%' + directive for directive in named))})")
        super().__init__(short, long, descr, **options)
        self._date_format = coalesce(date_format, "%Y-%m-%d")

    def example(self, day=Unset, /):
        """
        a sample value in this option's format (today by default).
        """
        return coalesce(day, date.today()).strftime(self._date_format)

    def parse_value(self, text, locale=None, /):
        return datetime.strptime(text, self._date_format).date()


class _EnumeratedOption[_T](Option[_T]):
    """
    Internal: shared base of the enumerated kinds; holds the allowed values.
    """
    __introspectable__ = Option.__introspectable__ + ("values",)
    __displayable__ = Option.__displayable__ + ("values",)

    __member__ = object

    def __init__(self, short, long=Unset, /, descr=Unset, *, values, **options):
        if not isinstance(values, Iterable) or isinstance(values, str):
            raise TypeError(f"{type(self).__typename__} 'values' must be iterable")
        sanitized = []
        for value in values:
            if not isinstance(value, type(self).__member__) or isinstance(value, bool):
                raise TypeError(f"{type(self).__typename__} 'values' must contain {type(self).__type__.__name__} objects only")
            if value in sanitized:
                raise ValueError(f"{type(self).__typename__} 'values' cannot contain duplicates")
            sanitized.append(value)
        if not sanitized:
            raise ValueError(f"{type(self).__typename__} 'values' cannot be empty")
        super().__init__(short, long, descr, **options)
        self._values = tuple(sanitized)

    def is_value_valid(self, value, locale=None, /):
        """
        whether value is one of the allowed values (as a default or a result).
        """
        raise NotImplementedError(f"{type(self).__name__}.is_value_valid() is not implemented")

    def allowed(self):
        """
        the allowed values joined for display ('"jpg", "png"' or "1, 2, 3").
        """
        return ", ".join(map(self._display, self._values))

    def _display(self, value):
        return str(value)

    def check_default(self, default, /):
        if default is not None and not self.is_value_valid(default):
            trigger(IllegalValueError(
                f"default {default!r} is not one of {self.allowed()} for option {self}",
                code=FaultCode.ILLEGAL_VALUE,
                title="illegal default",
                hint=f"choose one of {self.allowed()}",
                option=self,
                value=default,
            ))
        return default


class EnumStringOption(_EnumeratedOption[str], sealed=True):
    """
    one of a fixed set of strings.

    Matching
    - the input selects every allowed value that contains it (case-folded in
      the parser's locale when ignore_case is set, the default);
    - an exact match always wins;
    - when several values still match, the search is retried case-sensitively
      and must leave exactly one.

    Both the input and the values are folded, so "PN" selects "png"; folding
    only the values would make upper-case input unable to match lower-case
    values. The exact-match shortcut keeps "png" selectable next to "PNG8".

    Examples
        >>> fmt = EnumStringOption("f", "format", values=("jpg", "png"))
        >>> fmt.parse_value("PN")
        'png'
    """
    __introspectable__ = _EnumeratedOption.__introspectable__ + ("ignore_case",)

    __kind__ = Kind.ENUM_STRING
    __type__ = str
    __member__ = str

    def __init__(self, short, long=Unset, /, descr=Unset, *, values, ignore_case=True, **options):
        super().__init__(short, long, descr, values=values, **options)
        self._ignore_case = bool(ignore_case)

    @property
    def usage_type(self):
        return Kind.STRING.value

    def _display(self, value):
        return f'"{value}"'

    def parse_value(self, text, locale=None, /):
        if text in self._values:
            return text
        if self._ignore_case:
            folded = locales.casefold(text, locale)
            candidates = [value for value in self._values if folded in locales.casefold(value, locale)]
        else:
            candidates = [value for value in self._values if text in value]
        if len(candidates) > 1:
            candidates = [value for value in candidates if text in value]
        if len(candidates) != 1:
            raise ValueError(f"{text!r} does not select exactly one of {self.allowed()}")
        return candidates[0]

    def is_value_valid(self, value, locale=None, /):
        if not isinstance(value, str):
            return False
        try:
            self.parse_value(value, locale)
        except ValueError:
            return False
        return True


class EnumIntegerOption(_EnumeratedOption[int], sealed=True):
    """
    one of a fixed set of 32-bit integers (exact membership).
    """
    __kind__ = Kind.ENUM_INTEGER
    __type__ = int
    __member__ = int

    @property
    def usage_type(self):
        return Kind.INTEGER.value

    def parse_value(self, text, locale=None, /):
        if (value := _parse_integer(text, 32)) not in self._values:
            raise ValueError(f"{text!r} is not one of {self.allowed()}")
        return value

    def is_value_valid(self, value, locale=None, /):
        return isinstance(value, int) and not isinstance(value, bool) and value in self._values


__all__ = (
    # Constants
    "MAX_COUNT_LIMIT",
    "MIN_COUNT_LIMIT",

    # Types
    "Kind",
    "Option",
    "BooleanOption",
    "IntegerOption",
    "LongOption",
    "DoubleOption",
    "FloatOption",
    "StringOption",
    "PathOption",
    "DateOption",
    "EnumStringOption",
    "EnumIntegerOption",
)

# The metaclass is an implementation detail; keep it out of the module namespace.
del OptionType

"""
claparse faults (parse and declaration errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the
  library reports. Codes are grouped by domain (declaration vs. parsing) to
  keep logs and searches predictable.
- OptionError: base type that carries a message plus structured details
  (offending option, name, token, value, position) and knows how to render
  itself through rich.
- trigger(): central entry point to surface a fault (raise, or render and
  exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parse faults name the ordinal position of the
  token that caused them (“at third position”).
- Short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__;
  keys: program-name, code, error-title, error-message, hint-arrow, hint, docs).

Integration
- The parser builds a fault with title/code/hint/details and calls
  trigger(fault, **context). Outside shell mode the fault is raised; in shell
  mode it is printed to stderr and the process exits with status 1.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declaration (101xx)
      • DUPLICATE_NAME, INVALID_OPTION_TYPE, INVALID_RETRIEVAL_TYPE
    - parsing (111xx)
      • UNKNOWN_OPTION, NOT_A_FLAG, ILLEGAL_VALUE, DUPLICATE_SINGLE_VALUE,
        VALUE_LIMIT_EXCEEDED, INVALID_COUNT

    rationale
    - codes are discoverable in logs and docs and normalized to a string via
      normalize() so hosts can remap them (e.g., to shorter labels).
    """
    # --- declaration / api usage (101xx) ---
    DUPLICATE_NAME              = 10101
    INVALID_OPTION_TYPE         = 10111
    INVALID_RETRIEVAL_TYPE      = 10112

    # --- parsing (111xx) ---
    UNKNOWN_OPTION              = 11101
    NOT_A_FLAG                  = 11102
    ILLEGAL_VALUE               = 11111
    DUPLICATE_SINGLE_VALUE      = 11112
    VALUE_LIMIT_EXCEEDED        = 11113
    INVALID_COUNT               = 11121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionError(Exception):
    """
    base of every fault raised by claparse.

    a fault is a message plus read-only details. the details recognized by
    the renderer and the accessors below are:
    - title, code, hint, docs: presentation (see __rich__).
    - option, name, token, value, index: what went wrong and where.
    - cause: the exception that made a converter reject a value.
    - shell, fancy, colorful, program: runtime context merged in by trigger().
    """

    def __init__(self, message=Unset, /, **details):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message is not Unset else ()))
        self.message = message
        self.details = MappingProxyType(details)

    @property
    def code(self):
        return self.details.get("code")

    @property
    def option(self):
        return self.details.get("option")

    @property
    def name(self):
        return self.details.get("name")

    @property
    def value(self):
        return self.details.get("value")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.details.get("colorful", True)
        fancy = self.details.get("fancy", False)

        # shares the palette keys of claparse.usage where they overlap
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",
            "code": "bold #00E6FF",
            "error-title": "bold #F97316",
            "error-message": "#D4D4D8",
            "hint-arrow": "dim #22C55E",
            "hint": "italic #22C55E",
            "docs": "#737373",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.details.get("program", "claparse")), styler("program-name"))
        code = self.code.normalize() if isinstance(self.code, FaultCode) else ""
        title = self.details.get("title") or type(self).__name__

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(title.title(), styler("error-title")),
            " ]"
        )
        message = text(_message(self), styler("error-message"))
        parts = [message]
        if hint := self.details.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if docs := self.details.get("docs"):
            parts.append(text(docs, styler("docs")))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left", width=console.width - 4)

        return Group(header, *parts)

    def __trigger__(self):
        if not self.details.get("shell", False):
            raise self from self.details.get("cause")
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.details, **overrides})


def _message(fault, /):
    """
    the message of a fault, or its title when it was built without one.
    """
    if fault.message is Unset:
        return fault.details.get("title", "")
    return fault.message


class DuplicateNameError(OptionError): ...
class InvalidOptionTypeError(OptionError): ...
class InvalidRetrievalTypeError(OptionError): ...
class UnknownOptionError(OptionError): ...
class NotAFlagError(OptionError): ...
class IllegalValueError(OptionError): ...
class DuplicateSingleValueError(OptionError): ...
class ValueLimitExceededError(OptionError): ...
class InvalidCountError(OptionError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console and the process
      exits; otherwise the fault is raised (chained from details["cause"]).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members and values are short documentation strings. returns
    None when nothing is registered.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "OptionError",
    "DuplicateNameError",
    "InvalidOptionTypeError",
    "InvalidRetrievalTypeError",
    "UnknownOptionError",
    "NotAFlagError",
    "IllegalValueError",
    "DuplicateSingleValueError",
    "ValueLimitExceededError",
    "InvalidCountError",
    "trigger",
    "getdoc",
)

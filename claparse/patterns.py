r"""
Token grammar synthesis.

The matching rules depend on which short names are registered as flags and
which as value-taking options, so they cannot be written down once: they are
compiled from the live option set at the start of every parse.

Rules (all applied with fullmatch, first match wins in the parser)
- long:    --<long-name>[(=|:)<value>]
- flags:   (-|/)<flag>+                         e.g. -abc
- grouped: (-|/)<flag>*<valued>[[=|:]<value>]   e.g. -abcs10, -s=10, -vs
- short:   (-|/)<any-short-name>[[=|:]<value>]  e.g. -x, /x:1, -xvalue

Named groups
- long:    name, value
- flags:   flags
- grouped: flags, name, value
- short:   name, value
`value` is None when no inline value was attached.

Character classes are built with re.escape, so '?' and '@' are safe. When a
class would be empty (no flags, or no value options) it is replaced by a class
that can never match; the rule then simply never applies.
"""
import functools
import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

SHORT_NAME = r"[A-Za-z0-9@?]"
LONG_NAME = r"[A-Za-z0-9][A-Za-z0-9-]*[A-Za-z0-9]"

_NEVER = r"[^\s\S]"


class RuleSet(NamedTuple):
    long: re.Pattern
    flags: re.Pattern
    grouped: re.Pattern
    short: re.Pattern


def _charclass(names):
    if not names:
        return _NEVER
    return "[" + "".join(map(re.escape, names)) + "]"


@functools.cache
def _compile(flags, valued, /):
    flag = _charclass(flags)
    value = _charclass(valued)
    rules = RuleSet(
        long=re.compile(r"--(?P<name>%s)(?:[=:](?P<value>\S+))?" % LONG_NAME),
        flags=re.compile(r"[-/](?P<flags>%s+)" % flag),
        grouped=re.compile(r"[-/](?P<flags>%s*)(?P<name>%s)(?:[=:]?(?P<value>\S+))?" % (flag, value)),
        short=re.compile(r"[-/](?P<name>%s)(?:[=:]?(?P<value>\S+))?" % SHORT_NAME),
    )
    logger.debug("compiled rules for flags %r and value options %r: %s", flags, valued,
                 ", ".join(rule.pattern for rule in rules))
    return rules


def compile_patterns(options, /):
    """
    build the RuleSet for an iterable of options (usually an OptionRegistry).

    the result only depends on the short names partitioned by requires_value,
    so it is cached on that signature and shared between parsers declaring
    the same short names.
    """
    flags = []
    valued = []
    for option in options:
        (valued if option.requires_value else flags).append(option.short)
    return _compile("".join(sorted(flags)), "".join(sorted(valued)))


__all__ = (
    "SHORT_NAME",
    "LONG_NAME",
    "RuleSet",
    "compile_patterns",
)

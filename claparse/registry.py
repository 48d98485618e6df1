"""
claparse registry: the ordered set of declared options.

Invariants
- Insertion order is preserved (usage output and post-parse checks follow it).
- No two options share a short name; no two declared long names are equal.
- Membership is by identity: the registry hands back the very instances it
  was given.

Errors are raised immediately (never rendered): they signal a programming
mistake in the declaring code rather than bad user input.
"""
import logging
from collections.abc import Sequence

from .faults import FaultCode, DuplicateNameError, UnknownOptionError, getdoc, trigger
from .options import Option

logger = logging.getLogger(__name__)


class OptionRegistry(Sequence):
    """
    ordered, name-unique collection of Option descriptors.

    >>> from claparse.options import BooleanOption
    >>> registry = OptionRegistry()
    >>> verbose = registry.register(BooleanOption("v", "verbose"))
    >>> registry.lookup("verbose") is registry.lookup("v") is verbose
    True
    """

    def __init__(self, options=(), /):
        self._options = []
        for option in options:
            self.register(option)

    def register(self, option, /):
        """
        append an option; raises DuplicateNameError on a name collision.
        """
        if not isinstance(option, Option):
            raise TypeError("register() argument must be an option")
        for name, existing in ((option.short, self.lookup_short(option.short)),
                               (option.long, self.lookup_long(option.long) if option.long else None)):
            if existing is not None:
                trigger(DuplicateNameError(
                    "option name %r of %s is already used by %s" % (name, option, existing),
                    title="duplicate option name",
                    code=FaultCode.DUPLICATE_NAME,
                    hint="give every option a distinct short and long name",
                    option=option,
                    name=name,
                    docs=getdoc(FaultCode.DUPLICATE_NAME),
                ))
        self._options.append(option)
        logger.debug("registered %r", option)
        return option

    def unregister(self, option, /):
        """
        remove an option given by instance or by name (short name first).
        """
        if isinstance(option, str):
            name, option = option, self.lookup(option)
        elif isinstance(option, Option):
            name, option = str(option), option if option in self else None
        else:
            raise TypeError("unregister() argument must be an option or a name")
        if option is None:
            self._unknown(name)
        self._options = [existing for existing in self._options if existing is not option]
        logger.debug("unregistered %r", option)
        return True

    def lookup_short(self, name, /):
        for option in self._options:
            if option.short == name:
                return option
        return None

    def lookup_long(self, name, /):
        if name is None:
            return None
        for option in self._options:
            if option.long == name:
                return option
        return None

    def lookup(self, name, /):
        """
        find an option by short name (one character) or long name; None if absent.
        """
        if not isinstance(name, str):
            raise TypeError("lookup() argument must be a string")
        option = self.lookup_short(name) if len(name) == 1 else None
        return option if option is not None else self.lookup_long(name)

    def require(self, name, /):
        """
        like lookup(), but raises UnknownOptionError when nothing matches.
        """
        if (option := self.lookup(name)) is None:
            self._unknown(name)
        return option

    def set_hidden(self, name, /):
        return self.require(name).hide()

    def _unknown(self, name):
        trigger(UnknownOptionError(
            "unknown option %r" % name,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint="declare the option before referring to it",
            name=name,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._options[index])
        return self._options[index]

    def __len__(self):
        return len(self._options)

    def __iter__(self):
        return iter(tuple(self._options))

    def __contains__(self, option):
        return any(existing is option for existing in self._options)

    def __repr__(self):
        return "option-registry(%s)" % ", ".join(map(str, self._options))


__all__ = (
    "OptionRegistry",
)

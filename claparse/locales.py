"""
Locale-aware text helpers for option value parsing.

Every helper takes the locale as an explicit argument; nothing here reads or
changes the process locale. A locale is a tag such as "en_US", "de-DE" or
"tr_TR.UTF-8"; resolve() normalizes it to "ll_CC" (or "ll").
"""
import functools
import re

DEFAULT_LOCALE = "en_US"

# Languages writing 3,5 for three and a half.
_DECIMAL_COMMA = frozenset({
    "az", "be", "bg", "ca", "cs", "da", "de", "el", "es", "et", "eu", "fi",
    "fr", "gl", "hr", "hu", "id", "is", "it", "kk", "lt", "lv", "mk", "nb",
    "nl", "nn", "no", "pl", "pt", "ro", "ru", "sk", "sl", "sq", "sr", "sv",
    "tr", "uk", "vi",
})

_TURKIC = frozenset({"tr", "az"})

_TRUE = frozenset({"true", "yes", "on", "y", "1"})
_FALSE = frozenset({"false", "no", "off", "n", "0"})


@functools.cache
def _normalize(tag, /):
    match = re.fullmatch(r"([A-Za-z]{2,3})(?:[-_]([A-Za-z]{2}|\d{3}))?(?:\.[\w-]+)?(?:@\w+)?", tag.strip())
    if not match:
        raise ValueError(f"invalid locale {tag!r}")
    language, region = match.groups()
    return language.lower() + ("_" + region.upper() if region else "")


def resolve(locale=None, /):
    """
    normalize a locale tag; None (or an empty tag) means DEFAULT_LOCALE.

    >>> resolve("de-de.UTF-8")
    'de_DE'
    """
    if not locale:
        return DEFAULT_LOCALE
    if not isinstance(locale, str):
        raise TypeError("locale must be a string")
    return _normalize(locale)


def language(locale, /):
    return resolve(locale).split("_", 1)[0]


def casefold(text, locale=None, /):
    """
    lowercase text following the locale's casing rules (Turkic dotted/dotless i).
    """
    if language(locale) in _TURKIC:
        text = text.replace("I", "ı").replace("İ", "i")
    return text.lower()


def parse_decimal(text, locale=None, /):
    """
    parse a decimal number written in the locale's convention.

    decimal-comma languages accept "1.234,5" and "1 234,5"; all others accept
    "1,234.5". raises ValueError for anything else (including inf/nan).
    """
    if language(locale) in _DECIMAL_COMMA:
        decimal, grouping = ",", r"[.\s]"
    else:
        decimal, grouping = ".", ","
    pattern = (
        r"[+-]?(?:\d{1,3}(?:%(grouping)s\d{3})+|\d+)(?:%(decimal)s\d*)?(?:[eE][+-]?\d+)?"
        r"|[+-]?%(decimal)s\d+(?:[eE][+-]?\d+)?"
    ) % {"grouping": grouping, "decimal": re.escape(decimal)}
    if not re.fullmatch(pattern, text := text.strip()):
        raise ValueError(f"{text!r} is not a number in locale {resolve(locale)!r}")
    return float(re.sub(grouping, "", text).replace(decimal, "."))


def parse_boolean(text, locale=None, /):
    """
    parse a boolean word ("yes", "off", "1", ...); raises ValueError otherwise.
    """
    word = casefold(text.strip(), locale)
    if word in _TRUE:
        return True
    if word in _FALSE:
        return False
    raise ValueError(f"{text!r} is not a boolean")


__all__ = (
    "DEFAULT_LOCALE",
    "resolve",
    "language",
    "casefold",
    "parse_decimal",
    "parse_boolean",
)

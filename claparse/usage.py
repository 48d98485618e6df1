"""
claparse usage rendering (rich based).

Two layouts are derived from the declared options, in registration order,
skipping hidden ones:

short
    usage: PROG -w <integer> [-h <integer>] [-?] SUFFIX

long
    usage: PROG <options> SUFFIX
    options:
      -w, --width <integer>  (mandatory)
            Width of image.
      [-h, --height <integer>]
            Height of image.
    EXTRA

Palette keys
- usage-label, program-name, suffix, options-label, option-name, value-type,
  mandatory, description, allowed-values, example, extra, panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
from collections import defaultdict

from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.text import Text

from .options import DateOption, Kind
from .utils import Unset, coalesce

_INDENT = 8


def render_usage(parser, long=False, /, *, program=Unset, suffix=Unset, extra=Unset, colorful=Unset):
    """
    build the usage renderable for a parser.

    Parameters
    - long: long layout (one entry per option) instead of the one-line summary.
    - program: launch text; defaults to the parser's program name.
    - suffix: text appended to the usage line (e.g. "<file> ...").
    - extra: free text appended after the option list (long layout only).
    - colorful: defaults to the parser's setting.
    """
    colorful = coalesce(colorful, parser.colorful)
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "suffix": "#9CA3AF",
        "options-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "value-type": "bold #FFD600",
        "mandatory": "italic #F97316",
        "description": "#9CA3AF",
        "allowed-values": "bold #FF4D94",
        "example": "italic #22C55E",
        "extra": "#737373",
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styler(style))

    def signature(option, *, names):
        parts = [text("-" + option.short, "option-name")]
        if names and option.long:
            parts += [Text(", "), text("--" + option.long, "option-name")]
        if option.usage_type:
            parts += [Text(" <"), text(option.usage_type, "value-type"), Text(">")]
        signature = Text.assemble(*parts)
        return signature if option.mandatory else Text.assemble("[", signature, "]")

    visible = [option for option in parser.options if not option.hidden]

    headline = Text.assemble(
        text("usage", "usage-label"), ":", " ",
        text(coalesce(program, parser.program), "program-name"),
    )
    if long:
        headline.append(" <options>")
    else:
        for option in visible:
            headline.append(" ").append(signature(option, names=parser.long_names_in_short_usage))
    if suffix:
        headline.append(" ").append(text(suffix, "suffix"))

    if not long:
        return headline

    renders = [headline]
    if visible:
        renders.append(Text.assemble(text("options", "options-label"), ":"))
    for option in visible:
        entry = Text("  ").append(signature(option, names=True))
        if option.mandatory:
            entry.append("  ").append(text("(mandatory)", "mandatory"))
        renders.append(entry)

        details = []
        if option.kind in (Kind.ENUM_STRING, Kind.ENUM_INTEGER):
            details.append(Text.assemble("one of ", text(option.allowed(), "allowed-values")))
        if isinstance(option, DateOption):
            details.append(Text.assemble("format ", text(option.example(), "example")))
        if option.descr:
            details.append(text(option.descr, "description"))
        if details:
            renders.append(Padding(Text(". ").join(details), (0, 0, 0, _INDENT)))

    if extra:
        renders.append(text(extra, "extra"))

    if parser.fancy:
        return Panel(
            Group(*renders),
            title=Text.assemble("[", " ", f"{parser.program} usage".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )
    return Group(*renders)


def print_usage(parser, long=False, /, *, stderr=False, console=Unset, **options):
    """
    print the usage of a parser (to stderr when requested, or to a given console).
    """
    coalesce(console, Console(stderr=stderr)).print(render_usage(parser, long, **options))


__all__ = (
    "render_usage",
    "print_usage",
)

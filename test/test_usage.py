"""
Usage rendering tests (short and long layouts).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked through a recording rich console without colors.
"""

from __future__ import annotations

import unittest
from datetime import date
from unittest import TestCase

from rich.console import Console

from claparse import Parser, render_usage, print_usage


def render(renderable):
    console = Console(record=True, width=200, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestUsage(TestCase):

    def setUp(self):
        self.parser = Parser(program="app", colorful=False)
        self.parser.add_integer_option("w", "width", "Width of image.", mandatory=True)
        self.parser.add_integer_option("h", "height", "Height of image.")
        self.parser.add_enum_string_option("f", "format", "Output format.", values=("jpg", "png"))
        self.parser.add_boolean_option("?", "help", "Display help information.")
        self.parser.add_boolean_option("x", "debug", "Internal switch.", hidden=True)

    def testShortUsage(self):
        output = render(render_usage(self.parser))
        self.assertEqual(output.strip(), "usage: app -w <integer> [-h <integer>] [-f <string>] [-?]")

    def testShortUsageWithLongNamesAndSuffix(self):
        parser = Parser(program="app", colorful=False, long_names_in_short_usage=True)
        parser.add_integer_option("w", "width", mandatory=True)
        parser.add_boolean_option("q")
        output = render(render_usage(parser, suffix="<file> ..."))
        self.assertEqual(output.strip(), "usage: app -w, --width <integer> [-q] <file> ...")

    def testLongUsage(self):
        output = render(render_usage(self.parser, True, extra="See the manual."))
        lines = [line.rstrip() for line in output.splitlines()]
        self.assertEqual(lines[0], "usage: app <options>")
        self.assertEqual(lines[1], "options:")
        self.assertEqual(lines[2], "  -w, --width <integer>  (mandatory)")
        self.assertEqual(lines[3], "        Width of image.")
        self.assertEqual(lines[4], "  [-h, --height <integer>]")
        self.assertIn('        one of "jpg", "png". Output format.', lines)
        self.assertIn("  [-?, --help]", lines)
        self.assertEqual(lines[-1], "See the manual.")

    def testHiddenOptionsAreSkipped(self):
        for long in (False, True):
            with self.subTest(long=long):
                output = render(render_usage(self.parser, long))
                self.assertNotIn("-x", output)
                self.assertNotIn("debug", output)

    def testHiddenOptionsStillParse(self):
        self.assertEqual(self.parser.parse("-w 1 -x").values_of("debug"), (True,))

    def testDateExample(self):
        parser = Parser(program="app", colorful=False)
        parser.add_date_option("d", "day", "Day to report.", date_format="%Y/%m/%d")
        output = render(render_usage(parser, True))
        self.assertIn("format " + date.today().strftime("%Y/%m/%d") + ". Day to report.", output)

    def testProgramOverride(self):
        output = render(render_usage(self.parser, program="python -m app"))
        self.assertTrue(output.startswith("usage: python -m app "))

    def testPrintUsageToGivenConsole(self):
        console = Console(record=True, width=200, color_system=None)
        print_usage(self.parser, console=console)
        self.assertIn("usage: app", console.export_text())

    def testParserShortcut(self):
        self.assertIn("usage: app <options>", render(self.parser.render_usage(True)))

    def testFancyLongUsageUsesPanel(self):
        parser = Parser(program="app", fancy=True, colorful=False)
        parser.add_boolean_option("v")
        output = render(render_usage(parser, True))
        self.assertIn("APP USAGE", output)
        self.assertIn("╭", output)


if __name__ == "__main__":
    unittest.main()

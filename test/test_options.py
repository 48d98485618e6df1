"""
Options module behavioral tests (declaration rules and value conversion).

Scope
- Validate name, description and count sanitization for every kind.
- Validate sealing (concrete kinds) and abstraction (Option itself).
- Validate parse_value for each kind, including locale-sensitive ones.
- Validate read-only introspection and representation.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None where Unset is the default; omit instead.
"""

from __future__ import annotations

import os
import struct
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import TestCase

from claparse.options import _EnumeratedOption
from claparse import (
    Option,
    Kind,
    BooleanOption,
    IntegerOption,
    LongOption,
    DoubleOption,
    FloatOption,
    StringOption,
    PathOption,
    DateOption,
    EnumStringOption,
    EnumIntegerOption,
    MAX_COUNT_LIMIT,
    IllegalValueError,
)


class TestDeclaration(TestCase):
    """Metadata sanitization shared by every kind."""

    def testValidNames(self):
        for short in ("a", "Z", "7", "@", "?"):
            with self.subTest(short=short):
                self.assertEqual(BooleanOption(short).short, short)
        self.assertEqual(BooleanOption("a", "dry-run").long, "dry-run")
        self.assertEqual(BooleanOption("a", "x2").long, "x2")

    def testInvalidShortNames(self):
        for short in ("", "ab", "-", "é", " "):
            with self.subTest(short=short):
                with self.assertRaises(ValueError):
                    BooleanOption(short)
        with self.assertRaises(TypeError):
            BooleanOption(1)

    def testInvalidLongNames(self):
        for long in ("a", "-ab", "ab-", "a_b", "a b"):
            with self.subTest(long=long):
                with self.assertRaises(ValueError):
                    BooleanOption("a", long)
        with self.assertRaises(TypeError):
            BooleanOption("a", None)

    def testLongNameDefaultsToNone(self):
        self.assertIsNone(IntegerOption("w").long)

    def testDescrDefaultsToNone(self):
        self.assertIsNone(IntegerOption("w").descr)

    def testDescrIsTrimmed(self):
        self.assertEqual(IntegerOption("w", descr="  width  ").descr, "width")

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            IntegerOption("w", "width", "   ")

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            IntegerOption("w", "width", None)

    def testCountsFromFlags(self):
        cases = {
            (False, False): (0, 1),
            (True, False): (1, 1),
            (False, True): (0, MAX_COUNT_LIMIT),
            (True, True): (1, MAX_COUNT_LIMIT),
        }
        for (mandatory, many), counts in cases.items():
            with self.subTest(mandatory=mandatory, many=many):
                option = StringOption("s", mandatory=mandatory, many=many)
                self.assertEqual((option.min_count, option.max_count), counts)
                self.assertEqual(option.mandatory, mandatory)
                self.assertEqual(option.many, many)

    def testExplicitCountsWin(self):
        option = StringOption("s", mandatory=False, many=False, counts=(2, 5))
        self.assertEqual((option.min_count, option.max_count), (2, 5))
        self.assertTrue(option.mandatory)
        self.assertTrue(option.many)

    def testInvalidCounts(self):
        for counts in ((2, 1), (-1, 1), (0, MAX_COUNT_LIMIT + 1), (1, 2, 3)):
            with self.subTest(counts=counts):
                with self.assertRaises(ValueError):
                    StringOption("s", counts=counts)
        for counts in (("1", 2), (1, 2.0), (True, 2), 3):
            with self.subTest(counts=counts):
                with self.assertRaises(TypeError):
                    StringOption("s", counts=counts)

    def testSetCountsRevalidates(self):
        option = IntegerOption("n")
        self.assertIs(option.set_counts(1, 3), option)
        self.assertEqual((option.min_count, option.max_count), (1, 3))
        with self.assertRaises(ValueError):
            option.set_counts(3, 1)

    def testHide(self):
        option = BooleanOption("q")
        self.assertFalse(option.hidden)
        self.assertIs(option.hide(), option)
        self.assertTrue(option.hidden)

    def testFieldsAreReadOnly(self):
        option = IntegerOption("w", "width")
        with self.assertRaises(AttributeError):
            option.short = "x"  # type: ignore[misc]
        with self.assertRaises(AttributeError):
            option.long = "height"  # type: ignore[misc]

    def testOptionIsAbstract(self):
        with self.assertRaises(TypeError):
            Option("a")

    def testConcreteKindsAreSealed(self):
        for kind in (BooleanOption, IntegerOption, StringOption, EnumStringOption):
            with self.subTest(kind=kind.__name__):
                with self.assertRaises(TypeError):
                    type("Custom", (kind,), {})

    def testKindsAndTypes(self):
        cases = (
            (BooleanOption("a"), Kind.BOOLEAN, bool, False),
            (IntegerOption("a"), Kind.INTEGER, int, True),
            (LongOption("a"), Kind.LONG, int, True),
            (DoubleOption("a"), Kind.DOUBLE, float, True),
            (FloatOption("a"), Kind.FLOAT, float, True),
            (StringOption("a"), Kind.STRING, str, True),
            (PathOption("a"), Kind.PATH, Path, True),
            (DateOption("a"), Kind.DATE, date, True),
            (EnumStringOption("a", values=("x",)), Kind.ENUM_STRING, str, True),
            (EnumIntegerOption("a", values=(1,)), Kind.ENUM_INTEGER, int, True),
        )
        for option, kind, type_, valued in cases:
            with self.subTest(kind=kind):
                self.assertIs(option.kind, kind)
                self.assertIs(option.type, type_)
                self.assertEqual(option.requires_value, valued)

    def testUsageTypes(self):
        self.assertIsNone(BooleanOption("a").usage_type)
        self.assertEqual(IntegerOption("a").usage_type, "integer")
        self.assertEqual(PathOption("a", accept="dir").usage_type, "dir")
        self.assertEqual(PathOption("a").usage_type, "path")
        self.assertEqual(EnumStringOption("a", values=("x",)).usage_type, "string")
        self.assertEqual(EnumIntegerOption("a", values=(1,)).usage_type, "integer")

    def testReprAndNames(self):
        option = IntegerOption("w", "width")
        self.assertTrue(repr(option).startswith("integer-option(short='w', long='width'"))
        self.assertEqual(option.names(), ("-w", "--width"))
        self.assertEqual(str(option), "-w, --width")
        self.assertEqual(str(IntegerOption("w")), "-w")


class TestConversion(TestCase):
    """parse_value for every kind."""

    def testBoolean(self):
        option = BooleanOption("v")
        self.assertTrue(option.parse_value("YES"))
        self.assertFalse(option.parse_value("off"))
        with self.assertRaises(ValueError):
            option.parse_value("maybe")

    def testIntegerRange(self):
        option = IntegerOption("n")
        self.assertEqual(option.parse_value("-2147483648"), -2147483648)
        self.assertEqual(option.parse_value("+42"), 42)
        for text in ("2147483648", "1.5", "0x10", "", "1_000", " 1"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    option.parse_value(text)

    def testLongRange(self):
        option = LongOption("n")
        self.assertEqual(option.parse_value("9223372036854775807"), 9223372036854775807)
        with self.assertRaises(ValueError):
            option.parse_value("9223372036854775808")

    def testDoubleFollowsLocale(self):
        option = DoubleOption("r")
        self.assertEqual(option.parse_value("1,234.5"), 1234.5)
        self.assertEqual(option.parse_value("1.234,5", "de_DE"), 1234.5)
        self.assertEqual(option.parse_value("3,5", "fr-FR"), 3.5)
        for text in ("3,5", "abc", "1e999", "inf", "nan"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    option.parse_value(text)

    def testFloatRoundsToSinglePrecision(self):
        option = FloatOption("r")
        self.assertEqual(option.parse_value("0.1"), struct.unpack("f", struct.pack("f", 0.1))[0])
        self.assertNotEqual(option.parse_value("0.1"), 0.1)
        with self.assertRaises(ValueError):
            option.parse_value("1e39")
        for text in ("-1e39", "3.5e38"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    option.parse_value(text)
        self.assertEqual(option.parse_value("3.4e38"), struct.unpack("f", struct.pack("f", 3.4e38))[0])

    def testStringWithoutFilter(self):
        option = StringOption("s", "name")
        self.assertIsNone(option.filter)
        self.assertEqual(option.parse_value("anything at all"), "anything at all")

    def testStringFilter(self):
        option = StringOption("s", filter=str.isidentifier)
        self.assertEqual(option.parse_value("name"), "name")
        with self.assertRaises(ValueError):
            option.parse_value("1name")
        with self.assertRaises(TypeError):
            StringOption("s", filter="isidentifier")

    def testPathConstraints(self):
        with tempfile.TemporaryDirectory() as directory:
            file = os.path.join(directory, "data.txt")
            with open(file, "w") as stream:
                stream.write("data")
            missing = os.path.join(directory, "missing.txt")

            self.assertEqual(PathOption("f").parse_value(missing), Path(missing).resolve())
            self.assertEqual(PathOption("f", must_exist=True, accept="file").parse_value(file), Path(file).resolve())
            self.assertEqual(PathOption("d", must_exist=True, accept="dir").parse_value(directory), Path(directory).resolve())

            with self.assertRaises(ValueError):
                PathOption("f", must_exist=False).parse_value(file)
            with self.assertRaises(ValueError):
                PathOption("f", must_exist=True).parse_value(missing)
            with self.assertRaises(ValueError):
                PathOption("f", accept="file").parse_value(directory)
            with self.assertRaises(ValueError):
                PathOption("d", accept="dir").parse_value(file)

    def testPathDeclaration(self):
        with self.assertRaises(ValueError):
            PathOption("f", accept="socket")
        with self.assertRaises(TypeError):
            PathOption("f", must_exist="yes")

    def testDate(self):
        self.assertEqual(DateOption("d").parse_value("2024-02-29"), date(2024, 2, 29))
        custom = DateOption("d", date_format="%d/%m/%Y")
        self.assertEqual(custom.date_format, "%d/%m/%Y")
        self.assertEqual(custom.parse_value("29/02/2024"), date(2024, 2, 29))
        self.assertEqual(custom.example(date(2001, 2, 3)), "03/02/2001")
        with self.assertRaises(ValueError):
            DateOption("d").parse_value("2023-02-29")

    def testDateRejectsLocaleDependentDirectives(self):
        for date_format in ("%d %B %Y", "%d-%b-%Y", "%A %d.%m.%Y", "%x", "%I %p %d/%m/%Y"):
            with self.subTest(date_format=date_format):
                with self.assertRaises(ValueError):
                    DateOption("d", date_format=date_format)
        literal = DateOption("d", date_format="%Y%m%d %%B")
        self.assertEqual(literal.parse_value("20240301 %B"), date(2024, 3, 1))


class TestEnumerated(TestCase):
    """Enumerated kinds: substring matching, membership, defaults."""

    def setUp(self):
        self.format = EnumStringOption("f", "format", values=("jpg", "jpeg", "png", "PNG8"))

    def testValuesAreKeptInOrder(self):
        self.assertEqual(self.format.values, ("jpg", "jpeg", "png", "PNG8"))
        self.assertEqual(self.format.allowed(), '"jpg", "jpeg", "png", "PNG8"')

    def testExactMatchWins(self):
        self.assertEqual(self.format.parse_value("jpg"), "jpg")
        self.assertEqual(self.format.parse_value("png"), "png")

    def testUniqueSubstring(self):
        self.assertEqual(self.format.parse_value("JPE"), "jpeg")
        self.assertEqual(self.format.parse_value("8"), "PNG8")

    def testCaseSensitiveRetry(self):
        # "PN" folds into both png and PNG8; only PNG8 contains it verbatim
        self.assertEqual(self.format.parse_value("PN"), "PNG8")

    def testAmbiguousOrMissing(self):
        for text in ("jp", "gif", "p"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    self.format.parse_value(text)

    def testIgnoreCaseDisabled(self):
        option = EnumStringOption("f", values=("jpg", "png"), ignore_case=False)
        self.assertEqual(option.parse_value("pn"), "png")
        with self.assertRaises(ValueError):
            option.parse_value("PNG")

    def testTurkishCaseFolding(self):
        option = EnumStringOption("c", values=("ISTANBUL", "ANKARA"))
        self.assertEqual(option.parse_value("istanbul"), "ISTANBUL")
        self.assertEqual(option.parse_value("ıstanbul", "tr_TR"), "ISTANBUL")
        with self.assertRaises(ValueError):
            option.parse_value("istanbul", "tr_TR")

    def testIsValueValid(self):
        self.assertTrue(self.format.is_value_valid("jpeg"))
        self.assertFalse(self.format.is_value_valid("gif"))
        self.assertFalse(self.format.is_value_valid(3))

    def testDeclarationRules(self):
        with self.assertRaises(ValueError):
            EnumStringOption("f", values=("a", "a"))
        with self.assertRaises(ValueError):
            EnumStringOption("f", values=())
        with self.assertRaises(TypeError):
            EnumStringOption("f", values="abc")
        with self.assertRaises(TypeError):
            EnumIntegerOption("n", values=(1, "2"))
        with self.assertRaises(TypeError):
            EnumIntegerOption("n", values=(True,))

    def testEnumInteger(self):
        option = EnumIntegerOption("n", values=(1, 2, 4))
        self.assertEqual(option.parse_value("4"), 4)
        self.assertEqual(option.allowed(), "1, 2, 4")
        with self.assertRaises(ValueError):
            option.parse_value("3")
        self.assertTrue(option.is_value_valid(2))
        self.assertFalse(option.is_value_valid(True))

    def testSubclassWithoutValidityCheck(self):
        class Partial(_EnumeratedOption[str]):
            __kind__ = Kind.ENUM_STRING
            __member__ = str

        with self.assertRaisesRegex(NotImplementedError, r"Partial\.is_value_valid\(\)"):
            Partial("p", values=("a",)).is_value_valid("a")

    def testDefaultValidation(self):
        self.assertEqual(self.format.check_default("png"), "png")
        self.assertIsNone(self.format.check_default(None))
        with self.assertRaises(IllegalValueError):
            self.format.check_default("gif")
        self.assertEqual(IntegerOption("w").check_default(-1), -1)


if __name__ == "__main__":
    unittest.main()

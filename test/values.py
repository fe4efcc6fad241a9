"""
Values module behavioral tests (conversion of raw tokens per value kind).

Scope
- Validate every built-in kind through convert(): accepted spellings, range
  checks, rejection messages.
- Validate element sizes reported by ValueKind.itemsize.
- Validate the filesystem collaborator used by path kinds.

Conventions
- Test method names follow CamelCase per project convention.
- A throwaway Schema is used as conversion context; path kinds get a fake
  filesystem through Options.filesystem.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from schemargs import Schema, ChoiceSet, ValueKind, Filesystem, convert


class FakeFilesystem(Filesystem):
    """In-memory filesystem: a set of files and a set of directories."""

    def __init__(self, files=(), dirs=()):
        self.files = set(files)
        self.dirs = set(dirs)

    def exists(self, path, /):
        return path in self.files or path in self.dirs

    def isfile(self, path, /):
        return path in self.files

    def isdir(self, path, /):
        return path in self.dirs


class TestIntegers(TestCase):
    """Behavioral tests for the fixed-width integer kinds."""

    def setUp(self):
        self.schema = Schema()

    def testInt32Accepted(self):
        self.assertEqual(convert(self.schema, "123", ValueKind.INT32), 123)
        self.assertEqual(convert(self.schema, "-42", ValueKind.INT32), -42)

    def testLeadingBlanksAccepted(self):
        self.assertEqual(convert(self.schema, "  7", ValueKind.INT64), 7)

    def testTrailingGarbageRejected(self):
        with self.assertRaises(ValueError):
            convert(self.schema, "12abc", ValueKind.INT32)
        with self.assertRaises(ValueError):
            convert(self.schema, "abc", ValueKind.INT32)

    def testRangeEnforced(self):
        self.assertEqual(convert(self.schema, "127", ValueKind.INT8), 127)
        with self.assertRaises(ValueError):
            convert(self.schema, "128", ValueKind.INT8)
        with self.assertRaises(ValueError):
            convert(self.schema, "256", ValueKind.UINT8)
        self.assertEqual(convert(self.schema, str(2 ** 64 - 1), ValueKind.UINT64), 2 ** 64 - 1)
        with self.assertRaises(ValueError):
            convert(self.schema, str(2 ** 64), ValueKind.UINT64)

    def testUnsignedRejectsSign(self):
        with self.assertRaises(ValueError) as context:
            convert(self.schema, " -1", ValueKind.UINT64)
        self.assertIn("sign", str(context.exception))

    def testEmptyRejected(self):
        for kind in (ValueKind.INT8, ValueKind.UINT32, ValueKind.DOUBLE, ValueKind.BOOL, ValueKind.STRING):
            with self.subTest(kind=kind), self.assertRaises(ValueError):
                convert(self.schema, "", kind)


class TestScalars(TestCase):
    """Behavioral tests for doubles, booleans, strings and choices."""

    def setUp(self):
        self.schema = Schema()

    def testDouble(self):
        self.assertEqual(convert(self.schema, "3.14", ValueKind.DOUBLE), 3.14)
        self.assertEqual(convert(self.schema, "1e3", ValueKind.DOUBLE), 1000.0)
        self.assertEqual(convert(self.schema, "0x1p4", ValueKind.DOUBLE), 16.0)
        with self.assertRaises(ValueError):
            convert(self.schema, "3.14x", ValueKind.DOUBLE)

    def testDoubleOverflowRejected(self):
        for token in ("1e400", "-1e400", "0x1p2000"):
            with self.subTest(token=token), self.assertRaises(ValueError):
                convert(self.schema, token, ValueKind.DOUBLE)

    def testDoubleInfinityLiteral(self):
        self.assertEqual(convert(self.schema, "inf", ValueKind.DOUBLE), float("inf"))
        self.assertEqual(convert(self.schema, "-Infinity", ValueKind.DOUBLE), float("-inf"))

    def testBoolSpellings(self):
        for token in ("true", "YES", "1", "On"):
            self.assertIs(convert(self.schema, token, ValueKind.BOOL), True)
        for token in ("false", "No", "0", "OFF"):
            self.assertIs(convert(self.schema, token, ValueKind.BOOL), False)
        with self.assertRaises(ValueError):
            convert(self.schema, "maybe", ValueKind.BOOL)

    def testStringDuplicatedIntoLedger(self):
        schema = Schema(duplicate=True)
        self.assertEqual(convert(schema, "text", ValueKind.STRING), "text")
        self.assertEqual(schema.allocations, ("text",))

    def testStringBorrowedWithoutDuplication(self):
        self.assertEqual(convert(self.schema, "text", ValueKind.STRING), "text")
        self.assertEqual(self.schema.allocations, ())

    def testChoiceReturnsEntry(self):
        choices = ChoiceSet("fast", "slow")
        self.assertIs(convert(self.schema, "slow", ValueKind.CHOICE, choices=choices), choices[1])
        with self.assertRaises(ValueError):
            convert(self.schema, "SLOW", ValueKind.CHOICE, choices=choices)

    def testChoiceInsensitive(self):
        choices = ChoiceSet("fast", "slow", insensitive=True)
        self.assertIs(convert(self.schema, "FAST", ValueKind.CHOICE, choices=choices), choices[0])

    def testCustomAndSubcommandNotConverted(self):
        with self.assertRaises(TypeError):
            convert(self.schema, "x", ValueKind.CUSTOM)
        with self.assertRaises(TypeError):
            convert(self.schema, "x", ValueKind.SUBCOMMAND)


class TestQuantities(TestCase):
    """Behavioral tests for sizes and durations."""

    def setUp(self):
        self.schema = Schema()

    def testSizeUnits(self):
        self.assertEqual(convert(self.schema, "10", ValueKind.SIZE), 10)
        self.assertEqual(convert(self.schema, "10B", ValueKind.SIZE), 10)
        self.assertEqual(convert(self.schema, "4KB", ValueKind.SIZE), 4000)
        self.assertEqual(convert(self.schema, "4K", ValueKind.SIZE), 4096)
        self.assertEqual(convert(self.schema, "1.5MiB", ValueKind.SIZE), 1572864)
        self.assertEqual(convert(self.schema, "2gb", ValueKind.SIZE), 2 * 1000 ** 3)
        self.assertEqual(convert(self.schema, "5 MB", ValueKind.SIZE), 5 * 1000 ** 2)

    def testSizeRejections(self):
        for token in ("-1", "10XB", "MB", "1.2.3K", "5 "):
            with self.subTest(token=token), self.assertRaises(ValueError):
                convert(self.schema, token, ValueKind.SIZE)

    def testSeconds(self):
        self.assertEqual(convert(self.schema, "90", ValueKind.TIME_S), 90)
        self.assertEqual(convert(self.schema, "2m", ValueKind.TIME_S), 120)
        self.assertEqual(convert(self.schema, "1.5h", ValueKind.TIME_S), 5400)
        self.assertEqual(convert(self.schema, "1d", ValueKind.TIME_S), 86400)

    def testNanoseconds(self):
        self.assertEqual(convert(self.schema, "250", ValueKind.TIME_NS), 250)
        self.assertEqual(convert(self.schema, "250ms", ValueKind.TIME_NS), 250 * 10 ** 6)
        self.assertEqual(convert(self.schema, "3us", ValueKind.TIME_NS), 3000)
        self.assertEqual(convert(self.schema, "1s", ValueKind.TIME_NS), 10 ** 9)

    def testDurationRejections(self):
        for token in ("nan", "inf", "-5s", "5 parsecs", "s", "5 "):
            with self.subTest(token=token), self.assertRaises(ValueError):
                convert(self.schema, token, ValueKind.TIME_NS)


class TestPaths(TestCase):
    """Behavioral tests for PATH, FILE and DIR against a fake filesystem."""

    def setUp(self):
        self.schema = Schema(filesystem=FakeFilesystem(files={"a.txt"}, dirs={"out"}))

    def testPathAcceptsAnyExisting(self):
        self.assertEqual(convert(self.schema, "a.txt", ValueKind.PATH), "a.txt")
        self.assertEqual(convert(self.schema, "out", ValueKind.PATH), "out")
        with self.assertRaises(ValueError):
            convert(self.schema, "missing", ValueKind.PATH)

    def testFileRejectsDirectory(self):
        self.assertEqual(convert(self.schema, "a.txt", ValueKind.FILE), "a.txt")
        with self.assertRaises(ValueError):
            convert(self.schema, "out", ValueKind.FILE)

    def testDirRejectsFile(self):
        self.assertEqual(convert(self.schema, "out", ValueKind.DIR), "out")
        with self.assertRaises(ValueError):
            convert(self.schema, "a.txt", ValueKind.DIR)

    def testFilesystemMustBeComplete(self):
        with self.assertRaises(TypeError):
            Schema(filesystem=object())


class TestItemsize(TestCase):
    """Element sizes declared by each kind."""

    def testSizes(self):
        self.assertEqual(ValueKind.BOOL.itemsize, 1)
        self.assertEqual(ValueKind.UINT8.itemsize, 1)
        self.assertEqual(ValueKind.INT32.itemsize, 4)
        self.assertEqual(ValueKind.INT64.itemsize, 8)
        self.assertEqual(ValueKind.STRING.itemsize, 8)
        self.assertEqual(ValueKind.TIME_NS.itemsize, 8)
        self.assertIsNone(ValueKind.CUSTOM.itemsize)
        self.assertIsNone(ValueKind.SUBCOMMAND.itemsize)


if __name__ == "__main__":
    unittest.main()

"""
Arguments module behavioral tests (no explicit None).

Scope
- Validate public specs (Positional, Option, Flag): construction, names,
  payload rules, storage.
- Validate payload containers (ChoiceSet, SubcommandSet) and index lookups.
- Validate metadata constraints (descr defaults to None but explicit None
  rejected, names validation, default/slot exclusivity).

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from schemargs import (
    Positional, Option, Flag, FlagKind, Slot,
    Choice, ChoiceSet, Subcommand, SubcommandSet,
    Schema, TypedList, ValueKind,
    help_flag, choice_index, subcommand_index,
)


class TestPositional(TestCase):
    """Behavioral tests for Positional specifications."""

    def testDefaults(self):
        p = Positional("input")
        self.assertEqual(p.name, "input")
        self.assertIsNone(p.descr)
        self.assertIs(p.kind, ValueKind.STRING)
        self.assertFalse(p.list)
        self.assertFalse(p.optional)
        self.assertIsNone(p.value)

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Positional("input", None)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Positional("input", "   ")

    def testNameMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Positional("  ")

    def testDefaultSeedsSlot(self):
        p = Positional("level", kind=ValueKind.INT32, optional=True, default=3)
        self.assertEqual(p.value, 3)
        self.assertEqual(p.slot.default, 3)

    def testListGetsTypedList(self):
        p = Positional("files", list=True)
        self.assertIsInstance(p.value, TypedList)
        self.assertEqual(p.value.itemsize, ValueKind.STRING.itemsize)

    def testListDefaultMustBeTypedList(self):
        with self.assertRaises(TypeError):
            Positional("files", list=True, default=[])

    def testCustomListNeedsTypedList(self):
        with self.assertRaises(TypeError):
            Positional("items", kind=ValueKind.CUSTOM, list=True, verify=lambda *_: True)
        p = Positional(
            "items", kind=ValueKind.CUSTOM, list=True,
            verify=lambda *_: True, default=TypedList(16),
        )
        self.assertEqual(p.value.itemsize, 16)

    def testCustomRequiresVerify(self):
        with self.assertRaises(TypeError):
            Positional("item", kind=ValueKind.CUSTOM)
        with self.assertRaises(TypeError):
            Positional("item", verify=lambda *_: True)

    def testChoiceRequiresChoices(self):
        with self.assertRaises(TypeError):
            Positional("mode", kind=ValueKind.CHOICE)
        with self.assertRaises(TypeError):
            Positional("mode", choices=("a", "b"))

    def testChoicesNormalized(self):
        p = Positional("mode", kind=ValueKind.CHOICE, choices=("fast", ("slow", "careful mode")))
        self.assertIsInstance(p.choices, ChoiceSet)
        self.assertEqual([choice.value for choice in p.choices], ["fast", "slow"])
        self.assertEqual(p.choices[1].descr, "careful mode")

    def testSubcommandRequiresSet(self):
        with self.assertRaises(TypeError):
            Positional("command", kind=ValueKind.SUBCOMMAND)

    def testSubcommandCannotBeList(self):
        subcommands = SubcommandSet(Subcommand("init", Schema()))
        with self.assertRaises(TypeError):
            Positional("command", kind=ValueKind.SUBCOMMAND, subcommands=subcommands, list=True)

    def testDefaultAndSlotExclusive(self):
        with self.assertRaises(TypeError):
            Positional("input", default="a", slot=Slot())

    def testSharedSlot(self):
        slot = Slot("shared")
        first = Positional("first", slot=slot)
        second = Positional("second", slot=slot)
        self.assertIs(first.slot, second.slot)
        self.assertEqual(second.value, "shared")

    def testListSlotMustHoldTypedList(self):
        with self.assertRaises(TypeError):
            Positional("files", list=True, slot=Slot())

    def testReadOnlyProperties(self):
        p = Positional("input")
        with self.assertRaises(AttributeError):
            p.name = "other"

    def testRepr(self):
        self.assertTrue(repr(Positional("input")).startswith("positional(name='input'"))


class TestOption(TestCase):
    """Behavioral tests for Option (named, value-bearing) specifications."""

    def testRequiresAtLeastOneName(self):
        with self.assertRaises(TypeError):
            Option()

    def testNamesSplit(self):
        o = Option("-o", "--output")
        self.assertEqual(o.short, "-o")
        self.assertEqual(o.long, "--output")
        self.assertEqual(o.names, ("-o", "--output"))

    def testLongOnly(self):
        o = Option("--dry-run")
        self.assertIsNone(o.short)
        self.assertEqual(o.names, ("--dry-run",))

    def testNamesRejectUnderscore(self):
        with self.assertRaises(ValueError):
            Option("--dry_run")

    def testNamesRejectMalformed(self):
        for names in (("output",), ("-oo",), ("---x",), ("--1st",)):
            with self.subTest(names=names), self.assertRaises(ValueError):
                Option(*names)

    def testDuplicateFormsRejected(self):
        with self.assertRaises(ValueError):
            Option("-o", "-p")
        with self.assertRaises(ValueError):
            Option("--out", "--output")

    def testNamesAllowI18N(self):
        self.assertEqual(Option("--entrée").long, "--entrée")

    def testMetavar(self):
        self.assertEqual(Option("-n", metavar="N").metavar, "N")
        self.assertIsNone(Option("-n").metavar)
        with self.assertRaises(ValueError):
            Option("-n", metavar=" ")

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Option("-n", descr=None)

    def testSubcommandKindRejected(self):
        with self.assertRaises(TypeError):
            Option("--command", kind=ValueKind.SUBCOMMAND)

    def testListOption(self):
        o = Option("-I", "--include", list=True, kind=ValueKind.INT32)
        self.assertEqual(o.value.itemsize, 4)


class TestFlag(TestCase):
    """Behavioral tests for Flag specifications."""

    def testDefaultsByKind(self):
        self.assertIs(Flag("-v").value, False)
        self.assertEqual(Flag("-v", kind=FlagKind.COUNT).value, 0)
        self.assertIsNone(Flag("-c", kind=FlagKind.CONFIG).value)

    def testNamesValidation(self):
        with self.assertRaises(ValueError):
            Flag("verbose")

    def testCallbackRules(self):
        with self.assertRaises(TypeError):
            Flag("-x", kind=FlagKind.CALLBACK)
        with self.assertRaises(TypeError):
            Flag("-x", callback=print)
        with self.assertRaises(TypeError):
            Flag("-x", kind=FlagKind.CALLBACK, callback="print")
        self.assertIs(Flag("-x", kind=FlagKind.CALLBACK, callback=print).callback, print)

    def testKindMustBeFlagKind(self):
        with self.assertRaises(TypeError):
            Flag("-x", kind=ValueKind.BOOL)

    def testHelpFlag(self):
        h = help_flag()
        self.assertEqual(h.names, ("-h", "--help"))
        self.assertTrue(h.exit)
        self.assertIs(h.kind, FlagKind.BOOL)
        self.assertIs(help_flag(config=True).kind, FlagKind.CONFIG)

    def testHelpFlagSharedSlot(self):
        slot = Slot()
        self.assertIs(help_flag(slot, config=True).slot, slot)


class TestPayloads(TestCase):
    """Behavioral tests for ChoiceSet, SubcommandSet and index lookups."""

    def testChoiceSetRejectsDuplicates(self):
        with self.assertRaises(ValueError):
            ChoiceSet("a", "a")
        with self.assertRaises(ValueError):
            ChoiceSet("a", "A", insensitive=True)
        self.assertEqual(len(ChoiceSet("a", "A")), 2)

    def testChoiceSetRejectsEmpty(self):
        with self.assertRaises(TypeError):
            ChoiceSet()

    def testChoiceValueMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Choice("")

    def testSubcommandNameRules(self):
        with self.assertRaises(ValueError):
            Subcommand("-init", Schema())
        with self.assertRaises(TypeError):
            Subcommand("init", object())

    def testSubcommandSetRejectsDuplicates(self):
        with self.assertRaises(ValueError):
            SubcommandSet(Subcommand("init", Schema()), Subcommand("init", Schema()))

    def testSubcommandSetFind(self):
        init = Subcommand("init", Schema())
        subcommands = SubcommandSet(init, Subcommand("add", Schema()))
        self.assertIs(subcommands.find("init"), init)
        self.assertIsNone(subcommands.find("remove"))

    def testChoiceIndex(self):
        choices = ChoiceSet("a", "b", "c")
        self.assertEqual(choice_index(choices, choices[2]), 2)
        self.assertIsNone(choice_index(choices, Choice("b")))

    def testSubcommandIndex(self):
        add = Subcommand("add", Schema())
        subcommands = SubcommandSet(Subcommand("init", Schema()), add)
        self.assertEqual(subcommand_index(subcommands, add), 1)
        self.assertIsNone(subcommand_index(subcommands, Subcommand("add", Schema())))

    def testIndexRejectsWrongContainers(self):
        with self.assertRaises(TypeError):
            choice_index(("a",), "a")
        with self.assertRaises(TypeError):
            subcommand_index((), None)


if __name__ == "__main__":
    unittest.main()

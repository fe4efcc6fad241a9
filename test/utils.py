"""
Tests for the shared utilities.

This module verifies the guarantees the other layers rely on:
- The Unset sentinel is a falsey singleton, distinct from None, and final.
- coalesce() replaces only Unset.
- rename() renames callables in both of its forms.
- mirror() exposes private state read-only, freezing builtin containers only.
"""
import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from schemargs.lists import TypedList
from schemargs.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(Unset)
        self.assertEqual(bool(Unset), False)

    def testNotEqualToNoneOrFalse(self) -> None:
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnionInIsinstance(self) -> None:
        """
        `str | Unset` behaves like a type union in isinstance checks.
        """
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))
        self.assertTrue(isinstance(Unset, Unset | str))

    def testCopyPreservesSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class CoalesceTest(TestCase):

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalseyValues(self) -> None:
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class RenameTest(TestCase):

    def testDecorator(self) -> None:
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")
        self.assertEqual(function.__qualname__, "decorated")

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("name")("not callable")


class MirrorTest(TestCase):

    class Holder:
        items = mirror("items")
        table = mirror("table")
        tags = mirror("tags")
        sequence = mirror("sequence")

        def __init__(self):
            self._items = [1, [2, 3]]
            self._table = {"a": [1]}
            self._tags = {"x"}
            self._sequence = TypedList(8)

    def testFreezesBuiltinContainers(self) -> None:
        holder = self.Holder()
        self.assertEqual(holder.items, (1, (2, 3)))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.table["a"], (1,))
        self.assertIsInstance(holder.tags, frozenset)

    def testKeepsUserTypes(self) -> None:
        holder = self.Holder()
        self.assertIs(holder.sequence, holder._sequence)

    def testReadOnly(self) -> None:
        holder = self.Holder()
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()

"""
Schemargs typed lists.

TypedList is the accumulator bound to list-valued positionals and options. It
keeps the shape of a growable array: an element size, a count and a capacity
that starts at zero, becomes 8 on the first append and doubles whenever it is
exhausted. The element size is declared up front (TypedList.of(kind) derives
it from a ValueKind) and the matcher refuses to append to a list whose element
size disagrees with the argument's kind.
"""
from collections.abc import Sequence

from .values import ValueKind

INITIAL_CAPACITY = 8


class TypedList(Sequence):
    """
    Homogeneous, append-only sequence with a fixed element size.

    Parameters
    - itemsize: positive integer, byte size of one element.
    - kind: optional ValueKind the list is meant to hold (informational; the
      element-size check is what the matcher enforces).

    Behavior
    - Reading works like a tuple: len(), indexing, slicing, iteration, `in`.
    - append() grows the storage geometrically and never shrinks it.
    - release() drops the storage and resets count and capacity to zero; it is
      safe to call repeatedly.
    """

    __slots__ = ("_items", "_itemsize", "_kind", "_count")

    def __init__(self, itemsize, /, kind=None):
        if not isinstance(itemsize, int) or isinstance(itemsize, bool):
            raise TypeError("typed-list 'itemsize' must be an integer")
        if itemsize < 1:
            raise ValueError("typed-list 'itemsize' must be a positive integer")
        if kind is not None and not isinstance(kind, ValueKind):
            raise TypeError("typed-list 'kind' must be a value kind")
        self._items = []
        self._itemsize = itemsize
        self._kind = kind
        self._count = 0

    @classmethod
    def of(cls, kind, /, itemsize=None):
        """
        Build an empty list for values of kind.

        CUSTOM lists have no implied size and must pass itemsize.
        """
        if not isinstance(kind, ValueKind):
            raise TypeError("TypedList.of() argument must be a value kind")
        if kind is ValueKind.SUBCOMMAND:
            raise TypeError("subcommand values cannot be collected in a list")
        if kind.itemsize is None and itemsize is None:
            raise TypeError("TypedList.of() requires an 'itemsize' for %s lists" % kind.label)
        return cls(kind.itemsize if itemsize is None else itemsize, kind=kind)

    @property
    def itemsize(self):
        return self._itemsize

    @property
    def kind(self):
        return self._kind

    @property
    def count(self):
        return self._count

    @property
    def capacity(self):
        return len(self._items)

    def append(self, item, /):
        if self._count == len(self._items):
            self._items.extend([None] * (len(self._items) or INITIAL_CAPACITY))
        self._items[self._count] = item
        self._count += 1

    def release(self):
        self._items = []
        self._count = 0

    def __len__(self):
        return self._count

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._items[:self._count][index])
        if not isinstance(index, int):
            raise TypeError("typed-list indices must be integers or slices")
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError("typed-list index out of range")
        return self._items[index]

    def __eq__(self, other):
        if isinstance(other, TypedList):
            return self._itemsize == other._itemsize and tuple(self) == tuple(other)
        if isinstance(other, list | tuple):
            return tuple(self) == tuple(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return "typed-list(itemsize=%d, count=%d, capacity=%d, items=%r)" % (
            self._itemsize, self._count, self.capacity, list(self)
        )


def release_list(list, /):
    """
    Release the storage of a TypedList; count and capacity become zero.

    Idempotent: releasing an already released list does nothing. Strings held
    by the list stay owned by the schema ledger that duplicated them.
    """
    if not isinstance(list, TypedList):
        raise TypeError("release_list() argument must be a typed-list")
    list.release()


__all__ = (
    "TypedList",
    "release_list",
)

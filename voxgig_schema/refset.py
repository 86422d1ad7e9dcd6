# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

from typing import *

from .reference import Reference, isref


class RefSet:
    """
    A set of accepted (or rejected) values. Literal values are compared
    directly; references are kept apart, by key, and resolved against the
    current validation before comparing.
    """

    def __init__(self) -> None:
        self.list: List[Any] = []
        self.refs: Dict[str, Reference] = {}

    def __len__(self):
        return len(self.list) + len(self.refs)

    @property
    def size(self) -> int:
        return len(self)

    def describe(self) -> List[Any]:
        return self.list[:] + [ref.describe() for ref in self.refs.values()]

    def tolist(self) -> List[Any]:
        return self.list[:] + list(self.refs.values())

    def add(self, value: Any) -> None:
        if isref(value):
            self.refs[value.key] = value
        elif value not in self.list:
            self.list.append(value)

    def delete(self, value: Any) -> None:
        if isref(value):
            self.refs.pop(value.key, None)
        elif value in self.list:
            self.list.remove(value)

    def has(self, value: Any, resolve: Callable[[Any], Any]) -> bool:
        if value in self.list:
            return True

        for ref in self.refs.values():
            if resolve(ref) == value:
                return True

        return False

    def clone(self) -> 'RefSet':
        next = RefSet()
        next.list = self.list[:]
        next.refs = dict(self.refs)
        return next

    def merge(self, newitems: 'RefSet', removeitems: 'RefSet') -> 'RefSet':
        "Copy of this set, with newitems added then removeitems deleted."
        next = self.clone()

        for value in newitems.tolist():
            next.add(value)

        for value in removeitems.tolist():
            next.delete(value)

        return next

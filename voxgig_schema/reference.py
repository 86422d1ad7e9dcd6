# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

from typing import *

from .errors import SchemaUsageError
from .utility import UNDEF, getpath, isabsent


# Key prefixes.
S_CONTEXT = '$'
S_VALUE = '.'


class Reference:
    """
    A deferred pointer to another value, resolved only during cast or
    validate. The key selects where to look:

    - `$name.path`: the `context` option.
    - `.path`: the value under validation (`.` alone is the value itself).
    - `name.path`: a sibling, read from the `parent` option.
    """

    def __init__(self, key: str, options: Optional[Dict[str, Any]] = None) -> None:
        if not isinstance(key, str):
            raise SchemaUsageError('ref must be a string, got: ' + repr(key))

        self.key = key.strip()

        if '' == self.key:
            raise SchemaUsageError('ref must be a non-empty string')

        self.iscontext = self.key[0] == S_CONTEXT
        self.isvalue = self.key[0] == S_VALUE
        self.issibling = not self.iscontext and not self.isvalue

        prefix = S_CONTEXT if self.iscontext else S_VALUE if self.isvalue else ''
        self.path = self.key[len(prefix):]
        self.map = (options or {}).get('map')

    def getvalue(self, value: Any = UNDEF, parent: Any = UNDEF, context: Any = UNDEF) -> Any:
        result = context if self.iscontext else value if self.isvalue else parent

        if self.path:
            result = getpath({} if isabsent(result) else result, self.path)

        if self.map is not None:
            result = self.map(result)

        return result

    def cast(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> Any:
        options = options or {}
        return self.getvalue(value, options.get('parent', UNDEF), options.get('context', UNDEF))

    def resolve(self, *_args) -> 'Reference':
        return self

    def describe(self) -> Dict[str, Any]:
        return {'type': 'ref', 'key': self.key}

    def __eq__(self, other):
        return isinstance(other, Reference) and self.key == other.key

    def __hash__(self):
        return hash(('ref', self.key))

    def __str__(self):
        return f'Ref({self.key})'

    __repr__ = __str__


def ref(key: str, options: Optional[Dict[str, Any]] = None) -> Reference:
    "Create a reference to a sibling (`name`), context (`$name`) or value (`.name`)."
    return Reference(key, options)


def isref(val: Any) -> bool:
    "Value is a reference."
    return isinstance(val, Reference)

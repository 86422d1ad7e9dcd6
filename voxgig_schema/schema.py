# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

from typing import *
from abc import ABC, abstractmethod


class Schema(ABC):
    """
    The interface of a schema node. Schemas are values: every mutator
    returns a new schema, so a schema nested inside another is shared,
    never copied.
    """

    type: str = 'mixed'

    def __deepcopy__(self, memo):
        return self

    @abstractmethod
    def clone(self) -> 'Schema':
        ...

    @abstractmethod
    def concat(self, schema: 'Schema') -> 'Schema':
        ...

    @abstractmethod
    def resolve(self, options: Dict[str, Any]) -> 'Schema':
        ...

    @abstractmethod
    def cast(self, value: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        ...

    @abstractmethod
    async def validate(self, value: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        ...

    @abstractmethod
    def validatesync(self, value: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        ...

    @abstractmethod
    def describe(self) -> Dict[str, Any]:
        ...


def isschema(val: Any) -> bool:
    "Value is a schema node."
    return isinstance(val, Schema)

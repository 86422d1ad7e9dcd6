# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

"""Exceptions raised by the schema engine."""

from typing import *
from string import Template

from .utility import UNDEF, printvalue, toarray


class SchemaError(Exception):
    """Base exception for schema related errors."""
    pass


class SchemaUsageError(SchemaError, TypeError):
    """
    Exception raised when a schema is built or called incorrectly.
    These are programming mistakes, never validation failures.
    """
    pass


class CoercionError(SchemaError, TypeError):
    """Exception raised when a cast result does not satisfy the schema type."""

    def __init__(self, message: str, path: Optional[str] = None,
                 value: Any = UNDEF, result: Any = UNDEF) -> None:
        super().__init__(message)
        self.path = path
        self.value = value
        self.result = result


class ValidationError(SchemaError, ValueError):
    """
    Exception raised when a value fails one or more schema tests.

    A ValidationError built from other ValidationErrors aggregates them:
    `errors` lists every message and `inner` every leaf error.
    """

    def __init__(self, errors: Any, value: Any = UNDEF,
                 path: Optional[str] = None, type: Optional[str] = None) -> None:
        self.value = value
        self.path = path
        self.type = type
        self.params: Dict[str, Any] = {}
        self.errors: List[str] = []
        self.inner: List['ValidationError'] = []

        for err in toarray(errors):
            if isinstance(err, ValidationError):
                self.errors.extend(err.errors)
                self.inner.extend(err.inner if err.inner else [err])
            else:
                self.errors.append(err)

        self.message = (
            f'{len(self.errors)} errors occurred' if 1 < len(self.errors)
            else (self.errors[0] if self.errors else '')
        )
        super().__init__(self.message)

    def entries(self) -> List[Dict[str, Any]]:
        "The individual failures, in order, as plain dicts."
        return [
            {
                'path': err.path,
                'message': err.message,
                'params': err.params,
                'type': err.type,
                'value': err.value,
            }
            for err in (self.inner or [self])
        ]

    @staticmethod
    def formaterror(message: Any, params: Dict[str, Any]) -> str:
        """
        Render a message. Callables receive the params; strings are
        templates with `${name}` placeholders, filled with printed values.
        """
        path = params.get('label') or params.get('path') or 'this'
        params = {**params, 'path': path}

        if callable(message):
            return message(params)

        if isinstance(message, str):
            printed = {key: printvalue(val) for key, val in params.items()}
            return Template(message).safe_substitute(printed)

        return str(message)

# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

from typing import *
import logging

from .errors import SchemaUsageError
from .reference import Reference
from .schema import Schema, isschema
from .utility import UNDEF, isabsent


logger = logging.getLogger(__name__)


# Marks an `is_` argument that was not given (None is a valid match).
NOTGIVEN = object()


class Condition:
    """
    A deferred rewrite of a schema. When resolved, the references are read
    from the resolve options and passed to the branch function, which
    returns the schema to use (or None to keep the schema unchanged).

    The branch can be given directly, as `fn(values, schema, options)`, or
    built from `is_`, `then` and `otherwise`:

    - `is_`: a value every dependency must equal, or a predicate taking the
      dependency values as arguments.
    - `then` / `otherwise`: a schema to concat, or a function taking the
      current schema and returning a new one.
    """

    def __init__(
        self,
        refs: List[Reference],            # Dependencies, in order.
        branch: Optional[Callable] = None,  # Custom branch function.
        is_: Any = NOTGIVEN,              # Value or predicate to match.
        then: Any = None,                 # Branch when matched.
        otherwise: Any = None,            # Branch when not matched.
    ) -> None:
        self.refs = refs

        if branch is not None:
            if not callable(branch):
                raise SchemaUsageError('`when()` branch must be a function')
            self.fn = branch
            return

        if is_ is NOTGIVEN:
            raise SchemaUsageError('`is_` is required for `when()` conditions')

        if then is None and otherwise is None:
            raise SchemaUsageError(
                'either `then` or `otherwise` is required for `when()` conditions')

        if callable(is_):
            check = is_
        else:
            def check(*values):
                return all(value == is_ for value in values)

        def fn(values, schema, options):
            chosen = then if check(*values) else otherwise

            if chosen is None:
                return None

            if isschema(chosen):
                return schema.concat(chosen.resolve(options))

            return chosen(schema)

        self.fn = fn

    def resolve(self, base: Schema, options: Dict[str, Any]) -> Schema:
        values = [
            ref.getvalue(
                options.get('value', UNDEF),
                options.get('parent', UNDEF),
                options.get('context', UNDEF),
            )
            for ref in self.refs
        ]

        schema = self.fn(values, base, options)

        if isabsent(schema) or schema is base:
            return base

        if not isschema(schema):
            raise SchemaUsageError('conditions must return a schema object')

        logger.debug('condition on %s selected a new %s schema',
                     [ref.key for ref in self.refs], schema.type)

        return schema.resolve(options)

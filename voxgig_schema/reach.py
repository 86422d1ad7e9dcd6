# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

# Find the schema for a path inside a container schema.
#
# Container schemas expose their children as attributes: `fields`, a map
# of key to schema, and `innertype`, the schema of every list element.
# Conditions are resolved at each step against the value found so far.

from typing import *

from .errors import SchemaUsageError
from .schema import Schema
from .utility import UNDEF, getprop, isabsent, splitpath


def getin(schema: Schema, path: Any, value: Any = UNDEF, context: Any = UNDEF) -> Dict[str, Any]:
    """
    Walk path through schema and value together. Returns a map with
    the schema at the path, the parent value holding it, and the last
    path part (its key in the parent).
    """
    parent = UNDEF
    lastpart = path
    lastpartdebug = ''

    if not path:
        return {'parent': parent, 'parentpath': path, 'schema': schema}

    if isabsent(context):
        context = value

    for part, isindex in splitpath(path):
        schema = schema.resolve({'context': context, 'parent': parent, 'value': value})

        innertype = getattr(schema, 'innertype', None)
        if innertype is not None:
            idx = int(part) if isindex else 0

            if isinstance(value, (list, tuple)) and idx >= len(value):
                raise SchemaUsageError(
                    f'reach cannot resolve an array item at index: {part}, '
                    f'in the path: {path}, because there is no value at that index.')

            parent = value
            value = getprop(value, idx)
            schema = innertype

        if not isindex:
            fields = getattr(schema, 'fields', None)

            if not fields or part not in fields:
                raise SchemaUsageError(
                    f'The schema does not contain the path: {path}. '
                    f'(failed at: {lastpartdebug or "<root>"} which is a type: "{schema.type}")')

            parent = value
            value = getprop(value, part)
            schema = fields[part]

        lastpart = int(part) if isindex else part
        lastpartdebug = f'[{part}]' if isindex else '.' + part

    return {'schema': schema, 'parent': parent, 'parentpath': lastpart}


def reach(schema: Schema, path: Any, value: Any = UNDEF, context: Any = UNDEF) -> Schema:
    "The schema at path."
    return getin(schema, path, value, context)['schema']

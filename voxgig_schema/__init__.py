# voxgig_schema init

import logging

from .condition import Condition
from .errors import (
    CoercionError,
    SchemaError,
    SchemaUsageError,
    ValidationError,
)
from .locale import setlocale
from .mixed import (
    MixedSchema,
    SchemaBuilder,
    create,
    mixed,
    mutation,
)
from .reach import getin, reach
from .reference import Reference, isref, ref
from .refset import RefSet
from .schema import Schema, isschema
from .utility import UNDEF, printvalue
from .validation import TestConfig, TestContext


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    'CoercionError',
    'Condition',
    'MixedSchema',
    'RefSet',
    'Reference',
    'Schema',
    'SchemaBuilder',
    'SchemaError',
    'SchemaUsageError',
    'TestConfig',
    'TestContext',
    'UNDEF',
    'ValidationError',
    'create',
    'getin',
    'isref',
    'isschema',
    'mixed',
    'mutation',
    'printvalue',
    'reach',
    'ref',
    'setlocale',
]

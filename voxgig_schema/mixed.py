# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Mixed Schema
# ============
#
# The base schema node. A mixed schema accepts any value, and carries
# everything the concrete schema kinds share:
#
# - cast: transform a raw value, substituting the default if undefined.
# - validate, validatesync: cast, then run the schema tests.
# - test: add a validation rule (named rules may stack or replace).
# - when: rewrite the schema from sibling or context values at validate time.
# - oneof, notoneof: accept or reject listed values (or references).
# - concat: merge another schema over this one.
# - describe: a plain data summary of the schema.
#
# Schemas are values. Every mutation returns a new schema, leaving the
# original unchanged, so schemas can be shared freely. To avoid a clone at
# each step of a long chain, use withmutation, which applies a batch of
# mutations to a single draft copy.


from typing import *
import dataclasses
import functools
import logging

from . import locale
from .condition import NOTGIVEN, Condition
from .errors import CoercionError, SchemaUsageError, ValidationError
from .reach import getin
from .reference import Reference
from .refset import RefSet
from .runtests import runtests, runtestsasync
from .schema import Schema
from .utility import UNDEF, clone as deepclone, getprop, prependdeep, printvalue, toarray
from .validation import TestConfig, Validation, createvalidation


logger = logging.getLogger(__name__)

S_mixed = 'mixed'

DEFAULT_SPEC = {
    'nullable': False,     # Accept None.
    'default': UNDEF,      # Value (or factory) used when the value is undefined.
    'hasdefault': False,   # A default was set explicitly (even UNDEF).
    'abortearly': True,    # Stop at the first failed test.
    'strict': False,       # Validate without casting first.
    'strip': False,        # Drop the value from a containing object.
    'recursive': True,     # Validate nested values.
    'label': None,         # Name used in messages, instead of the path.
    'meta': None,          # Custom data, not used by validation.
}


def mutation(fn):
    """
    Make a schema method a mutation. The method body changes the schema it
    is given in place. Called on a schema, the body runs on a clone, and the
    clone is returned. A SchemaBuilder runs the body on its draft instead.
    """
    @functools.wraps(fn)
    def apply(self, *args, **kwargs):
        next = self.clone()
        fn(next, *args, **kwargs)
        return next

    apply.mutate = fn
    return apply


class SchemaBuilder:
    """
    A single draft copy of a schema that mutations change in place. Every
    mutation method of the schema is available on the builder, and returns
    the builder. Called without arguments, `meta()` and `default()` read the
    draft instead. `build()` returns the finished schema; the builder cannot
    be changed after that.
    """

    def __init__(self, schema: 'MixedSchema') -> None:
        self._draft = schema.clone()
        self._built = False

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        method = getattr(type(self._draft), name, None)
        mutate = getattr(method, 'mutate', None)

        if mutate is None:
            raise AttributeError(
                f'{type(self._draft).__name__}.{name} is not a schema mutation')

        def apply(*args, **kwargs):
            if self._built:
                raise SchemaUsageError('This schema builder has already been built')

            # Getter form (e.g. meta(), default()) reads the draft.
            if not args and not kwargs and getattr(method, 'getter', False):
                return method(self._draft)

            mutate(self._draft, *args, **kwargs)
            return self

        return apply

    def withmutation(self, fn: Callable[['SchemaBuilder'], Any]) -> 'SchemaBuilder':
        fn(self)
        return self

    def build(self) -> 'MixedSchema':
        self._built = True
        logger.debug('built %s schema with %d tests', self._draft.type, len(self._draft.tests))
        return self._draft


def create(**options) -> 'MixedSchema':
    return MixedSchema(**options)


def mixed(**options) -> 'MixedSchema':
    "A schema that accepts any value."
    return MixedSchema(**options)


class MixedSchema(Schema):

    def __init__(
        self,
        type: Optional[str] = None,              # Schema kind tag.
        spec: Optional[Dict[str, Any]] = None,   # Overrides of DEFAULT_SPEC.
    ) -> None:
        self.type = type or S_mixed
        self.spec = {**DEFAULT_SPEC, **(spec or {})}

        self.deps: List[str] = []
        self.tests: List[Validation] = []
        self.transforms: List[Callable[[Any, Any], Any]] = []
        self.conditions: List[Condition] = []

        self._exclusive: Dict[str, bool] = {}
        self._whitelist = RefSet()
        self._blacklist = RefSet()

        self._typeerror: Optional[Validation] = None
        self._whitelisterror: Optional[Validation] = None
        self._blacklisterror: Optional[Validation] = None

        self._settypeerror(UNDEF)

    def _typecheck(self, value: Any) -> bool:
        return True

    def _ispresent(self, value: Any) -> bool:
        return value is not None and value is not UNDEF

    def istype(self, value: Any) -> bool:
        if self.spec['nullable'] and value is None:
            return True
        return self._typecheck(value)

    def clone(self) -> 'MixedSchema':
        "Copy this schema. Functions and nested schemas are shared, not copied."
        next = type(self).__new__(type(self))
        next.__dict__.update(deepclone(vars(self), {id(self): next}))
        return next

    def withmutation(self, fn: Callable[[SchemaBuilder], Any]) -> 'MixedSchema':
        """
        Apply a batch of mutations to one draft copy of this schema.
        fn receives a SchemaBuilder; the built schema is returned.
        """
        builder = SchemaBuilder(self)
        fn(builder)
        return builder.build()

    @mutation
    def label(self, label: str):
        self.spec['label'] = label

    def meta(self, obj: Any = UNDEF):
        "Add custom meta data, or read it when called without arguments."
        if obj is UNDEF:
            return self.spec['meta']
        return self._setmeta(obj)

    @mutation
    def _setmeta(self, obj):
        self.spec['meta'] = {**(self.spec['meta'] or {}), **obj}

    meta.mutate = _setmeta.mutate
    meta.getter = True

    def concat(self, schema: 'MixedSchema') -> 'MixedSchema':
        """
        Merge schema over this one. Settings made on schema win, lists of
        transforms and conditions are joined, and schema's tests are added
        to this schema's tests with the usual replacement rules.
        """
        if schema is None or schema is self:
            return self

        if schema.type != self.type and self.type != S_mixed:
            raise SchemaUsageError(
                f"You cannot `concat()` schema's of different types: "
                f"{self.type} and {schema.type}")

        next = schema.clone()
        prependdeep(vars(next), vars(self))

        # An undefined default on schema must not hide ours, unless set on purpose.
        if schema.spec['hasdefault']:
            next.spec['default'] = schema.spec['default']
        next.spec['hasdefault'] = self.spec['hasdefault'] or schema.spec['hasdefault']

        next.tests = self.tests[:]
        next._exclusive = dict(self._exclusive)

        # schema takes precedence in case of conflicts.
        next._whitelist = self._whitelist.merge(schema._whitelist, schema._blacklist)
        next._blacklist = self._blacklist.merge(schema._blacklist, schema._whitelist)

        def retest(builder):
            for validation in schema.tests:
                builder.test(validation.options)

        logger.debug('concat %s schema with %d tests onto %s schema with %d tests',
                     schema.type, len(schema.tests), self.type, len(self.tests))

        return next.withmutation(retest)

    def resolve(self, options: Optional[Dict[str, Any]] = None) -> 'MixedSchema':
        """
        Apply pending conditions, given the `value`, `parent` and `context`
        options. Resolution is repeated until no conditions remain.
        """
        schema = self

        if schema.conditions:
            conditions = schema.conditions

            schema = schema.clone()
            schema.conditions = []

            options = options or {}
            for condition in conditions:
                schema = condition.resolve(schema, options)

            schema = schema.resolve(options)

        return schema

    def cast(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> Any:
        """
        Transform value to the schema type. Unless the `assert` option is
        False, a result that is not of the schema type raises CoercionError.
        """
        options = options or {}
        resolved = self.resolve({**options, 'value': value})

        result = resolved._cast(value, options)

        if (value is not UNDEF and
                options.get('assert') is not False and
                resolved.istype(result) is not True):
            formattedvalue = printvalue(value)
            formattedresult = printvalue(result)
            path = options.get('path')
            raise CoercionError(
                f'The value of {path or "field"} could not be cast to a value '
                f'that satisfies the schema type: "{resolved.type}". \n\n'
                f'attempted value: {formattedvalue} \n' +
                (f'result of cast: {formattedresult}'
                 if formattedresult != formattedvalue else ''),
                path, value, result)

        return result

    def _cast(self, rawvalue: Any, _options: Dict[str, Any]) -> Any:
        value = rawvalue

        if rawvalue is not UNDEF:
            for fn in self.transforms:
                value = fn(value, rawvalue)

        if value is UNDEF and self.spec['default'] is not UNDEF:
            value = self.default()

        return value

    def _validateargs(self, value, options, sync):
        strict = options.get('strict', self.spec['strict'])
        abortearly = options.get('abortearly', self.spec['abortearly'])
        originalvalue = options.get('originalvalue', value)

        if not strict:
            value = self._cast(value, {**options, 'assert': False})

        # Value is cast, the tests check it meets the schema requirements.
        args = {
            'value': value,
            'path': options.get('path'),
            'options': options,
            'originalvalue': originalvalue,
            'schema': self,
            'label': self.spec['label'],
            'sync': sync,
            'from': options.get('from', []),
        }

        initial = [
            test for test in (self._typeerror, self._whitelisterror, self._blacklisterror)
            if test is not None
        ]

        return value, args, abortearly, initial

    def _validatesync(self, value, options):
        value, args, abortearly, initial = self._validateargs(value, options, True)
        path = args['path']

        err = runtests(initial, args, value, path, abortearly)

        if err is None:
            err = runtests(self.tests, args, value, path, abortearly)

        if err is not None:
            raise err

        return value

    async def _validateasync(self, value, options):
        value, args, abortearly, initial = self._validateargs(value, options, False)
        path = args['path']

        err = await runtestsasync(initial, args, value, path, abortearly)

        if err is None:
            err = await runtestsasync(self.tests, args, value, path, abortearly)

        if err is not None:
            raise err

        return value

    async def validate(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> Any:
        """
        Cast and test value, returning the cast value. Tests may be
        asynchronous. Failures raise ValidationError: the first one, or
        all of them together when the `abortearly` option is False.
        """
        options = options or {}
        schema = self.resolve({**options, 'value': value})
        return await schema._validateasync(value, options)

    def validatesync(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> Any:
        "As validate, but every test must complete synchronously."
        options = options or {}
        schema = self.resolve({**options, 'value': value})
        return schema._validatesync(value, options)

    async def isvalid(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> bool:
        try:
            await self.validate(value, options)
        except ValidationError:
            return False
        return True

    def isvalidsync(self, value: Any = UNDEF, options: Optional[Dict[str, Any]] = None) -> bool:
        try:
            self.validatesync(value, options)
        except ValidationError:
            return False
        return True

    async def validateat(self, path: Any, value: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        "Validate only the part of value at path, against the schema at path."
        options = options or {}
        found = getin(self, path, value, options.get('context', UNDEF))
        return await found['schema'].validate(
            getprop(found['parent'], found['parentpath']),
            {**options, 'parent': found['parent'], 'path': path})

    def validatesyncat(self, path: Any, value: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        options = options or {}
        found = getin(self, path, value, options.get('context', UNDEF))
        return found['schema'].validatesync(
            getprop(found['parent'], found['parentpath']),
            {**options, 'parent': found['parent'], 'path': path})

    def getdefault(self, options: Optional[Dict[str, Any]] = None) -> Any:
        return self.resolve(options or {}).default()

    def default(self, *args):
        """
        Set the default value, used when the value is undefined. A callable
        is a factory, called each time. Without arguments, return the default
        (a fresh copy, or the factory result).
        """
        if not args:
            value = self.spec['default']

            if value is None or value is UNDEF:
                return value

            return value() if callable(value) else deepclone(value)

        return self._setdefault(*args)

    @mutation
    def _setdefault(self, value):
        self.spec['hasdefault'] = True
        self.spec['default'] = value

    default.mutate = _setdefault.mutate
    default.getter = True

    @mutation
    def strict(self, isstrict: bool = True):
        self.spec['strict'] = isstrict

    @mutation
    def required(self, message: Any = UNDEF):
        self._addtest(TestConfig(
            name='required',
            exclusive=True,
            message=_message('required', message),
            test=_testrequired,
        ))

    @mutation
    def notrequired(self):
        self.tests = [test for test in self.tests if test.name != 'required']

    optional = notrequired

    @mutation
    def defined(self, message: Any = UNDEF):
        self._addtest(TestConfig(
            name='defined',
            exclusive=True,
            message=_message('defined', message),
            test=_testdefined,
        ))

    @mutation
    def nullable(self, isnullable: bool = True):
        self.spec['nullable'] = isnullable

    @mutation
    def transform(self, fn: Callable[[Any, Any], Any]):
        "Add a transform, called as fn(value, originalvalue) during cast."
        self.transforms.append(fn)

    @mutation
    def test(
        self,
        config: Any = None,
        *,
        name: Optional[str] = None,
        message: Any = None,
        params: Optional[Dict[str, Any]] = None,
        exclusive: bool = False,
        test: Optional[Callable[..., Any]] = None,
    ):
        """
        Add a test to the queue of tests. Pass a TestConfig, a test function,
        or the config fields as keywords.

        - exclusive tests replace any existing tests of the same name.
        - non-exclusive tests of the same name can be stacked.

        If a non-exclusive test is added to a schema with an exclusive test
        of the same name, the exclusive test is removed and further tests of
        the same name will be stacked. If an exclusive test is added to a
        schema with non-exclusive tests of the same name, those are removed,
        and further tests of the same name replace each other. Adding the
        same test function twice under one name keeps only one.
        """
        if isinstance(config, TestConfig):
            opts = dataclasses.replace(config, params=dict(config.params))
        elif config is None or callable(config):
            opts = TestConfig(
                test=test if config is None else config,
                name=name,
                message=message,
                params=dict(params or {}),
                exclusive=exclusive,
            )
        else:
            raise SchemaUsageError(
                '`test()` expects a test function or a TestConfig, got: ' + repr(config))

        self._addtest(opts)

    def _addtest(self, opts: TestConfig) -> None:
        if opts.message is None:
            opts.message = locale.MIXED['default']

        if not callable(opts.test):
            raise SchemaUsageError('`test` is a required parameter')

        if opts.exclusive and not opts.name:
            raise SchemaUsageError(
                'Exclusive tests must provide a unique `name` identifying the test')

        validation = createvalidation(opts)

        isexclusive = opts.exclusive or (
            opts.name is not None and self._exclusive.get(opts.name) is True)

        if opts.name:
            self._exclusive[opts.name] = bool(opts.exclusive)

        self.tests = [
            test for test in self.tests
            if not (test.options.name == opts.name and
                    (isexclusive or test.options.test is opts.test))
        ]

        self.tests.append(validation)

    @mutation
    def when(
        self,
        keys: Any,
        branch: Optional[Callable] = None,
        *,
        is_: Any = NOTGIVEN,
        then: Any = None,
        otherwise: Any = None,
    ):
        """
        Add a condition on the values at keys (sibling names, `$context`
        paths, or `.` for the value itself). Either pass a branch function
        `fn(values, schema, options)` returning a schema, or `is_` with
        `then` and/or `otherwise`.
        """
        deps = [Reference(key) for key in toarray(keys)]

        for dep in deps:
            if dep.issibling:
                self.deps.append(dep.key)

        self.conditions.append(
            Condition(deps, branch, is_=is_, then=then, otherwise=otherwise))

    @mutation
    def typeerror(self, message: Any = UNDEF):
        "Set the message used when the value is not of the schema type."
        self._settypeerror(message)

    def _settypeerror(self, message):
        self._typeerror = createvalidation(TestConfig(
            name='typeerror',
            message=_message('nottype', message),
            test=_testtype,
        ))

    @mutation
    def oneof(self, enums: Iterable[Any], message: Any = UNDEF):
        "Only accept the listed values. References are resolved at validate time."
        for val in enums:
            self._whitelist.add(val)
            self._blacklist.delete(val)

        self._whitelisterror = createvalidation(TestConfig(
            name='oneof',
            message=_message('oneof', message),
            test=_testwhitelist,
        ))

    equals = oneof

    @mutation
    def notoneof(self, enums: Iterable[Any], message: Any = UNDEF):
        "Reject the listed values. References are resolved at validate time."
        for val in enums:
            self._blacklist.add(val)
            self._whitelist.delete(val)

        self._blacklisterror = createvalidation(TestConfig(
            name='notoneof',
            message=_message('notoneof', message),
            test=_testblacklist,
        ))

    nope = notoneof

    @mutation
    def strip(self, strip: bool = True):
        self.spec['strip'] = strip

    def describe(self) -> Dict[str, Any]:
        "Summarise the schema as plain data. Tests are listed once per name."
        seen = set()
        tests = []

        for test in self.tests:
            if test.name in seen:
                continue
            seen.add(test.name)
            tests.append({'name': test.name, 'params': deepclone(test.options.params)})

        return {
            'type': self.type,
            'label': self.spec['label'],
            'meta': deepclone(self.spec['meta']),
            'oneof': self._whitelist.describe(),
            'notoneof': self._blacklist.describe(),
            'tests': tests,
        }


def _message(key, message):
    return locale.MIXED[key] if message is UNDEF else message


# Test functions for the built in tests. These are module functions so that
# adding the same built in test again is recognised as a duplicate.

def _testrequired(value, ctx):
    return ctx.schema._ispresent(value)


def _testdefined(value, ctx):
    return value is not UNDEF


def _testtype(value, ctx):
    if value is not UNDEF and not ctx.schema.istype(value):
        return ctx.createerror(params={'type': ctx.schema.type})
    return True


def _testwhitelist(value, ctx):
    if value is UNDEF:
        return True

    valids = ctx.schema._whitelist
    if valids.has(value, ctx.resolve):
        return True

    return ctx.createerror(params={
        'values': ', '.join(printvalue(val) for val in valids.tolist()),
    })


def _testblacklist(value, ctx):
    invalids = ctx.schema._blacklist
    if invalids.has(value, ctx.resolve):
        return ctx.createerror(params={
            'values': ', '.join(printvalue(val) for val in invalids.tolist()),
        })
    return True

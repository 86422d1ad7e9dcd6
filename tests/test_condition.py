# RUN: python -m unittest discover -s tests
# RUN-SOME: python -m unittest discover -s tests -k condition

import unittest

try:
    from .shapes import NumberSchema
except ImportError:
    from shapes import NumberSchema

from voxgig_schema import (
    UNDEF,
    Condition,
    SchemaUsageError,
    ValidationError,
    mixed,
    ref,
)


def names(schema):
    return [test.name for test in schema.tests]


class TestCondition(unittest.TestCase):

    def test_condition_is_then_otherwise(self):
        s0 = mixed().when('d', is_=1, then=mixed().required(), otherwise=mixed().oneof(['x']))

        r1 = s0.resolve({'parent': {'d': 1}})
        r2 = s0.resolve({'parent': {'d': 2}})

        self.assertEqual(['required'], names(r1))
        self.assertEqual([], r1.describe()['oneof'])
        self.assertEqual([], names(r2))
        self.assertEqual(['x'], r2.describe()['oneof'])

        # Resolution is repeatable and leaves the schema unchanged.
        self.assertEqual(r1.describe(), s0.resolve({'parent': {'d': 1}}).describe())
        self.assertEqual(1, len(s0.conditions))
        self.assertEqual([], names(s0))
        self.assertEqual([], r1.conditions)

    def test_condition_validate(self):
        s0 = mixed().when('d', is_=1, then=mixed().required())

        self.assertFalse(s0.isvalidsync(UNDEF, {'parent': {'d': 1}}))
        self.assertTrue(s0.isvalidsync(UNDEF, {'parent': {'d': 2}}))
        self.assertTrue(s0.isvalidsync(UNDEF))

    def test_condition_deps(self):
        s0 = mixed().when(['d', '$ctx', '.x', 'e.f'], lambda values, schema, options: schema)
        self.assertEqual(['d', 'e.f'], s0.deps)
        self.assertEqual(1, len(s0.conditions))
        self.assertEqual([], mixed().deps)

    def test_condition_predicate(self):
        s0 = mixed().when(['a', 'b'], is_=lambda a, b: a > b, then=mixed().required())

        self.assertEqual(['required'], names(s0.resolve({'parent': {'a': 2, 'b': 1}})))
        self.assertEqual([], names(s0.resolve({'parent': {'a': 1, 'b': 2}})))

    def test_condition_is_none(self):
        s0 = mixed().when('d', is_=None, then=mixed().required())

        self.assertEqual(['required'], names(s0.resolve({'parent': {'d': None}})))
        self.assertEqual([], names(s0.resolve({'parent': {}})))

    def test_condition_then_function(self):
        s0 = mixed().when('d', is_=True,
                          then=lambda schema: schema.label('on'),
                          otherwise=lambda schema: schema.label('off'))

        self.assertEqual('on', s0.resolve({'parent': {'d': True}}).spec['label'])
        self.assertEqual('off', s0.resolve({'parent': {'d': False}}).spec['label'])

    def test_condition_branch(self):
        seen = []

        def branch(values, schema, options):
            seen.append(values)
            if values[0] is UNDEF:
                return None
            return schema.label(str(values[0]))

        s0 = mixed().when(['d', '$mode'], branch)

        self.assertEqual('5', s0.resolve({'parent': {'d': 5}, 'context': {'mode': 'm'}}).spec['label'])
        self.assertEqual([5, 'm'], seen[0])

        self.assertIsNone(s0.resolve({}).spec['label'])

    def test_condition_nested(self):
        inner = mixed().when('e', is_=2, then=mixed().required())
        s0 = mixed().when('d', is_=1, then=inner)

        self.assertEqual(['required'], names(s0.resolve({'parent': {'d': 1, 'e': 2}})))
        self.assertEqual([], names(s0.resolve({'parent': {'d': 1, 'e': 3}})))
        self.assertEqual([], names(s0.resolve({'parent': {'d': 0, 'e': 2}})))

    def test_condition_stacked(self):
        s0 = mixed() \
            .when('a', is_=1, then=mixed().label('A')) \
            .when('b', is_=1, then=mixed().required())

        r0 = s0.resolve({'parent': {'a': 1, 'b': 1}})
        self.assertEqual('A', r0.spec['label'])
        self.assertEqual(['required'], names(r0))

    def test_condition_changes_type(self):
        s0 = mixed().when('kind', is_='n', then=NumberSchema())

        self.assertEqual(4.0, s0.validatesync('4', {'parent': {'kind': 'n'}}))
        self.assertEqual('4', s0.validatesync('4', {'parent': {'kind': 's'}}))

        with self.assertRaises(ValidationError):
            s0.validatesync('four', {'parent': {'kind': 'n'}})

    def test_condition_value(self):
        s0 = mixed().when('.', is_=lambda value: isinstance(value, str),
                          then=mixed().oneof(['ok']))

        self.assertEqual('ok', s0.validatesync('ok'))
        self.assertFalse(s0.isvalidsync('bad'))
        self.assertEqual(5, s0.validatesync(5))

        s1 = mixed().when('.size', is_=0, then=mixed().strip())
        self.assertTrue(s1.resolve({'value': {'size': 0}}).spec['strip'])
        self.assertFalse(s1.resolve({'value': {'size': 1}}).spec['strip'])

    def test_condition_context(self):
        s0 = mixed().when('$mode', is_='strict', then=mixed().required())

        self.assertFalse(s0.isvalidsync(UNDEF, {'context': {'mode': 'strict'}}))
        self.assertTrue(s0.isvalidsync(UNDEF, {'context': {'mode': 'loose'}}))
        self.assertTrue(s0.isvalidsync(UNDEF))

    def test_condition_getdefault(self):
        s0 = mixed().when('$flag', is_=True,
                          then=mixed().default(1),
                          otherwise=mixed().default(2))

        self.assertEqual(1, s0.getdefault({'context': {'flag': True}}))
        self.assertEqual(2, s0.getdefault({'context': {'flag': False}}))
        self.assertEqual(2, s0.cast())

    def test_condition_errors(self):
        with self.assertRaises(SchemaUsageError):
            mixed().when('d')

        with self.assertRaises(SchemaUsageError):
            mixed().when('d', is_=1)

        with self.assertRaises(SchemaUsageError):
            mixed().when('d', 'not a function')

        with self.assertRaises(SchemaUsageError):
            mixed().when('', is_=1, then=mixed())

        s0 = mixed().when('d', lambda values, schema, options: 'nope')
        with self.assertRaises(SchemaUsageError):
            s0.resolve({'parent': {'d': 1}})

        with self.assertRaises(SchemaUsageError):
            s0.validatesync(1)

    def test_condition_direct(self):
        cond = Condition([ref('a')], is_=1, then=mixed().label('one'))
        base = mixed()

        self.assertEqual('one', cond.resolve(base, {'parent': {'a': 1}}).spec['label'])
        self.assertIs(base, cond.resolve(base, {'parent': {'a': 2}}))
        self.assertIs(base, cond.resolve(base, {}))


if __name__ == "__main__":
    unittest.main()

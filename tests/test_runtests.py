# RUN: python -m unittest discover -s tests
# RUN-SOME: python -m unittest discover -s tests -k runtests

import unittest

import anyio

from voxgig_schema import (
    SchemaUsageError,
    TestConfig,
    TestContext,
    ValidationError,
    mixed,
    ref,
)
from voxgig_schema.runtests import runtests, runtestsasync
from voxgig_schema.validation import Validation, createvalidation


def makeargs(value=None, **options):
    return {
        'value': value,
        'path': options.pop('path', None),
        'options': options,
        'originalvalue': value,
        'schema': mixed(),
        'label': None,
        'sync': True,
        'from': [],
    }


def maketest(name, fn, message='${path} failed ${value}'):
    return createvalidation(TestConfig(name=name, message=message, test=fn))


class TestRunTests(unittest.TestCase):

    def test_runtests_pass(self):
        tests = [maketest('a', lambda v, c: True), maketest('b', lambda v, c: 1)]
        self.assertIsNone(runtests(tests, makeargs(1), 1))
        self.assertIsNone(runtests([], makeargs(1), 1))

    def test_runtests_endearly(self):
        calls = []

        def fail(value, ctx):
            calls.append(ctx.type)
            return False

        tests = [maketest('a', fail), maketest('b', fail)]

        err = runtests(tests, makeargs(7, path='p'), 7, 'p')
        self.assertIsInstance(err, ValidationError)
        self.assertEqual('p failed 7', err.message)
        self.assertEqual('a', err.type)
        self.assertEqual(['a'], calls)

        err = runtests(tests, makeargs(7, path='p'), 7, 'p', False)
        self.assertEqual(['p failed 7', 'p failed 7'], err.errors)
        self.assertEqual(['a', 'b'], [e['type'] for e in err.entries()])
        self.assertEqual('p', err.path)
        self.assertEqual(7, err.value)

    def test_runtests_raised_error(self):
        def raiser(value, ctx):
            raise ctx.createerror(message='raised')

        def returner(value, ctx):
            return ValidationError('returned', value, 'q', 'custom')

        err = runtests([maketest('r', raiser)], makeargs(1), 1)
        self.assertEqual('raised', err.message)

        err = runtests([maketest('r', returner)], makeargs(1), 1)
        self.assertEqual('returned', err.message)
        self.assertEqual('custom', err.type)

    def test_runtests_fatal(self):
        def broken(value, ctx):
            raise ZeroDivisionError()

        with self.assertRaises(ZeroDivisionError):
            runtests([maketest('x', broken)], makeargs(1), 1)

    def test_runtests_async_in_sync(self):
        async def later(value, ctx):
            return True

        with self.assertRaises(SchemaUsageError):
            runtests([maketest('later', later)], makeargs(1), 1)

    def test_runtests_context(self):
        def look(value, ctx):
            self.assertIsInstance(ctx, TestContext)
            self.assertEqual('look', ctx.type)
            self.assertEqual({'a': 1}, ctx.parent)
            self.assertEqual({'c': 2}, ctx.context)
            self.assertEqual(1, ctx.resolve(ref('a')))
            self.assertEqual(2, ctx.resolve(ref('$c')))
            self.assertEqual('plain', ctx.resolve('plain'))
            return True

        args = makeargs(5, parent={'a': 1}, context={'c': 2})
        self.assertIsNone(runtests([maketest('look', look)], args, 5))

    def test_runtests_createerror(self):
        ctx = TestContext(
            TestConfig(name='max', message='${path} must be at most ${max}',
                       params={'max': ref('limit')}),
            makeargs(9, path='n', parent={'limit': 5}),
        )

        err = ctx.createerror()
        self.assertEqual('n must be at most 5', err.message)
        self.assertEqual(5, err.params['max'])
        self.assertEqual('max', err.type)
        self.assertEqual('n', err.path)

        err = ctx.createerror(path='m', message=lambda params: params['path'] + '!', type='t')
        self.assertEqual('m!', err.message)
        self.assertEqual('t', err.type)

    def test_validation(self):
        validation = Validation(TestConfig(name='v', message='bad', test=lambda v, c: v > 0))
        self.assertEqual('v', validation.name)
        self.assertIsNone(validation.run(makeargs(1)))
        self.assertEqual('bad', validation.run(makeargs(-1)).message)
        self.assertIsNone(anyio.run(validation.runasync, makeargs(1)))

    # asynchronous runs
    # =================

    def test_runtestsasync(self):
        async def ok(value, ctx):
            await anyio.sleep(0)
            return True

        tests = [maketest('a', ok), maketest('b', lambda v, c: True)]
        self.assertIsNone(anyio.run(runtestsasync, tests, makeargs(1), 1))

    def test_runtestsasync_settles_all(self):
        done = []

        async def slow(value, ctx):
            await anyio.sleep(0.02)
            done.append('slow')
            return True

        async def quick(value, ctx):
            done.append('quick')
            return False

        tests = [maketest('slow', slow), maketest('quick', quick)]

        err = anyio.run(runtestsasync, tests, makeargs(1), 1)
        self.assertEqual('quick', err.type)
        self.assertEqual(['quick', 'slow'], done)

    def test_runtestsasync_order(self):
        async def wait(delay):
            await anyio.sleep(delay)

        def after(delay):
            async def fn(value, ctx):
                await wait(delay)
                return False
            return fn

        tests = [maketest('a', after(0.03)), maketest('b', after(0)), maketest('c', after(0.01))]

        err = anyio.run(runtestsasync, tests, makeargs(1), 1, None, False)
        self.assertEqual(['a', 'b', 'c'], [e['type'] for e in err.entries()])

        err = anyio.run(runtestsasync, tests, makeargs(1), 1, None, True)
        self.assertEqual('b', err.type)

    def test_runtestsasync_fatal(self):
        finished = []

        async def slow(value, ctx):
            await anyio.sleep(0.02)
            finished.append('slow')
            return True

        async def broken(value, ctx):
            raise LookupError('broken')

        tests = [maketest('slow', slow), maketest('broken', broken)]

        with self.assertRaises(LookupError):
            anyio.run(runtestsasync, tests, makeargs(1), 1)

        self.assertEqual(['slow'], finished)


if __name__ == "__main__":
    unittest.main()

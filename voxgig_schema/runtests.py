# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

# Run a queue of tests against one value, and gather the failures
# into a single ValidationError.
#
# With endearly, the first failure is the result. Without, every test
# runs and all failures are returned together, in test order.

from typing import *
import logging

import anyio

from .errors import ValidationError
from .validation import Validation


logger = logging.getLogger(__name__)


def runtests(
    tests: List[Validation],
    args: Dict[str, Any],
    value: Any,
    path: Optional[str] = None,
    endearly: bool = True,
) -> Optional[ValidationError]:
    "Run tests in order, synchronously. Returns the error, or None if all passed."
    errors = []

    for validation in tests:
        err = validation.run(args)

        if err is None:
            continue

        if endearly:
            logger.debug('test %r failed at %s, stopping early', validation.name, path)
            err.value = value
            return err

        errors.append(err)

    return _gather(errors, value, path)


async def runtestsasync(
    tests: List[Validation],
    args: Dict[str, Any],
    value: Any,
    path: Optional[str] = None,
    endearly: bool = True,
) -> Optional[ValidationError]:
    """
    Run tests concurrently. All tests are awaited before returning, even
    when a failure is already known. With endearly the result is the first
    failure to complete. An exception other than a ValidationError is
    raised again once every test has settled.
    """
    results: List[Optional[ValidationError]] = [None] * len(tests)
    firsts: List[ValidationError] = []
    fatal: List[Exception] = []

    async def runone(index, validation):
        try:
            err = await validation.runasync(args)
        except Exception as exc:
            fatal.append(exc)
            return

        if err is not None:
            results[index] = err
            firsts.append(err)

    async with anyio.create_task_group() as tg:
        for index, validation in enumerate(tests):
            tg.start_soon(runone, index, validation)

    if fatal:
        raise fatal[0]

    if endearly and firsts:
        logger.debug('test %r failed first at %s', firsts[0].type, path)
        firsts[0].value = value
        return firsts[0]

    return _gather([err for err in results if err is not None], value, path)


def _gather(errors, value, path):
    if 0 == len(errors):
        return None
    return ValidationError(errors, value, path)

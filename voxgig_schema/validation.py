# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.

from typing import *
from dataclasses import dataclass, field
import inspect

from .errors import SchemaUsageError, ValidationError
from .reference import isref
from .utility import UNDEF, getprop


@dataclass
class TestConfig:
    """
    A validation rule.

    The test function is called as `test(value, ctx)` and returns a truthy
    value to pass, a falsy value to fail with `message`, or a
    ValidationError (returned or raised) to fail with that error. It may
    also return an awaitable, in which case it can only run in `validate`,
    not `validatesync`.
    """
    __test__ = False

    test: Optional[Callable[..., Any]] = None
    name: Optional[str] = None
    message: Any = None
    params: Dict[str, Any] = field(default_factory=dict)
    exclusive: bool = False


class TestContext:
    """
    The second argument of a test function: where the value sits, the
    options of the current validation, and helpers to resolve references
    and build errors.
    """
    __test__ = False

    def __init__(self, config: TestConfig, args: Dict[str, Any]) -> None:
        self.config = config
        self.type = config.name
        self.value = args.get('value', UNDEF)
        self.path = args.get('path')
        self.label = args.get('label')
        self.schema = args.get('schema')
        self.sync = args.get('sync', False)
        self.ancestors = args.get('from', [])
        self.options = args.get('options') or {}
        self.originalvalue = args.get('originalvalue', self.value)
        self.parent = getprop(self.options, 'parent')
        self.context = getprop(self.options, 'context')

    def resolve(self, item: Any) -> Any:
        "Resolve a reference against this validation; other values pass through."
        if isref(item):
            return item.getvalue(self.value, self.parent, self.context)
        return item

    def createerror(
        self,
        path: Optional[str] = None,
        message: Any = None,
        params: Optional[Dict[str, Any]] = None,
        type: Optional[str] = None,
    ) -> ValidationError:
        nextparams = {
            'value': self.value,
            'originalvalue': self.originalvalue,
            'label': self.label,
            'path': path or self.path,
            **self.config.params,
            **(params or {}),
        }
        nextparams = {key: self.resolve(val) for key, val in nextparams.items()}

        error = ValidationError(
            ValidationError.formaterror(message or self.config.message, nextparams),
            self.value,
            nextparams['path'],
            type or self.config.name,
        )
        error.params = nextparams
        return error


class Validation:
    """
    A registered test, ready to run. Running returns None on success,
    or the ValidationError describing the failure. Any other exception
    raised by the test function propagates.
    """

    def __init__(self, options: TestConfig) -> None:
        self.options = options

    @property
    def name(self) -> Optional[str]:
        return self.options.name

    def run(self, args: Dict[str, Any]) -> Optional[ValidationError]:
        "Run synchronously. A test that suspends is a usage error."
        ctx = TestContext(self.options, args)

        try:
            result = self.options.test(ctx.value, ctx)
        except ValidationError as err:
            return err

        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise SchemaUsageError(
                f'Validation test of type: "{ctx.type}" returned an awaitable '
                'during a synchronous validate. This test will finish after '
                'the validate call has returned')

        return self._settle(ctx, result)

    async def runasync(self, args: Dict[str, Any]) -> Optional[ValidationError]:
        ctx = TestContext(self.options, args)

        try:
            result = self.options.test(ctx.value, ctx)
            if inspect.isawaitable(result):
                result = await result
        except ValidationError as err:
            return err

        return self._settle(ctx, result)

    def _settle(self, ctx, result):
        if isinstance(result, ValidationError):
            return result
        if not result:
            return ctx.createerror()
        return None


def createvalidation(config: TestConfig) -> Validation:
    return Validation(config)

"""Two-part result convention for callers that prefer it over exceptions."""

from collections.abc import Awaitable
from typing import Generic, NamedTuple, TypeVar

from ucdstore.bridge.errors import BridgeError, PathSafetyError
from ucdstore.lockfile.errors import LockfileError
from ucdstore.store.errors import StoreError
from ucdstore.utils.glob import GlobError

T = TypeVar("T")

# Errors converted into OperationResult.error; anything else propagates
OPERATION_ERRORS: tuple[type[Exception], ...] = (
    StoreError,
    BridgeError,
    PathSafetyError,
    LockfileError,
    GlobError,
)


class OperationResult(NamedTuple, Generic[T]):
    """Outcome of a store call: exactly one of ``data`` and ``error`` is set."""

    data: T | None
    error: Exception | None

    @property
    def ok(self) -> bool:
        return self.error is None


async def try_operation(operation: Awaitable[T]) -> OperationResult[T]:
    """Await a store operation and capture its error instead of raising.

    Args:
        operation: Awaitable store call, e.g. ``store.analyze()``.

    Returns:
        ``(data, None)`` on success, ``(None, error)`` on a store-domain error.

    Example:
        >>> data, error = await try_operation(store.mirror(dry_run=True))
    """
    try:
        return OperationResult(await operation, None)
    except OPERATION_ERRORS as e:
        return OperationResult(None, e)

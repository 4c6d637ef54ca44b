"""Awaitable forms of the callback-style operations.

``awaitable`` turns any operation that reports through a trailing
``callback(error, result)`` into a coroutine function. The awaitable
variants of ``parse``, ``parse_file`` and ``output_file`` are built from
``CALLBACK_OPERATIONS`` and exposed as ``promises``.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any

from reflib.dispatch import DeliveryMode, output_file, parse, parse_file
from reflib.errors import InvalidArguments

__all__ = ["CALLBACK_OPERATIONS", "Promises", "awaitable", "promises"]

CALLBACK_OPERATIONS: tuple[Callable[..., Any], ...] = (parse, parse_file, output_file)


def awaitable(operation: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
    """Wrap a callback-style operation as a coroutine function.

    The operation runs in the loop's default executor, so other tasks keep
    running while a file is read or written. The returned coroutine resolves
    with the operation's result, or raises the first error it reports.
    Usage errors the operation raises before starting (``UnsupportedFormat``,
    ``InvalidArguments``, ...) are raised from the ``await`` as well.

    Parameters
    ----------
    operation : Callable[..., Any]
        Function accepting a ``callback`` keyword argument.

    Returns
    -------
    Callable[..., Awaitable[Any]]
        Coroutine function taking the same arguments minus ``callback``.
    """

    @functools.wraps(operation)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        if "callback" in kwargs:
            raise InvalidArguments(f"awaitable {operation.__name__}() does not take a callback")

        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def settle(error: BaseException | None, result: Any) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        def complete(error: BaseException | None, result: Any) -> None:
            loop.call_soon_threadsafe(settle, error, result)

        try:
            await loop.run_in_executor(
                None, functools.partial(operation, *args, callback=complete, **kwargs)
            )
        except Exception as e:
            if future.done():
                raise
            settle(e, None)

        return await future

    wrapper.delivery_mode = DeliveryMode.AWAITABLE  # type: ignore[attr-defined]
    return wrapper


class Promises:
    """Namespace of awaitable operations, one attribute per operation."""

    def __init__(self, operations: tuple[Callable[..., Any], ...]) -> None:
        self.names = tuple(op.__name__ for op in operations)
        for op in operations:
            setattr(self, op.__name__, awaitable(op))

    def __repr__(self) -> str:
        return f"Promises({', '.join(self.names)})"


promises = Promises(CALLBACK_OPERATIONS)

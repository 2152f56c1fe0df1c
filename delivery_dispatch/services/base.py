"""Common functionality for engine services."""

import functools
from typing import Any, Awaitable, Callable, TypeVar

from delivery_dispatch.config import get_settings
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.state.repository import Repository
from delivery_dispatch.utils.logging import OperationLogger

T = TypeVar("T")


class RefusalError(Exception):
    """Raised inside an operation to abort it with a business refusal."""

    def __init__(self, result: ErrorResult):
        super().__init__(result.error.message)
        self.result = result


def guarded(
    function_name: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T | ErrorResult]]]:
    """
    Wrap a public service coroutine so it never raises.

    Refusals raised as ``RefusalError`` are returned as their result, and
    any other exception becomes a failure result naming ``function_name``.
    Both are logged through the service's ``OperationLogger``.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T | ErrorResult]]:
        @functools.wraps(func)
        async def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> T | ErrorResult:
            try:
                result = await func(self, *args, **kwargs)
            except RefusalError as refusal:
                result = refusal.result
            except Exception as e:
                self.logger.log_failure(
                    operation=function_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return ErrorResult.failure(e, function_name)

            if isinstance(result, ErrorResult) and result.is_refusal:
                self.logger.log_refusal(
                    operation=function_name,
                    reason=result.error.message or "",
                    status=result.error.status,
                )
            return result

        return wrapper

    return decorator


class BaseService:
    """Base class for services operating on persisted entities."""

    def __init__(self, component: str, repository: Repository):
        self.component = component
        self.repository = repository
        self.settings = get_settings()
        self.logger = OperationLogger(component)

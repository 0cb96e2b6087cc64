"""``db_operation``: timing and error logging around repository coroutines.

Errors are logged at a level chosen from the SQLAlchemy exception type and
then re-raised as they are.
"""

from collections.abc import Callable, Coroutine
import functools
import inspect
import time
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import (
    DatabaseError,
    IntegrityError,
    MultipleResultsFound,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    TimeoutError,
)

from trackbridge.config import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

# First matching entry wins, so subclasses come before their bases
_ERROR_LEVELS: tuple[tuple[type[BaseException], str, str], ...] = (
    (NoResultFound, "DEBUG", "DB record not found"),
    (MultipleResultsFound, "WARNING", "Multiple results found"),
    (IntegrityError, "WARNING", "DB integrity error"),
    (TimeoutError, "ERROR", "DB timeout error"),
    (OperationalError, "ERROR", "DB operational error"),
    (DatabaseError, "ERROR", "DB error"),
    (SQLAlchemyError, "ERROR", "SQLAlchemy error"),
)


def db_operation(operation_name: str | None = None):
    """Wrap an async repository method; ``operation_name`` defaults to its name."""

    def decorator(
        func: Callable[P, Coroutine[Any, Any, T]],
    ) -> Callable[P, Coroutine[Any, Any, T]]:
        func_name = operation_name or func.__name__

        if not inspect.iscoroutinefunction(func):
            raise TypeError(
                f"db_operation can only be used with async functions, but {func_name} is not async",
            )

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start_time = time.perf_counter()
            repo_name = args[0].__class__.__name__ if args else "Repository"
            context = _build_log_context(kwargs)

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                exec_time = (time.perf_counter() - start_time) * 1000
                for error_type, level, label in _ERROR_LEVELS:
                    if isinstance(e, error_type):
                        logger.log(
                            level,
                            f"{label}: {repo_name}.{func_name}",
                            operation=func_name,
                            error=str(e),
                            exec_time_ms=exec_time,
                            **context,
                        )
                        break
                else:
                    logger.exception(
                        f"Unhandled exception in {repo_name}.{func_name}",
                        operation=func_name,
                        error=str(e),
                        exec_time_ms=exec_time,
                        **context,
                    )
                raise

            logger.trace(
                f"DB operation completed: {repo_name}.{func_name}",
                operation=func_name,
                exec_time_ms=(time.perf_counter() - start_time) * 1000,
                **context,
            )
            return result

        return wrapper

    return decorator


def _build_log_context(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Pick simple keyword arguments worth attaching to log records."""
    return {
        key: value
        for key, value in kwargs.items()
        if not key.startswith("_") and isinstance(value, int | str | bool | float)
    }

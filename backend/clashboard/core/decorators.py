"""
Service layer decorators for common functionality.

This module provides decorators for error handling, logging, and other
cross-cutting concerns in the service layer.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, ParamSpec, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from clashboard.core.exceptions import (
    DatabaseError,
    ServiceException,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# Type variables for generic decorator typing
P = ParamSpec("P")
R = TypeVar("R")

# Battle payloads and sessions are too large for a log line
_SKIPPED_CONTEXT_ARGS = ("self", "db", "session", "battles")


def _build_context(
    func: Callable[..., Any], service_name: str, args: tuple, kwargs: dict
) -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "service": service_name,
        "operation": func.__name__,
    }
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()
    for name, value in bound_args.arguments.items():
        if name in _SKIPPED_CONTEXT_ARGS:
            continue
        # Limit string values to avoid huge log entries
        if isinstance(value, str) and len(value) > 100:
            context[name] = value[:100] + "..."
        else:
            context[name] = str(value)[:200] if value is not None else None
    return context


def service_error_handler(
    service_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Decorator for handling service method errors with structured logging.

    Catches exceptions, logs them with the call's arguments as context and
    re-raises them as service exceptions: ``ValueError`` becomes
    ``ValidationError``, SQLAlchemy errors become ``DatabaseError`` and
    anything else is wrapped in ``ServiceException``. Service exceptions
    pass through unchanged.

    :param service_name: Name of the service (e.g., "BattleHistoryService")
    :returns: Decorated coroutine function with error handling

    :example:
        @service_error_handler("BattleHistoryService")
        async def ingest(self, user_id: str, ...) -> IngestResult:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        operation_name = func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            context = _build_context(func, service_name, args, kwargs)

            try:
                logger.debug("Service method called", **context)
                result = await func(*args, **kwargs)
                logger.debug("Service method completed successfully", **context)
                return result

            except ServiceException as e:
                logger.error(
                    "Service operation failed",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    error_context=e.context,
                    **context,
                )
                raise

            except ValueError as e:
                logger.error(
                    "Validation error in service operation",
                    error_message=str(e),
                    **context,
                )
                raise ValidationError(
                    message=str(e),
                    service=service_name,
                    operation=operation_name,
                    context=context,
                ) from e

            except SQLAlchemyError as e:
                logger.error(
                    "Database error in service operation",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise DatabaseError(
                    message=str(e),
                    service=service_name,
                    operation=operation_name,
                    context=context,
                    original_error=e,
                ) from e

            except Exception as e:
                logger.error(
                    "Unexpected error in service operation",
                    error_type=e.__class__.__name__,
                    error_message=str(e),
                    **context,
                )
                raise ServiceException(
                    message=f"Unexpected error in {service_name}.{operation_name}: {e}",
                    service=service_name,
                    operation=operation_name,
                    context=context,
                    original_error=e,
                ) from e

        return wrapper

    return decorator


def input_validation(
    validate_non_empty: Optional[list[str]] = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Decorator for input validation in service methods.

    :param validate_non_empty: List of parameter names that must not be empty

    :example:
        @input_validation(validate_non_empty=["user_id"])
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            bound_args = inspect.signature(func).bind(*args, **kwargs)
            bound_args.apply_defaults()

            for param_name in validate_non_empty or []:
                value = bound_args.arguments.get(param_name)
                if value is None or (isinstance(value, str) and not value.strip()):
                    raise ValueError(f"{param_name} cannot be empty or None")

            return await func(*args, **kwargs)

        return wrapper

    return decorator

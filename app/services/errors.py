"""Service error taxonomy and store error translation.

Hard errors (raised to the caller):
- ValidationError: required field missing or malformed, never retried
- AuthRequiredError / CompanyRequiredError: identity context missing
- NotFoundError: record does not exist in the caller's company
- StoreIOError: the database failed; retrying is the caller's decision

Soft errors:
- ConsistencyWarning: a best-effort side effect (usage tracking, embedded
  project migration) failed; logged and reported, never raised
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import ParamSpec, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class ServiceError(Exception):
    """Base class for errors surfaced by the service layer."""


class ValidationError(ServiceError):
    """A required field is missing or malformed."""


class AuthRequiredError(ServiceError):
    """No signed-in user for an operation that stamps the creator."""


class CompanyRequiredError(ServiceError):
    """No company selected for a company-scoped operation."""


class NotFoundError(ServiceError):
    """Record not found within the caller's company."""


class StoreIOError(ServiceError):
    """The document store failed to complete an operation."""


class ConsistencyWarning(UserWarning):
    """A best-effort side channel failed; primary action is unaffected."""


@dataclass(frozen=True)
class BestEffortResult:
    """Outcome of an operation that must never block the primary action."""

    ok: bool
    warning: ConsistencyWarning | None = None

    @classmethod
    def success(cls) -> "BestEffortResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, message: str) -> "BestEffortResult":
        return cls(ok=False, warning=ConsistencyWarning(message))


def require_company(company_id: UUID | None) -> UUID:
    """Ensure a company is selected."""
    if company_id is None:
        raise CompanyRequiredError("Select a company first")
    return company_id


def require_user(user_id: str | None) -> str:
    """Ensure a user is signed in."""
    if not user_id:
        raise AuthRequiredError("Sign in required")
    return user_id


def require_text(value: str | None, field: str) -> str:
    """Ensure a required text field is present and not blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def store_operation(
    action: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Translate database failures of a service call into StoreIOError.

    Usage:
        @store_operation("save customer")
        async def save_customer(db, ...):
            ...
    """

    def decorator(fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await fn(*args, **kwargs)
            except SQLAlchemyError as exc:
                logger.error(f"Store failure during {action}: {exc}")
                raise StoreIOError(f"Could not {action}") from exc

        return wrapper

    return decorator

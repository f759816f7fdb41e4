"""Atomic unit of work for mutation operations.

Each decorated operation is one transaction on the caller's session: it
commits when the operation returns and rolls back every prior step when any
step raises. The session must not carry uncommitted work from elsewhere when
an operation starts.
"""

import functools
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import ConflictError, InternalError, MarketplaceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def atomic(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Run ``func(db, ...)`` as one commit-or-rollback unit."""

    @functools.wraps(func)
    async def wrapper(db: AsyncSession, *args, **kwargs) -> T:
        try:
            result = await func(db, *args, **kwargs)
            await db.commit()
            return result
        except MarketplaceError as e:
            await db.rollback()
            logger.warning(f"{func.__name__} rolled back: {e.detail}")
            raise
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"{func.__name__} integrity error: {e.orig}")
            raise ConflictError("Integrity constraint violated") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"{func.__name__} store error: {e}")
            raise InternalError() from e
        except Exception:
            await db.rollback()
            raise

    return wrapper

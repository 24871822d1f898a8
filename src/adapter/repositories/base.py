import asyncio
from typing import Any, Awaitable, Dict, TypeVar

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.exceptions import StoreUnavailable

T = TypeVar("T")

DEFAULT_STORE_TIMEOUT_SECONDS = 5.0


def store_connect_args(db_uri: str, timeout: float) -> Dict[str, Any]:
    """
    Driver arguments that make the database itself give up after ``timeout``.

    A call already running inside a driver thread cannot be cancelled from
    the event loop, so the bound has to live in the driver.
    """
    backend = make_url(db_uri).get_backend_name()
    if backend == "sqlite":
        # sqlite busy timeout: how long to wait on a locked database
        return {"timeout": timeout}
    return {}


async def guarded(awaitable: Awaitable[T], timeout: float) -> T:
    """Await a store call, mapping timeouts and database errors to StoreUnavailable"""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise StoreUnavailable(f"Store call timed out after {timeout}s") from exc
    except (SQLAlchemyError, OSError) as exc:
        raise StoreUnavailable(str(exc)) from exc


class GuardedRepository:
    """Base for SQLModel repositories: bounds every store call with a timeout"""

    def __init__(self, session: AsyncSession, timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS):
        self.session = session
        self.timeout = timeout

    async def _run(self, awaitable: Awaitable[T]) -> T:
        return await guarded(awaitable, self.timeout)

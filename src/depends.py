from typing import Optional

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.base import store_connect_args
from src.adapter.services.header_request_probe import HeaderRequestProbe
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.request_probe import IRequestProbe
from src.app.services.session_settings import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import SessionLifecycleManager
from src.domain.entities import Session
from src.libs.result import Error

session_settings = SessionSettings.from_config(ApplicationConfig)

engine = create_async_engine(
    ApplicationConfig.DB_URI,
    echo=False,
    future=True,
    connect_args=store_connect_args(
        ApplicationConfig.DB_URI, session_settings.store_timeout_seconds
    ),
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def get_session_settings() -> SessionSettings:
    return session_settings


async def get_unit_of_work(settings: SessionSettings = Depends(get_session_settings)):
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session, settings.store_timeout_seconds)


def get_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: SessionSettings = Depends(get_session_settings),
) -> SessionLifecycleManager:
    return SessionLifecycleManager(uow, settings)


def get_request_probe(request: Request) -> IRequestProbe:
    client_host = request.client.host if request.client else None
    return HeaderRequestProbe(request.headers, client_host)


def get_session_cookie(
    request: Request, settings: SessionSettings = Depends(get_session_settings)
) -> Optional[str]:
    return request.cookies.get(settings.cookie_name)


async def get_current_session(
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionLifecycleManager = Depends(get_session_manager),
) -> Session:
    """
    Dependency resolving the live session behind the session cookie.

    Missing, tampered, expired and revoked cookies, and an unreachable store,
    all produce the same 401 response.

    Raises:
        ClientError: 401 if no live session is bound to the request
    """
    session = await manager.get_current_session(cookie)
    if session is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return session

from typing import Optional
from uuid import UUID

from sqlmodel import select

from src.adapter.repositories.base import GuardedRepository
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User


class UserRepository(GuardedRepository, IUserRepository):
    """User repository implementation using SQLModel"""

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self._run(self.session.exec(stmt))
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self._run(self.session.exec(stmt))
        return result.one_or_none()

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self._run(self.session.flush())
        await self._run(self.session.refresh(user))
        return user

"""User and course lookups used by the selection engine."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.course import Course
from app.models.user import User, UserRole


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_lecturer(self, user_id: int) -> Optional[User]:
        """The user if it exists and has the Lecturer role."""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.role == UserRole.LECTURER)
        )
        return result.scalar_one_or_none()


class CourseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock(self, course_code: str) -> Optional[Course]:
        """
        Row-lock the course until the transaction ends.

        Serializes rank changes for one course across worker processes on
        PostgreSQL. SQLite has no FOR UPDATE and serializes writers anyway.
        """
        result = await self.db.execute(
            select(Course).where(Course.code == course_code).with_for_update()
        )
        return result.scalar_one_or_none()

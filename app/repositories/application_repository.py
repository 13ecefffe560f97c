"""Application store."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.application import Application


class ApplicationRepository:
    """Reads applications and flips their selected flag. No business rules."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, application_id: int) -> Optional[Application]:
        result = await self.db.execute(
            select(Application).where(Application.id == application_id)
        )
        return result.scalar_one_or_none()

    async def find_by_course_and_id(
        self, course_code: str, application_id: int
    ) -> Optional[Application]:
        result = await self.db.execute(
            select(Application).where(
                Application.id == application_id,
                Application.course_code == course_code,
            )
        )
        return result.scalar_one_or_none()

    async def set_selected_flag(self, application_id: int, selected: bool) -> Optional[Application]:
        """Update the selected flag. Returns None if the application is gone."""
        application = await self.find_by_id(application_id)
        if application is None:
            return None

        application.selected = selected
        await self.db.flush()
        return application

    async def list_by_course(self, course_code: str) -> List[Application]:
        result = await self.db.execute(
            select(Application)
            .where(Application.course_code == course_code)
            .options(selectinload(Application.user))
            .order_by(Application.id)
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[Application]:
        result = await self.db.execute(
            select(Application)
            .options(selectinload(Application.user), selectinload(Application.course))
            .order_by(Application.id)
        )
        return list(result.scalars().all())

"""
Selection ranking store.

Selections have no course column of their own; every course-scoped query
joins through the application to reach its course code.
"""

import enum
from typing import Dict, List, Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from app.models.application import Application
from app.models.selected_application import SelectedApplication

logger = structlog.get_logger(__name__)


class RankBoundary(str, enum.Enum):
    """End of a course ranking."""
    TOP = "top"  # lowest rank number, most preferred
    BOTTOM = "bottom"


class SelectionRepository:
    """Queries and writes for selected applications and their ranks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _for_course(course_code: str) -> Select:
        return (
            select(SelectedApplication)
            .join(Application, SelectedApplication.application_id == Application.id)
            .where(Application.course_code == course_code)
        )

    async def count_for_course(self, course_code: str) -> int:
        result = await self.db.execute(
            select(func.count(SelectedApplication.id))
            .join(Application, SelectedApplication.application_id == Application.id)
            .where(Application.course_code == course_code)
        )
        return result.scalar_one()

    async def find_by_application(self, application_id: int) -> Optional[SelectedApplication]:
        result = await self.db.execute(
            select(SelectedApplication).where(SelectedApplication.application_id == application_id)
        )
        return result.scalar_one_or_none()

    async def find_by_application_and_course(
        self, application_id: int, course_code: str
    ) -> Optional[SelectedApplication]:
        result = await self.db.execute(
            self._for_course(course_code).where(SelectedApplication.application_id == application_id)
        )
        return result.scalar_one_or_none()

    async def find_by_id_and_course(
        self, selection_id: int, course_code: str
    ) -> Optional[SelectedApplication]:
        result = await self.db.execute(
            self._for_course(course_code).where(SelectedApplication.id == selection_id)
        )
        return result.scalar_one_or_none()

    async def find_boundary(
        self, course_code: str, direction: RankBoundary
    ) -> Optional[SelectedApplication]:
        """Selection with the minimum (TOP) or maximum (BOTTOM) rank of the course."""
        order = (
            SelectedApplication.rank.asc()
            if direction == RankBoundary.TOP
            else SelectedApplication.rank.desc()
        )
        result = await self.db.execute(self._for_course(course_code).order_by(order).limit(1))
        return result.scalar_one_or_none()

    async def find_by_rank(self, course_code: str, rank: int) -> Optional[SelectedApplication]:
        result = await self.db.execute(
            self._for_course(course_code).where(SelectedApplication.rank == rank)
        )
        return result.scalars().first()

    async def list_by_course_ordered_by_rank(self, course_code: str) -> List[SelectedApplication]:
        result = await self.db.execute(
            self._for_course(course_code)
            .options(selectinload(SelectedApplication.application).selectinload(Application.user))
            .order_by(SelectedApplication.rank.asc())
        )
        return list(result.scalars().all())

    async def create(self, user_id: int, application_id: int, rank: int) -> SelectedApplication:
        selection = SelectedApplication(
            user_id=user_id,
            application_id=application_id,
            rank=rank,
        )
        self.db.add(selection)
        await self.db.flush()
        return selection

    async def save(self, *selections: SelectedApplication) -> None:
        """Write pending changes of one or many selections in a single flush."""
        self.db.add_all(selections)
        await self.db.flush()

    async def remove(self, selection: SelectedApplication) -> None:
        await self.db.delete(selection)
        await self.db.flush()

    async def shift_ranks_down(self, course_code: str, above_rank: int) -> int:
        """
        Decrement every rank of the course greater than ``above_rank``.

        Runs as one UPDATE statement so the course never shows a partially
        shifted ranking. Returns the number of selections moved.
        """
        course_applications = select(Application.id).where(Application.course_code == course_code)
        result = await self.db.execute(
            update(SelectedApplication)
            .where(
                SelectedApplication.application_id.in_(course_applications),
                SelectedApplication.rank > above_rank,
            )
            .values(rank=SelectedApplication.rank - 1)
            .execution_options(synchronize_session="fetch")
        )
        logger.debug("ranks_shifted", course_code=course_code, above_rank=above_rank, moved=result.rowcount)
        return result.rowcount

    async def rank_snapshot(self, course_code: str) -> List[int]:
        """Sorted ranks of the course."""
        result = await self.db.execute(
            select(SelectedApplication.rank)
            .join(Application, SelectedApplication.application_id == Application.id)
            .where(Application.course_code == course_code)
            .order_by(SelectedApplication.rank)
        )
        return [row[0] for row in result.all()]

    async def ranks_by_course(self) -> Dict[str, List[int]]:
        """Sorted ranks of every course that has at least one selection."""
        result = await self.db.execute(
            select(Application.course_code, SelectedApplication.rank)
            .join(Application, SelectedApplication.application_id == Application.id)
            .order_by(Application.course_code, SelectedApplication.rank)
        )
        ranks: Dict[str, List[int]] = {}
        for course_code, rank in result.all():
            ranks.setdefault(course_code, []).append(rank)
        return ranks

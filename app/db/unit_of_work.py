"""Transaction scope shared by all stores of one engine operation."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction, async_sessionmaker

from app.repositories.application_repository import ApplicationRepository
from app.repositories.comment_repository import CommentRepository
from app.repositories.selection_repository import SelectionRepository
from app.repositories.user_repository import CourseRepository, UserRepository


class UnitOfWork:
    """
    Opens a session and a transaction, and binds every store to it.

    Usage::

        async with UnitOfWork(AsyncSessionLocal) as uow:
            await uow.selections.count_for_course("COSC0001")

    Leaving the block normally commits. Any exception, including task
    cancellation, rolls the whole transaction back. The session is always
    closed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None
        self._transaction: Optional[AsyncSessionTransaction] = None

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self._transaction = await self.session.begin()

        self.applications = ApplicationRepository(self.session)
        self.selections = SelectionRepository(self.session)
        self.comments = CommentRepository(self.session)
        self.users = UserRepository(self.session)
        self.courses = CourseRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self._transaction.commit()
            else:
                await self._transaction.rollback()
        finally:
            await self.session.close()

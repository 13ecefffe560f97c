"""Comment store."""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment


class CommentRepository:
    """Lecturer comments attached to selections."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, selected_application_id: int, author_user_id: int, content: str) -> Comment:
        comment = Comment(
            selected_application_id=selected_application_id,
            author_user_id=author_user_id,
            content=content,
        )
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def find_by_selection(self, selected_application_id: int) -> List[Comment]:
        """Comments in the order they were written."""
        result = await self.db.execute(
            select(Comment)
            .where(Comment.selected_application_id == selected_application_id)
            .order_by(Comment.id)
        )
        return list(result.scalars().all())

    async def delete_by_selection(self, selected_application_id: int) -> int:
        result = await self.db.execute(
            delete(Comment)
            .where(Comment.selected_application_id == selected_application_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

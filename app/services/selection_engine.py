"""
Selection Engine
Select, rank and comment on course applications
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

import sentry_sdk
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.core.exceptions import (
    AlreadyAtBottomError,
    AlreadyAtTopError,
    AlreadySelectedError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    OperationTimeoutError,
    RankGapError,
    SelectionEngineError,
    ValidationError,
)
from app.core.locks import CourseLockRegistry
from app.db.unit_of_work import UnitOfWork
from app.models.application import Application
from app.models.comment import Comment
from app.models.selected_application import SelectedApplication
from app.repositories.selection_repository import RankBoundary

logger = structlog.get_logger(__name__)

T = TypeVar("T")

read_retry = retry(
    retry=retry_if_exception_type(InfrastructureError),
    stop=stop_after_attempt(settings.READ_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.2, max=2),
    reraise=True,
)


@dataclass
class RankChange:
    """New rank of one selection after a swap."""
    application_id: int
    new_rank: int
    user_id: int


@dataclass
class RankSwap:
    """Result of promote/demote: the two selections that traded ranks."""
    promoted: RankChange  # moved toward rank 1
    demoted: RankChange


@dataclass
class Unselection:
    """Result of unselect."""
    selection_id: int
    removed_rank: int
    comments_deleted: int
    ranks_shifted: int


class SelectionEngine:
    """
    Maintains the per-course ranking of selected applications.

    Invariants kept by every operation:
    - the selections of a course hold exactly ranks 1..N
    - an application has at most one selection
    - comments never outlive their selection

    Every mutating operation runs inside one transaction while holding the
    course lock (in-process asyncio lock plus a row lock on the course), and
    is bounded by ``operation_timeout`` seconds. Nothing is committed unless
    the whole operation succeeds.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: Optional[CourseLockRegistry] = None,
        operation_timeout: Optional[float] = None,
    ):
        """
        Args:
            uow_factory: Returns a fresh UnitOfWork for each operation
            locks: Course lock registry, shared by all engines of the process
            operation_timeout: Seconds before a mutating operation is rolled back
        """
        self._uow_factory = uow_factory
        self._locks = locks or CourseLockRegistry()
        self._timeout = (
            operation_timeout if operation_timeout is not None else settings.OPERATION_TIMEOUT_SECONDS
        )

    @classmethod
    def from_session_factory(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        **kwargs,
    ) -> "SelectionEngine":
        return cls(lambda: UnitOfWork(session_factory), **kwargs)

    # ------------------------------------------------------------------
    # Transaction plumbing
    # ------------------------------------------------------------------

    async def _run_locked(
        self,
        operation: str,
        course_code: str,
        work: Callable[[UnitOfWork], Awaitable[T]],
    ) -> T:
        """Run ``work`` in one transaction while holding the course lock."""
        _require_course_code(course_code)

        async def _locked() -> T:
            async with self._locks.hold(course_code):
                async with self._uow_factory() as uow:
                    await uow.courses.lock(course_code)
                    return await work(uow)

        try:
            return await asyncio.wait_for(_locked(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                "selection_operation_timeout",
                operation=operation,
                course_code=course_code,
                timeout_seconds=self._timeout,
            )
            raise OperationTimeoutError(
                f"{operation} timed out after {self._timeout}s and was rolled back",
                operation=operation,
                course_code=course_code,
            )
        except SelectionEngineError:
            raise
        except SQLAlchemyError as e:
            raise _infrastructure_error(operation, e, course_code=course_code) from e

    async def _run_read(self, operation: str, work: Callable[[UnitOfWork], Awaitable[T]]) -> T:
        try:
            async with self._uow_factory() as uow:
                return await work(uow)
        except SQLAlchemyError as e:
            raise _infrastructure_error(operation, e) from e

    # ------------------------------------------------------------------
    # Rank-mutating operations
    # ------------------------------------------------------------------

    async def select(self, course_code: str, application_id: int) -> SelectedApplication:
        """
        Select an application; it joins the course ranking at the bottom.

        Raises:
            NotFoundError: no such application for this course
            AlreadySelectedError: the application already has a selection
        """
        _require_id(application_id, "application_id")

        async def work(uow: UnitOfWork) -> SelectedApplication:
            application = await uow.applications.find_by_course_and_id(course_code, application_id)
            if not application:
                raise NotFoundError(
                    "Application not found for this course",
                    course_code=course_code,
                    application_id=application_id,
                )

            existing = await uow.selections.find_by_application(application_id)
            if existing:
                raise AlreadySelectedError(
                    "Application is already selected for this course",
                    application_id=application_id,
                )

            next_rank = await uow.selections.count_for_course(course_code) + 1

            application.selected = True
            try:
                selection = await uow.selections.create(
                    user_id=application.user_id,
                    application_id=application.id,
                    rank=next_rank,
                )
            except IntegrityError as e:
                # Unique application_id caught a selection the check above missed
                raise AlreadySelectedError(
                    "Application is already selected for this course",
                    application_id=application_id,
                ) from e

            logger.info(
                "application_selected",
                course_code=course_code,
                application_id=application_id,
                selection_id=selection.id,
                rank=next_rank,
            )
            return selection

        return await self._run_locked("select", course_code, work)

    async def unselect(self, course_code: str, application_id: int) -> Unselection:
        """
        Remove a selection, its comments, and close the gap it leaves.

        Raises:
            NotFoundError: the application is not selected in this course
        """
        _require_id(application_id, "application_id")

        async def work(uow: UnitOfWork) -> Unselection:
            selection = await uow.selections.find_by_application_and_course(application_id, course_code)
            if not selection:
                raise NotFoundError(
                    "Selected application not found for this course",
                    course_code=course_code,
                    application_id=application_id,
                )

            selection_id = selection.id
            removed_rank = selection.rank

            comments_deleted = await uow.comments.delete_by_selection(selection_id)
            await uow.selections.remove(selection)

            application = await uow.applications.set_selected_flag(application_id, False)
            if application is None:
                # Only reachable if the application row was removed outside the
                # foreign key; the lookup above joins through it. The selection is
                # already gone from the ranking, so carry on.
                logger.warning(
                    "unselect_application_missing",
                    course_code=course_code,
                    application_id=application_id,
                    selection_id=selection_id,
                )

            ranks_shifted = await uow.selections.shift_ranks_down(course_code, removed_rank)

            logger.info(
                "application_unselected",
                course_code=course_code,
                application_id=application_id,
                removed_rank=removed_rank,
                comments_deleted=comments_deleted,
                ranks_shifted=ranks_shifted,
            )
            return Unselection(
                selection_id=selection_id,
                removed_rank=removed_rank,
                comments_deleted=comments_deleted,
                ranks_shifted=ranks_shifted,
            )

        return await self._run_locked("unselect", course_code, work)

    async def promote(self, course_code: str, application_id: int) -> RankSwap:
        """
        Move a selection one step toward rank 1.

        Raises:
            NotFoundError: the application is not selected in this course
            AlreadyAtTopError: the selection already holds the top rank
            RankGapError: no selection holds the rank just above
        """
        _require_id(application_id, "application_id")

        async def work(uow: UnitOfWork) -> RankSwap:
            selection = await _find_selection(uow, course_code, application_id)
            current_rank = selection.rank

            top = await uow.selections.find_boundary(course_code, RankBoundary.TOP)
            if not top or current_rank <= top.rank:
                raise AlreadyAtTopError(
                    "Cannot promote: already at the top rank for this course",
                    course_code=course_code,
                    application_id=application_id,
                )

            neighbour = await _find_neighbour(uow, course_code, current_rank - 1)
            await _swap_ranks(uow, selection, neighbour)

            logger.info(
                "selection_promoted",
                course_code=course_code,
                application_id=application_id,
                new_rank=selection.rank,
                displaced_application_id=neighbour.application_id,
            )
            return RankSwap(promoted=_rank_change(selection), demoted=_rank_change(neighbour))

        return await self._run_locked("promote", course_code, work)

    async def demote(self, course_code: str, application_id: int) -> RankSwap:
        """
        Move a selection one step away from rank 1.

        Raises:
            NotFoundError: the application is not selected in this course
            AlreadyAtBottomError: the selection already holds the last rank
            RankGapError: no selection holds the rank just below
        """
        _require_id(application_id, "application_id")

        async def work(uow: UnitOfWork) -> RankSwap:
            selection = await _find_selection(uow, course_code, application_id)
            current_rank = selection.rank

            bottom = await uow.selections.find_boundary(course_code, RankBoundary.BOTTOM)
            if not bottom or current_rank >= bottom.rank:
                raise AlreadyAtBottomError(
                    "Cannot demote: already at the lowest rank for this course",
                    course_code=course_code,
                    application_id=application_id,
                )

            neighbour = await _find_neighbour(uow, course_code, current_rank + 1)
            await _swap_ranks(uow, selection, neighbour)

            logger.info(
                "selection_demoted",
                course_code=course_code,
                application_id=application_id,
                new_rank=selection.rank,
                displaced_application_id=neighbour.application_id,
            )
            return RankSwap(promoted=_rank_change(neighbour), demoted=_rank_change(selection))

        return await self._run_locked("demote", course_code, work)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(
        self,
        course_code: str,
        selection_id: int,
        content: str,
        author_user_id: int,
    ) -> Comment:
        """
        Attach a lecturer's comment to a selection of this course.

        Raises:
            ForbiddenError: the author is not a lecturer
            ValidationError: the content is blank
            NotFoundError: no such selection in this course
        """
        _require_id(selection_id, "selected_application_id")

        async def work(uow: UnitOfWork) -> Comment:
            lecturer = await uow.users.find_lecturer(author_user_id)
            if not lecturer:
                raise ForbiddenError(
                    "Only lecturers can add comments to selections",
                    author_user_id=author_user_id,
                )

            text = (content or "").strip()
            if not text:
                raise ValidationError("Comment cannot be empty")

            selection = await uow.selections.find_by_id_and_course(selection_id, course_code)
            if not selection:
                raise NotFoundError(
                    "Selected application not found for this course",
                    course_code=course_code,
                    selection_id=selection_id,
                )

            comment = await uow.comments.create(
                selected_application_id=selection.id,
                author_user_id=lecturer.id,
                content=text,
            )
            logger.info(
                "comment_added",
                course_code=course_code,
                selection_id=selection.id,
                comment_id=comment.id,
                author_user_id=lecturer.id,
            )
            return comment

        return await self._run_locked("add_comment", course_code, work)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @read_retry
    async def list_comments_for_selection(self, selection_id: int) -> List[Comment]:
        _require_id(selection_id, "selected_application_id")

        async def work(uow: UnitOfWork) -> List[Comment]:
            return await uow.comments.find_by_selection(selection_id)

        return await self._run_read("list_comments_for_selection", work)

    @read_retry
    async def list_selected_for_course(self, course_code: str) -> List[SelectedApplication]:
        """Selections of the course by rank, with application and applicant loaded."""
        _require_course_code(course_code)

        async def work(uow: UnitOfWork) -> List[SelectedApplication]:
            return await uow.selections.list_by_course_ordered_by_rank(course_code)

        return await self._run_read("list_selected_for_course", work)

    @read_retry
    async def list_applications_for_course(self, course_code: str) -> List[Application]:
        _require_course_code(course_code)

        async def work(uow: UnitOfWork) -> List[Application]:
            return await uow.applications.list_by_course(course_code)

        return await self._run_read("list_applications_for_course", work)

    @read_retry
    async def list_all_applications(self) -> List[Application]:
        async def work(uow: UnitOfWork) -> List[Application]:
            return await uow.applications.list_all()

        return await self._run_read("list_all_applications", work)


def _require_course_code(course_code: str) -> None:
    if not course_code or not course_code.strip():
        raise ValidationError("Course code is required")


def _require_id(value: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer", field=name)


def _rank_change(selection: SelectedApplication) -> RankChange:
    return RankChange(
        application_id=selection.application_id,
        new_rank=selection.rank,
        user_id=selection.user_id,
    )


async def _find_selection(uow: UnitOfWork, course_code: str, application_id: int) -> SelectedApplication:
    selection = await uow.selections.find_by_application_and_course(application_id, course_code)
    if not selection:
        raise NotFoundError(
            "Selected application not found",
            course_code=course_code,
            application_id=application_id,
        )
    return selection


async def _find_neighbour(uow: UnitOfWork, course_code: str, rank: int) -> SelectedApplication:
    neighbour = await uow.selections.find_by_rank(course_code, rank)
    if neighbour is None:
        error = RankGapError(
            f"No selection holds rank {rank} in course {course_code}",
            course_code=course_code,
            rank=rank,
        )
        logger.critical(
            "rank_gap_detected",
            course_code=course_code,
            missing_rank=rank,
            ranks=await uow.selections.rank_snapshot(course_code),
        )
        sentry_sdk.capture_exception(error)
        raise error
    return neighbour


async def _swap_ranks(uow: UnitOfWork, first: SelectedApplication, second: SelectedApplication) -> None:
    first.rank, second.rank = second.rank, first.rank
    await uow.selections.save(first, second)


def _infrastructure_error(operation: str, error: Exception, **context) -> InfrastructureError:
    logger.error(
        "selection_store_failure",
        operation=operation,
        error=str(error),
        error_type=type(error).__name__,
        **context,
    )
    sentry_sdk.capture_exception(error)
    return InfrastructureError(
        "Selection store is unavailable, retry later",
        operation=operation,
        **context,
    )

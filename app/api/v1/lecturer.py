"""
Lecturer API
Browse applications, select and rank applicants, and comment on selections
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status

from app.api.deps import get_selection_engine
from app.schemas.selection import (
    ApplicationActionRequest,
    ApplicationResponse,
    ApplicationWithCourseResponse,
    CommentCreate,
    CommentResponse,
    CommentsResponse,
    MessageResponse,
    RankChangeResponse,
    RankSwapResponse,
    SelectionDetailResponse,
    SelectionResponse,
)
from app.services.selection_engine import SelectionEngine

router = APIRouter()

CourseCode = Annotated[str, Path(min_length=1, max_length=20, description="Course code, e.g. COSC0001")]


@router.get("/courses/{code}/applications", response_model=List[ApplicationResponse])
async def list_course_applications(
    code: CourseCode,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    List every application submitted for a course, with the applicant.
    """
    return await engine.list_applications_for_course(code)


@router.get("/applications", response_model=List[ApplicationWithCourseResponse])
async def list_all_applications(engine: SelectionEngine = Depends(get_selection_engine)):
    """List all applications across courses."""
    return await engine.list_all_applications()


@router.post(
    "/courses/{code}/selected",
    response_model=SelectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def select_application(
    code: CourseCode,
    body: ApplicationActionRequest,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Select an application for the course

    The new selection is ranked last; promote it to move it up.

    **Errors**: 404 unknown application, 409 already selected
    """
    return await engine.select(code, body.application_id)


@router.get("/courses/{code}/selected", response_model=List[SelectionDetailResponse])
async def list_selected_applications(
    code: CourseCode,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Selected applications of the course, best rank first
    """
    return await engine.list_selected_for_course(code)


@router.delete("/courses/{code}/unselect", response_model=MessageResponse)
async def unselect_application(
    code: CourseCode,
    body: ApplicationActionRequest,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Unselect an application

    Deletes its comments and moves every lower-ranked selection up one place.
    """
    await engine.unselect(code, body.application_id)
    return MessageResponse(message="Application unselected successfully")


@router.patch("/courses/{code}/promote", response_model=RankSwapResponse)
async def promote_selection(
    code: CourseCode,
    body: ApplicationActionRequest,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Swap a selection with the one ranked directly above it

    **Errors**: 400 already at the top rank, 404 not selected
    """
    swap = await engine.promote(code, body.application_id)
    return RankSwapResponse(
        promoted=RankChangeResponse.model_validate(swap.promoted),
        demoted=RankChangeResponse.model_validate(swap.demoted),
        message="Rank promoted successfully",
    )


@router.patch("/courses/{code}/demote", response_model=RankSwapResponse)
async def demote_selection(
    code: CourseCode,
    body: ApplicationActionRequest,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Swap a selection with the one ranked directly below it

    **Errors**: 400 already at the lowest rank, 404 not selected
    """
    swap = await engine.demote(code, body.application_id)
    return RankSwapResponse(
        promoted=RankChangeResponse.model_validate(swap.promoted),
        demoted=RankChangeResponse.model_validate(swap.demoted),
        message="Rank demoted successfully",
    )


@router.post(
    "/courses/{code}/selected/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    code: CourseCode,
    body: CommentCreate,
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """
    Comment on a selected application

    **Errors**: 400 blank comment, 403 author is not a lecturer, 404 unknown selection
    """
    comment = await engine.add_comment(
        code,
        selection_id=body.selected_application_id,
        content=body.comment,
        author_user_id=body.user_id,
    )
    return CommentResponse.model_validate(comment)


@router.get(
    "/courses/{code}/selected/{selected_application_id}/comments",
    response_model=CommentsResponse,
)
async def list_comments(
    code: CourseCode,
    selected_application_id: Annotated[int, Path(gt=0)],
    engine: SelectionEngine = Depends(get_selection_engine),
):
    """All comments on a selection, oldest first."""
    comments = await engine.list_comments_for_selection(selected_application_id)
    return CommentsResponse(
        total=len(comments),
        comments=[CommentResponse.model_validate(c) for c in comments],
    )

"""
Pydantic schemas for lecturer selection APIs
Request bodies are validated here before reaching the selection engine
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.application import ApplicationType
from app.models.user import UserRole


# ==================== Requests ====================

class ApplicationActionRequest(BaseModel):
    """Body of select / unselect / promote / demote."""
    application_id: int = Field(..., gt=0, description="Application to act on")


class CommentCreate(BaseModel):
    """Body of add comment. Blank content is rejected by the engine."""
    selected_application_id: int = Field(..., gt=0)
    comment: str = Field(..., max_length=5000, description="Comment text")
    user_id: int = Field(..., gt=0, description="Lecturer writing the comment")


# ==================== Embedded records ====================

class UserBrief(BaseModel):
    """Applicant or author details."""
    id: int
    first_name: str
    last_name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class CourseBrief(BaseModel):
    code: str
    name: str

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    """Candidate application."""
    id: int
    course_code: str
    user_id: int
    type: ApplicationType
    selected: bool
    availability: Optional[str] = None
    academic_credentials: Optional[str] = None
    previous_roles: Optional[str] = None
    skills: Optional[str] = None
    created_at: datetime
    user: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class ApplicationWithCourseResponse(ApplicationResponse):
    course: Optional[CourseBrief] = None


# ==================== Selections ====================

class SelectionResponse(BaseModel):
    """A selected application and its rank in the course."""
    id: int
    application_id: int
    user_id: int
    rank: int
    created_at: datetime

    class Config:
        from_attributes = True


class SelectionDetailResponse(SelectionResponse):
    """Selection with the application and applicant embedded."""
    application: ApplicationResponse


class RankChangeResponse(BaseModel):
    application_id: int
    new_rank: int
    user_id: int

    class Config:
        from_attributes = True


class RankSwapResponse(BaseModel):
    """Both selections touched by a promote or demote."""
    promoted: RankChangeResponse
    demoted: RankChangeResponse
    message: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ==================== Comments ====================

class CommentResponse(BaseModel):
    comment_id: int = Field(..., validation_alias="id")
    selected_application_id: int
    author_user_id: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class CommentsResponse(BaseModel):
    total: int
    comments: List[CommentResponse]

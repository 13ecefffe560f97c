"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from app.models.user import User, UserRole

# Models with foreign keys to base models
from app.models.course import Course
from app.models.application import Application, ApplicationType

# Models with foreign keys to other models
from app.models.selected_application import SelectedApplication
from app.models.comment import Comment

# Export all models
__all__ = [
    "User",
    "UserRole",
    "Course",
    "Application",
    "ApplicationType",
    "SelectedApplication",
    "Comment",
]

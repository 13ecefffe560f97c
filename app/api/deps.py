"""
API Dependencies
Common dependencies for API endpoints
"""

from typing import Optional

from app.core.locks import CourseLockRegistry
from app.db.session import AsyncSessionLocal
from app.services.selection_engine import SelectionEngine

# Global engine instance (singleton pattern); all requests share its course locks
_selection_engine: Optional[SelectionEngine] = None


def get_selection_engine() -> SelectionEngine:
    """
    Get the global selection engine instance.

    Returns:
        SelectionEngine bound to the application's session factory
    """
    global _selection_engine

    if _selection_engine is None:
        _selection_engine = SelectionEngine.from_session_factory(
            AsyncSessionLocal,
            locks=CourseLockRegistry(),
        )

    return _selection_engine

"""
Ranking audit
Detects courses whose selection ranks are no longer exactly 1..N
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.selection_repository import SelectionRepository

logger = structlog.get_logger(__name__)


@dataclass
class RankViolation:
    """What is wrong with one course's ranking."""
    course_code: str
    ranks: List[int]
    missing: List[int] = field(default_factory=list)
    duplicates: List[int] = field(default_factory=list)
    out_of_range: List[int] = field(default_factory=list)


def check_ranks(course_code: str, ranks: Iterable[int]) -> Optional[RankViolation]:
    """
    Compare a course's ranks with the dense sequence 1..N.

    Returns None when the ranking is dense.
    """
    ranks = sorted(ranks)
    expected = set(range(1, len(ranks) + 1))
    counts = Counter(ranks)

    missing = sorted(expected - set(ranks))
    duplicates = sorted(rank for rank, count in counts.items() if count > 1)
    out_of_range = sorted(rank for rank in counts if rank not in expected)

    if not (missing or duplicates or out_of_range):
        return None

    return RankViolation(
        course_code=course_code,
        ranks=ranks,
        missing=missing,
        duplicates=duplicates,
        out_of_range=out_of_range,
    )


async def find_rank_violations(db: AsyncSession) -> Dict[str, RankViolation]:
    """Check every course that has selections."""
    ranks_by_course = await SelectionRepository(db).ranks_by_course()

    violations = {}
    for course_code, ranks in ranks_by_course.items():
        violation = check_ranks(course_code, ranks)
        if violation:
            logger.warning(
                "rank_violation_found",
                course_code=course_code,
                missing=violation.missing,
                duplicates=violation.duplicates,
                out_of_range=violation.out_of_range,
            )
            violations[course_code] = violation

    logger.info("rank_audit_completed", courses=len(ranks_by_course), violations=len(violations))
    return violations

"""Tests for the ranking audit."""

import pytest
from sqlalchemy import update

from app.models import SelectedApplication
from app.services.ranking_audit import check_ranks, find_rank_violations


class TestCheckRanks:
    def test_dense_ranking_is_clean(self):
        assert check_ranks("COSC0001", [3, 1, 2]) is None

    def test_empty_ranking_is_clean(self):
        assert check_ranks("COSC0001", []) is None

    def test_gap(self):
        violation = check_ranks("COSC0001", [1, 2, 4])

        assert violation.missing == [3]
        assert violation.out_of_range == [4]
        assert violation.duplicates == []

    def test_duplicate(self):
        violation = check_ranks("COSC0001", [1, 2, 2])

        assert violation.duplicates == [2]
        assert violation.missing == [3]

    def test_zero_rank_is_out_of_range(self):
        violation = check_ranks("COSC0001", [0, 1])

        assert violation.out_of_range == [0]
        assert violation.ranks == [0, 1]


@pytest.mark.asyncio
async def test_audit_reports_only_broken_courses(selection_engine, session_factory, seeded):
    for app_id in seeded.apps[:3]:
        await selection_engine.select(seeded.course, app_id)
    for app_id in seeded.other_apps:
        await selection_engine.select(seeded.other_course, app_id)

    async with session_factory() as session:
        assert await find_rank_violations(session) == {}

        await session.execute(
            update(SelectedApplication)
            .where(SelectedApplication.application_id == seeded.apps[2])
            .values(rank=7)
        )
        await session.commit()

        violations = await find_rank_violations(session)

    assert list(violations) == [seeded.course]
    assert violations[seeded.course].missing == [3]
    assert violations[seeded.course].out_of_range == [7]

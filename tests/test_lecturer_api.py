"""
Lecturer API tests

Run the FastAPI app against a seeded SQLite database through TestClient.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from app.api.deps import get_selection_engine
from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.main import app
from app.services.selection_engine import SelectionEngine
from tests.conftest import seed_sample_data

BASE = "/api/v1/lecturer"


async def _prepare(engine, session_factory):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return await seed_sample_data(session_factory)


@pytest.fixture
def api(tmp_path):
    """TestClient wired to a fresh database, plus the seeded ids."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    session_factory = build_session_factory(engine)
    data = asyncio.run(_prepare(engine, session_factory))

    selection_engine = SelectionEngine.from_session_factory(session_factory)
    app.dependency_overrides[get_selection_engine] = lambda: selection_engine

    yield TestClient(app), data

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


def select(client, course, application_id):
    return client.post(f"{BASE}/courses/{course}/selected", json={"application_id": application_id})


def ranks(client, course):
    response = client.get(f"{BASE}/courses/{course}/selected")
    assert response.status_code == 200
    return [(s["application_id"], s["rank"]) for s in response.json()]


# ============================================================
# health
# ============================================================


def test_health(api):
    client, _ = api
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ============================================================
# applications
# ============================================================


def test_list_course_applications(api):
    client, data = api
    response = client.get(f"{BASE}/courses/{data.course}/applications")

    assert response.status_code == 200
    body = response.json()
    assert [a["id"] for a in body] == data.apps
    assert body[0]["type"] == "Tutor"
    assert body[0]["selected"] is False
    assert body[0]["user"]["first_name"] == "Alan"
    assert body[0]["user"]["role"] == "Candidate"


def test_list_all_applications(api):
    client, data = api
    response = client.get(f"{BASE}/applications")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 6
    assert body[-1]["course"]["code"] == data.other_course
    assert body[-1]["type"] == "Lab Assistant"


# ============================================================
# select / unselect
# ============================================================


def test_select(api):
    client, data = api
    first = select(client, data.course, data.apps[0])
    second = select(client, data.course, data.apps[1])

    assert first.status_code == 201
    assert first.json()["rank"] == 1
    assert first.json()["application_id"] == data.apps[0]
    assert second.json()["rank"] == 2


def test_select_twice_is_conflict(api):
    client, data = api
    select(client, data.course, data.apps[0])
    response = select(client, data.course, data.apps[0])

    assert response.status_code == 409
    assert response.json()["error"] == "already_selected"


def test_select_unknown_application(api):
    client, data = api
    response = select(client, data.course, 9999)

    assert response.status_code == 404
    assert response.json() == {"detail": "Application not found for this course", "error": "not_found"}


@pytest.mark.parametrize("body", [{}, {"application_id": 0}, {"application_id": "abc"}])
def test_malformed_body_is_bad_request(api, body):
    client, data = api
    response = client.post(f"{BASE}/courses/{data.course}/selected", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_selected_list_embeds_application(api):
    client, data = api
    select(client, data.course, data.apps[0])

    response = client.get(f"{BASE}/courses/{data.course}/selected")

    assert response.status_code == 200
    [selection] = response.json()
    assert selection["application"]["id"] == data.apps[0]
    assert selection["application"]["user"]["email"] == "alan@student.example.edu"


def test_unselect_closes_gap(api):
    client, data = api
    a, b, c = data.apps[:3]
    for app_id in (a, b, c):
        select(client, data.course, app_id)

    response = client.request("DELETE", f"{BASE}/courses/{data.course}/unselect", json={"application_id": b})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Application unselected successfully"}
    assert ranks(client, data.course) == [(a, 1), (c, 2)]


def test_unselect_not_selected(api):
    client, data = api
    response = client.request(
        "DELETE", f"{BASE}/courses/{data.course}/unselect", json={"application_id": data.apps[0]}
    )

    assert response.status_code == 404


# ============================================================
# promote / demote
# ============================================================


def test_promote(api):
    client, data = api
    a, b = data.apps[:2]
    select(client, data.course, a)
    select(client, data.course, b)

    response = client.patch(f"{BASE}/courses/{data.course}/promote", json={"application_id": b})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Rank promoted successfully"
    assert body["promoted"]["application_id"] == b
    assert body["promoted"]["new_rank"] == 1
    assert body["demoted"] == {"application_id": a, "new_rank": 2, "user_id": data.candidate_ids[0]}
    assert ranks(client, data.course) == [(b, 1), (a, 2)]


def test_promote_top_is_bad_request(api):
    client, data = api
    select(client, data.course, data.apps[0])

    response = client.patch(f"{BASE}/courses/{data.course}/promote", json={"application_id": data.apps[0]})

    assert response.status_code == 400
    assert response.json()["error"] == "already_at_top"


def test_demote(api):
    client, data = api
    a, b = data.apps[:2]
    select(client, data.course, a)
    select(client, data.course, b)

    response = client.patch(f"{BASE}/courses/{data.course}/demote", json={"application_id": a})

    assert response.status_code == 200
    assert response.json()["message"] == "Rank demoted successfully"
    assert response.json()["demoted"]["new_rank"] == 2
    assert ranks(client, data.course) == [(b, 1), (a, 2)]


def test_demote_bottom_is_bad_request(api):
    client, data = api
    select(client, data.course, data.apps[0])

    response = client.patch(f"{BASE}/courses/{data.course}/demote", json={"application_id": data.apps[0]})

    assert response.status_code == 400
    assert response.json()["error"] == "already_at_bottom"


# ============================================================
# comments
# ============================================================


def test_comment_flow(api):
    client, data = api
    selection_id = select(client, data.course, data.apps[0]).json()["id"]

    created = client.post(
        f"{BASE}/courses/{data.course}/selected/comments",
        json={"selected_application_id": selection_id, "comment": " Great fit ", "user_id": data.lecturer_id},
    )
    listed = client.get(f"{BASE}/courses/{data.course}/selected/{selection_id}/comments")

    assert created.status_code == 201
    assert created.json()["content"] == "Great fit"
    assert created.json()["author_user_id"] == data.lecturer_id
    assert listed.status_code == 200
    assert listed.json()["total"] == 1
    assert listed.json()["comments"][0]["comment_id"] == created.json()["comment_id"]


def test_comment_by_candidate_is_forbidden(api):
    client, data = api
    selection_id = select(client, data.course, data.apps[0]).json()["id"]

    response = client.post(
        f"{BASE}/courses/{data.course}/selected/comments",
        json={"selected_application_id": selection_id, "comment": "Hi", "user_id": data.candidate_ids[1]},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_blank_comment_is_bad_request(api):
    client, data = api
    selection_id = select(client, data.course, data.apps[0]).json()["id"]

    response = client.post(
        f"{BASE}/courses/{data.course}/selected/comments",
        json={"selected_application_id": selection_id, "comment": "   ", "user_id": data.lecturer_id},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Comment cannot be empty"


def test_unselect_removes_comments(api):
    client, data = api
    selection_id = select(client, data.course, data.apps[0]).json()["id"]
    client.post(
        f"{BASE}/courses/{data.course}/selected/comments",
        json={"selected_application_id": selection_id, "comment": "Note", "user_id": data.lecturer_id},
    )

    client.request("DELETE", f"{BASE}/courses/{data.course}/unselect", json={"application_id": data.apps[0]})
    listed = client.get(f"{BASE}/courses/{data.course}/selected/{selection_id}/comments")

    assert listed.json() == {"total": 0, "comments": []}

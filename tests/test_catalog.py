from unittest.mock import patch

import pytest

from edusmart.domain.errors import InvalidInput
from edusmart.infrastructure.repositories import ClassRepository, ReviewRepository


def test_create_course_and_class(client, teacher, make_course):
    course, cls = make_course(teacher, title="Data Science", price=3)
    assert course["price_tokens"] == 3
    assert course["teacher_id"] == teacher["id"]
    assert course["teacher_name"] == "Nguyễn Văn An"
    assert cls["enrolled"] == 0
    assert cls["capacity"] == 30

    detail = client.get(f"/api/courses/{course['id']}", headers=teacher["headers"])
    assert detail.status_code == 200
    assert [c["id"] for c in detail.json()["classes"]] == [cls["id"]]


def test_learner_cannot_create_course(client, learner):
    response = client.post("/api/courses", json={"title": "Hack"}, headers=learner["headers"])
    assert response.status_code == 403


def test_negative_price_rejected(client, teacher):
    response = client.post("/api/courses", json={"title": "Free", "price": -1}, headers=teacher["headers"])
    assert response.status_code == 422


def test_invalid_schedule_rejected(client, teacher, make_course):
    course, _ = make_course(teacher)
    response = client.post(
        f"/api/courses/{course['id']}/classes",
        json={"name": "B", "schedule": "every monday"},
        headers=teacher["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_schedule"


def test_end_before_start_rejected(client, teacher, make_course):
    course, _ = make_course(teacher)
    response = client.post(
        f"/api/courses/{course['id']}/classes",
        json={"name": "B", "start_date": "2025-05-01", "end_date": "2025-04-01"},
        headers=teacher["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_date_range"


def test_zero_capacity_rejected(client, teacher, make_course):
    course, _ = make_course(teacher)
    response = client.post(
        f"/api/courses/{course['id']}/classes",
        json={"name": "B", "capacity": 0},
        headers=teacher["headers"],
    )
    assert response.status_code == 422


def test_other_teacher_cannot_touch_course(client, teacher, make_teacher, make_course):
    course, cls = make_course(teacher)
    other = make_teacher("Lê Văn Cường")

    edit = client.put(f"/api/courses/{course['id']}", json={"title": "Mine"}, headers=other["headers"])
    assert edit.status_code == 403
    assert client.delete(f"/api/classes/{cls['id']}", headers=other["headers"]).status_code == 403
    assert client.get(f"/api/courses/{course['id']}", headers=other["headers"]).status_code == 403


def test_delete_guards(client, teacher, learner, make_course, enroll):
    course, cls = make_course(teacher)

    response = client.delete(f"/api/courses/{course['id']}", headers=teacher["headers"])
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "has_dependents"

    assert enroll(learner, course, cls).status_code == 201
    response = client.delete(f"/api/classes/{cls['id']}", headers=teacher["headers"])
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "has_dependents"

    # a second, empty class can go, then the course still cannot
    empty = client.post(
        f"/api/courses/{course['id']}/classes", json={"name": "Empty"}, headers=teacher["headers"]
    ).json()
    assert client.delete(f"/api/classes/{empty['id']}", headers=teacher["headers"]).status_code == 204
    assert client.delete(f"/api/courses/{course['id']}", headers=teacher["headers"]).status_code == 409


def test_delete_empty_course(client, teacher):
    course = client.post("/api/courses", json={"title": "Draft"}, headers=teacher["headers"]).json()
    response = client.delete(f"/api/courses/{course['id']}", headers=teacher["headers"])
    assert response.status_code == 204
    assert client.get(f"/api/courses/{course['id']}", headers=teacher["headers"]).status_code == 404


def test_delete_course_with_reviews_and_recordings(client, db_session, teacher, learner, make_course):
    course, cls = make_course(teacher)
    review = client.post(
        f"/api/courses/{course['id']}/reviews",
        json={"course_rating": 5, "teacher_rating": 4},
        headers=learner["headers"],
    )
    assert review.status_code == 200, review.text
    recording = client.post(
        "/api/recordings",
        json={"course_id": course["id"], "video_path": "/uploads/rec/a.webm"},
        headers=teacher["headers"],
    )
    assert recording.status_code == 201, recording.text

    assert client.delete(f"/api/classes/{cls['id']}", headers=teacher["headers"]).status_code == 204
    response = client.delete(f"/api/courses/{course['id']}", headers=teacher["headers"])
    assert response.status_code == 204, response.text
    assert ReviewRepository(db_session).list_by_course(course["id"]) == []
    assert client.get("/api/recordings", headers=teacher["headers"]).json() == []


def test_capacity_cannot_drop_below_enrolled(client, teacher, register, make_course, enroll):
    course, cls = make_course(teacher, capacity=5)
    enroll(register("Trần Thị Bình", "learner"), course, cls)
    enroll(register("Phạm Minh Đức", "learner"), course, cls)

    response = client.put(
        f"/api/classes/{cls['id']}", json={"name": "Class A", "capacity": 1}, headers=teacher["headers"]
    )
    assert response.status_code == 400

    response = client.put(
        f"/api/classes/{cls['id']}", json={"name": "Class A", "capacity": 2}, headers=teacher["headers"]
    )
    assert response.status_code == 200
    assert response.json()["capacity"] == 2
    assert response.json()["enrolled"] == 2


def test_update_course(client, teacher, make_course):
    course, _ = make_course(teacher, price=2)
    response = client.put(
        f"/api/courses/{course['id']}",
        json={"title": "Python Advanced", "price": 4},
        headers=teacher["headers"],
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Python Advanced"
    assert response.json()["price_tokens"] == 4


def test_search_courses(client, teacher, make_course):
    make_course(teacher, title="Python Basics")
    make_course(teacher, title="Advanced PYTHON")
    make_course(teacher, title="Guitar")

    response = client.get("/api/courses", params={"q": "python"})
    assert response.status_code == 200
    assert [c["title"] for c in response.json()] == ["Advanced PYTHON", "Python Basics"]

    everything = client.get("/api/courses").json()
    assert len(everything) == 3
    page = client.get("/api/courses", params={"limit": 1, "offset": 1}).json()
    assert [c["title"] for c in page] == ["Advanced PYTHON"]


def test_search_served_from_cache(client):
    cached = [{"id": 7, "title": "Cached", "price_tokens": 1, "teacher_id": 1}]
    with patch("edusmart.interfaces.http.routers.courses.get_cache", return_value=cached):
        response = client.get("/api/courses", params={"q": "anything"})
    assert response.status_code == 200
    assert response.json()[0]["title"] == "Cached"


def test_writes_invalidate_search_cache(client, teacher):
    with patch("edusmart.interfaces.http.routers.courses.delete_cache_pattern") as invalidate:
        client.post("/api/courses", json={"title": "Fresh"}, headers=teacher["headers"])
    invalidate.assert_called_once_with("courses:search:*")


def test_repository_refuses_capacity_below_enrolled(db_session, teacher, register, make_course, enroll):
    """A stale enrolled count must not let capacity fall under it."""
    course, cls = make_course(teacher, capacity=5)
    enroll(register("Trần Thị Bình", "learner"), course, cls)
    enroll(register("Phạm Minh Đức", "learner"), course, cls)

    repo = ClassRepository(db_session)
    with pytest.raises(InvalidInput):
        repo.update(cls["id"], capacity=1)
    saved = repo.get(cls["id"])
    assert saved.capacity == 5
    assert saved.enrolled == 2

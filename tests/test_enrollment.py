import pytest

from edusmart.domain.errors import AlreadyEnrolled, ClassFull
from edusmart.infrastructure.repositories import ClassRepository, EnrollmentRepository


def test_enroll_takes_a_seat(client, teacher, learner, make_course, enroll):
    course, cls = make_course(teacher)
    response = enroll(learner, course, cls)
    assert response.status_code == 201
    data = response.json()
    assert data["student_id"] == learner["id"]
    assert data["class_id"] == cls["id"]

    detail = client.get(f"/api/courses/{course['id']}", headers=teacher["headers"]).json()
    assert detail["classes"][0]["enrolled"] == 1


def test_last_seat_goes_to_one_learner(client, teacher, register, make_course, enroll):
    course, cls = make_course(teacher, capacity=1)
    first = register("Trần Thị Bình", "learner")
    second = register("Phạm Minh Đức", "learner")

    assert enroll(first, course, cls).status_code == 201
    response = enroll(second, course, cls)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "class_full"

    detail = client.get(f"/api/courses/{course['id']}", headers=teacher["headers"]).json()
    assert detail["classes"][0]["enrolled"] == 1


def test_one_class_per_course(client, teacher, learner, make_course, enroll):
    course, cls = make_course(teacher)
    other_class = client.post(
        f"/api/courses/{course['id']}/classes", json={"name": "Class B"}, headers=teacher["headers"]
    ).json()

    assert enroll(learner, course, cls).status_code == 201
    response = enroll(learner, course, other_class)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "already_enrolled"


def test_enrolling_in_two_courses(teacher, learner, make_course, enroll):
    python, python_class = make_course(teacher, title="Python")
    guitar, guitar_class = make_course(teacher, title="Guitar")
    assert enroll(learner, python, python_class).status_code == 201
    assert enroll(learner, guitar, guitar_class).status_code == 201


def test_class_must_belong_to_course(teacher, learner, make_course, enroll):
    python, _ = make_course(teacher, title="Python")
    _, guitar_class = make_course(teacher, title="Guitar")
    response = enroll(learner, python, guitar_class)
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "class_not_found"


def test_teacher_cannot_enroll(teacher, make_course, enroll):
    course, cls = make_course(teacher)
    assert enroll(teacher, course, cls).status_code == 403


def test_repository_refuses_seat_when_full(db_session, teacher, register, make_course, enroll):
    """A stale 'has seat' read must not overfill the class."""
    course, cls = make_course(teacher, capacity=1)
    enroll(register("Trần Thị Bình", "learner"), course, cls)
    late = register("Phạm Minh Đức", "learner")

    with pytest.raises(ClassFull):
        EnrollmentRepository(db_session).enroll(late["id"], course["id"], cls["id"])
    assert ClassRepository(db_session).get(cls["id"]).enrolled == 1


def test_repository_releases_seat_on_duplicate(db_session, teacher, learner, make_course, enroll):
    course, cls = make_course(teacher, capacity=5)
    enroll(learner, course, cls)

    with pytest.raises(AlreadyEnrolled):
        EnrollmentRepository(db_session).enroll(learner["id"], course["id"], cls["id"])
    assert ClassRepository(db_session).get(cls["id"]).enrolled == 1

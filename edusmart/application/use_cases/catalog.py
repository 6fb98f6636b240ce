import structlog

from ..dto import ClassInput, CourseInput
from ..interfaces import IClassRepository, ICourseRepository, IUserRepository
from .kyc import require_verified
from ...domain.entities import Course, CourseClass
from ...domain.enums import Role
from ...domain.errors import (
    ClassNotFound,
    CourseNotFound,
    HasDependents,
    InvalidDateRange,
    InvalidInput,
    InvalidSchedule,
    Unauthorized,
)
from ...domain.schedule import parse_schedule

logger = structlog.get_logger()


def owned_course(courses: ICourseRepository, course_id: int, teacher_id: int) -> Course:
    course = courses.get(course_id)
    if course is None:
        raise CourseNotFound()
    if course.teacher_id != teacher_id:
        raise Unauthorized("Course belongs to another teacher")
    return course


def _check_course(payload: CourseInput) -> dict:
    title = payload.title.strip()
    if not title:
        raise InvalidInput("Course title is required")
    if payload.price < 0:
        raise InvalidInput("Price must be a non-negative number of tokens")
    return dict(
        title=title,
        description=payload.description,
        price_tokens=payload.price,
        image_url=payload.image_url,
    )


def _check_class(payload: ClassInput) -> dict:
    name = payload.name.strip()
    if not name:
        raise InvalidInput("Class name is required")
    if payload.capacity < 1:
        raise InvalidInput("Capacity must be at least 1")
    schedule = (payload.schedule or "").strip() or None
    if schedule and parse_schedule(schedule) is None:
        raise InvalidSchedule()
    if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
        raise InvalidDateRange()
    return dict(
        name=name,
        schedule=schedule,
        start_date=payload.start_date,
        end_date=payload.end_date,
        capacity=payload.capacity,
        meeting_url=payload.meeting_url,
    )


class CreateCourse:
    def __init__(self, courses: ICourseRepository, users: IUserRepository):
        self.courses = courses
        self.users = users

    def execute(self, teacher_id: int, payload: CourseInput) -> Course:
        teacher = require_verified(self.users, teacher_id)
        if teacher.role is not Role.TEACHER:
            raise Unauthorized("Only teachers can publish courses")
        course = self.courses.create(
            teacher_id=teacher.id, teacher_name=teacher.full_name, **_check_course(payload)
        )
        logger.info("course_created", course_id=course.id, teacher_id=teacher_id)
        return course


class UpdateCourse:
    def __init__(self, courses: ICourseRepository, users: IUserRepository):
        self.courses = courses
        self.users = users

    def execute(self, teacher_id: int, course_id: int, payload: CourseInput) -> Course:
        require_verified(self.users, teacher_id)
        owned_course(self.courses, course_id, teacher_id)
        return self.courses.update(course_id, **_check_course(payload))


class DeleteCourse:
    def __init__(self, courses: ICourseRepository):
        self.courses = courses

    def execute(self, teacher_id: int, course_id: int) -> None:
        owned_course(self.courses, course_id, teacher_id)
        remaining = self.courses.count_classes(course_id)
        if remaining > 0:
            raise HasDependents(f"Course still has {remaining} class(es); delete them first")
        self.courses.delete(course_id)
        logger.info("course_deleted", course_id=course_id, teacher_id=teacher_id)


class GetCourse:
    def __init__(self, courses: ICourseRepository, classes: IClassRepository):
        self.courses = courses
        self.classes = classes

    def execute(self, teacher_id: int, course_id: int) -> tuple[Course, list[CourseClass]]:
        course = owned_course(self.courses, course_id, teacher_id)
        return course, self.classes.list_by_courses([course_id])


class SearchCourses:
    def __init__(self, courses: ICourseRepository):
        self.courses = courses

    def execute(self, query: str = "", limit: int = 20, offset: int = 0) -> list[Course]:
        return self.courses.search(query.strip(), limit, offset)


class CreateClass:
    def __init__(self, courses: ICourseRepository, classes: IClassRepository):
        self.courses = courses
        self.classes = classes

    def execute(self, teacher_id: int, course_id: int, payload: ClassInput) -> CourseClass:
        owned_course(self.courses, course_id, teacher_id)
        cls = self.classes.create(course_id=course_id, enrolled=0, **_check_class(payload))
        logger.info("class_created", class_id=cls.id, course_id=course_id)
        return cls


class UpdateClass:
    def __init__(self, courses: ICourseRepository, classes: IClassRepository):
        self.courses = courses
        self.classes = classes

    def execute(self, teacher_id: int, class_id: int, payload: ClassInput) -> CourseClass:
        cls = self.classes.get(class_id)
        if cls is None:
            raise ClassNotFound()
        owned_course(self.courses, cls.course_id, teacher_id)
        fields = _check_class(payload)
        if fields["capacity"] < cls.enrolled:
            raise InvalidInput(f"Capacity cannot drop below the {cls.enrolled} enrolled learner(s)")
        return self.classes.update(class_id, **fields)


class DeleteClass:
    def __init__(self, courses: ICourseRepository, classes: IClassRepository):
        self.courses = courses
        self.classes = classes

    def execute(self, teacher_id: int, class_id: int) -> None:
        cls = self.classes.get(class_id)
        if cls is None:
            raise ClassNotFound()
        owned_course(self.courses, cls.course_id, teacher_id)
        learners = self.classes.count_enrollments(class_id)
        if learners > 0:
            raise HasDependents(f"Class has {learners} enrolled learner(s)")
        self.classes.delete(class_id)
        logger.info("class_deleted", class_id=class_id, course_id=cls.course_id)

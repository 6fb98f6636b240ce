"""Attendance check-in and token settlement."""
from datetime import datetime
from typing import Callable

import structlog

from ..interfaces import (
    IAttendanceRepository,
    IClassRepository,
    ICourseRepository,
    IEnrollmentRepository,
    IUserRepository,
)
from ...domain.entities import Attendance
from ...domain.errors import (
    AlreadyCheckedIn,
    ClassEnded,
    ClassNotFound,
    ClassNotStarted,
    CourseNotFound,
    InsufficientTokens,
    NotEnrolled,
    Unauthorized,
    UserNotFound,
)

logger = structlog.get_logger()


class CheckIn:
    """A teacher confirms a learner's presence; the learner pays the course price.

    The checks run in a fixed order so the caller always gets the first rule
    that fails. The final debit and ledger insert are delegated to
    ``IAttendanceRepository.settle`` which applies both or neither.
    """

    def __init__(
        self,
        enrollments: IEnrollmentRepository,
        classes: IClassRepository,
        courses: ICourseRepository,
        users: IUserRepository,
        attendances: IAttendanceRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.enrollments = enrollments
        self.classes = classes
        self.courses = courses
        self.users = users
        self.attendances = attendances
        self.clock = clock

    def execute(self, teacher_id: int, student_id: int, course_id: int) -> Attendance:
        enrollment = self.enrollments.get_for(student_id, course_id)
        if enrollment is None:
            raise NotEnrolled()

        course = self.courses.get(course_id)
        if course is None:
            raise CourseNotFound()
        if course.teacher_id != teacher_id:
            raise Unauthorized("Only the course teacher can check learners in")
        cls = self.classes.get(enrollment.class_id)
        if cls is None:
            raise ClassNotFound()
        student = self.users.get(student_id)
        if student is None:
            raise UserNotFound()

        now = self.clock()
        today = now.date()
        if cls.start_date and today < cls.start_date:
            raise ClassNotStarted()
        if cls.end_date and today > cls.end_date:
            raise ClassEnded()

        if self.attendances.exists_on(student_id, course_id, today):
            raise AlreadyCheckedIn()

        price = course.price_tokens
        if student.wallet_tokens < price:
            raise InsufficientTokens(
                f"Wallet holds {student.wallet_tokens} token(s), class costs {price}"
            )

        record = self.attendances.settle(
            student_id=student_id,
            course_id=course_id,
            class_id=cls.id,
            course_title=f"{course.title} - {cls.name}",
            price=price,
            at=now,
        )
        logger.info(
            "checkin_settled",
            student_id=student_id,
            course_id=course_id,
            class_id=cls.id,
            tokens=price,
        )
        return record

import structlog

from ..interfaces import IClassRepository, IEnrollmentRepository, IUserRepository
from ...domain.entities import Enrollment
from ...domain.enums import Role
from ...domain.errors import AlreadyEnrolled, ClassFull, ClassNotFound, Unauthorized, UserNotFound

logger = structlog.get_logger()


class EnrollStudent:
    def __init__(self, enrollments: IEnrollmentRepository, classes: IClassRepository, users: IUserRepository):
        self.enrollments = enrollments
        self.classes = classes
        self.users = users

    def execute(self, student_id: int, course_id: int, class_id: int) -> Enrollment:
        student = self.users.get(student_id)
        if student is None:
            raise UserNotFound()
        if student.role is not Role.LEARNER:
            raise Unauthorized("Only learners can enroll")

        # one class per course, whichever class the learner picks
        if self.enrollments.get_for(student_id, course_id) is not None:
            raise AlreadyEnrolled()
        cls = self.classes.get(class_id)
        if cls is None or cls.course_id != course_id:
            raise ClassNotFound()
        if not cls.has_free_seat:
            raise ClassFull()

        # the repository re-checks the seat atomically
        enrollment = self.enrollments.enroll(student_id, course_id, class_id)
        logger.info("student_enrolled", student_id=student_id, course_id=course_id, class_id=class_id)
        return enrollment

from decimal import ROUND_HALF_UP, Decimal

import structlog

from ..dto import ReviewInput
from ..interfaces import ICourseRepository, IReviewRepository, IUserRepository
from ...domain.entities import Review
from ...domain.enums import Role
from ...domain.errors import CourseNotFound, InvalidInput, Unauthorized, UserNotFound

logger = structlog.get_logger()


def average_rating(ratings: list[int]) -> float:
    """Mean rounded half-up to one decimal; 0 when nobody has rated yet."""
    if not ratings:
        return 0
    mean = Decimal(sum(ratings)) / len(ratings)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class SubmitReview:
    def __init__(self, reviews: IReviewRepository, courses: ICourseRepository, users: IUserRepository):
        self.reviews = reviews
        self.courses = courses
        self.users = users

    def execute(self, student_id: int, course_id: int, payload: ReviewInput) -> Review:
        student = self.users.get(student_id)
        if student is None:
            raise UserNotFound()
        if student.role is not Role.LEARNER:
            raise Unauthorized("Only learners can review courses")
        if self.courses.get(course_id) is None:
            raise CourseNotFound()
        for name in ("course_rating", "teacher_rating"):
            value = getattr(payload, name)
            if not 1 <= value <= 5:
                raise InvalidInput(f"{name} must be between 1 and 5")

        review = self.reviews.upsert(
            student_id=student_id,
            course_id=course_id,
            course_rating=payload.course_rating,
            teacher_rating=payload.teacher_rating,
            comment=payload.comment,
            student_name=student.full_name,
        )
        logger.info("review_saved", student_id=student_id, course_id=course_id)
        return review


class RatingSummary:
    def __init__(self, reviews: IReviewRepository, courses: ICourseRepository):
        self.reviews = reviews
        self.courses = courses

    def for_course(self, course_id: int) -> tuple[float, int]:
        if self.courses.get(course_id) is None:
            raise CourseNotFound()
        ratings = self.reviews.course_ratings(course_id)
        return average_rating(ratings), len(ratings)

    def for_teacher(self, teacher_id: int) -> tuple[float, int]:
        ratings = self.reviews.teacher_ratings(teacher_id)
        return average_rating(ratings), len(ratings)

    def list_reviews(self, course_id: int) -> list[Review]:
        if self.courses.get(course_id) is None:
            raise CourseNotFound()
        return self.reviews.list_by_course(course_id)

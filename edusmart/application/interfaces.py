from datetime import date, datetime
from typing import Callable

from ..domain.entities import Attendance, Course, CourseClass, Enrollment, Recording, Review, User
from ..domain.enums import KycStatus, Role


class IUserRepository:
    def get(self, user_id: int) -> User | None: ...
    def get_with_password(self, username: str) -> tuple[User, str] | None: ...
    def exists_with_role(self, role: Role) -> bool: ...
    def create_with_next_id(
        self,
        full_name: str,
        role: Role,
        password_hash: str,
        wallet_tokens: int,
        make_username: Callable[[str], str],
        kyc_status: KycStatus = KycStatus.NONE,
        is_verified: bool = False,
    ) -> User: ...
    def save_kyc(
        self,
        user_id: int,
        status: KycStatus,
        is_verified: bool,
        kyc_type: str | None = None,
        data: dict | None = None,
        files: dict | None = None,
    ) -> User: ...
    def list_by_kyc_status(self, status: KycStatus) -> list[User]: ...
    def update_avatar(self, user_id: int, path: str) -> User: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...


class ICourseRepository:
    def get(self, course_id: int) -> Course | None: ...
    def create(self, **fields) -> Course: ...
    def update(self, course_id: int, **fields) -> Course: ...
    def delete(self, course_id: int) -> None: ...
    def count_classes(self, course_id: int) -> int: ...
    def search(self, query: str, limit: int, offset: int) -> list[Course]: ...
    def list_by_teacher(self, teacher_id: int) -> list[Course]: ...
    def list_excluding(self, course_ids: list[int]) -> list[Course]: ...


class IClassRepository:
    def get(self, class_id: int) -> CourseClass | None: ...
    def create(self, **fields) -> CourseClass: ...
    def update(self, class_id: int, **fields) -> CourseClass: ...
    def delete(self, class_id: int) -> None: ...
    def count_enrollments(self, class_id: int) -> int: ...
    def list_by_courses(self, course_ids: list[int]) -> list[CourseClass]: ...


class IEnrollmentRepository:
    def get_for(self, student_id: int, course_id: int) -> Enrollment | None: ...
    def enroll(self, student_id: int, course_id: int, class_id: int) -> Enrollment: ...
    def list_by_student(self, student_id: int) -> list[Enrollment]: ...
    def list_by_courses(self, course_ids: list[int]) -> list[Enrollment]: ...
    def list_students_by_class(self, class_id: int) -> list[tuple[Enrollment, User]]: ...


class IAttendanceRepository:
    def exists_on(self, student_id: int, course_id: int, day: date) -> bool: ...
    def settle(
        self,
        student_id: int,
        course_id: int,
        class_id: int,
        course_title: str,
        price: int,
        at: datetime,
    ) -> Attendance: ...
    def list_by_student(self, student_id: int) -> list[Attendance]: ...
    def list_by_courses(self, course_ids: list[int], limit: int) -> list[Attendance]: ...
    def total_tokens(self, *, course_ids: list[int] | None = None, student_id: int | None = None) -> int: ...
    def count(self, *, course_ids: list[int] | None = None, student_id: int | None = None) -> int: ...
    def daily_totals(self, course_ids: list[int], day: date) -> tuple[int, int]: ...
    def count_present(self, class_id: int, day: date) -> int: ...


class IReviewRepository:
    def upsert(
        self,
        student_id: int,
        course_id: int,
        course_rating: int,
        teacher_rating: int,
        comment: str | None,
        student_name: str | None,
    ) -> Review: ...
    def list_by_course(self, course_id: int) -> list[Review]: ...
    def course_ratings(self, course_id: int) -> list[int]: ...
    def teacher_ratings(self, teacher_id: int) -> list[int]: ...


class IRecordingRepository:
    def get(self, recording_id: int) -> Recording | None: ...
    def create(self, **fields) -> Recording: ...
    def set_allow_download(self, recording_id: int, allow: bool) -> Recording: ...
    def list_by_courses(self, course_ids: list[int]) -> list[Recording]: ...


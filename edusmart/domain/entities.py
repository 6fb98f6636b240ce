from dataclasses import dataclass, field
from datetime import date, datetime

from .enums import KycStatus, Role


@dataclass(frozen=True)
class User:
    id: int | None
    custom_id: str
    full_name: str
    username: str
    role: Role
    wallet_tokens: int = 10
    kyc_status: KycStatus = KycStatus.NONE
    kyc_type: str | None = None
    kyc_data: dict = field(default_factory=dict)
    kyc_files: dict = field(default_factory=dict)
    is_verified: bool = False
    avatar: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Course:
    id: int | None
    title: str
    teacher_id: int
    price_tokens: int = 1
    description: str | None = None
    image_url: str | None = None
    teacher_name: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class CourseClass:
    id: int | None
    course_id: int
    name: str
    capacity: int = 30
    enrolled: int = 0
    schedule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    meeting_url: str | None = None

    @property
    def has_free_seat(self) -> bool:
        return self.enrolled < self.capacity


@dataclass(frozen=True)
class Enrollment:
    id: int | None
    student_id: int
    course_id: int
    class_id: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class Attendance:
    id: int | None
    student_id: int
    course_id: int
    class_id: int
    course_title: str
    tokens_deducted: int
    checkin_time: datetime
    checkin_date: date


@dataclass(frozen=True)
class Review:
    id: int | None
    student_id: int
    course_id: int
    course_rating: int
    teacher_rating: int
    comment: str | None = None
    student_name: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Recording:
    id: int | None
    course_id: int
    video_path: str
    file_name: str
    class_id: int | None = None
    class_name: str | None = None
    allow_download: bool = False
    recorded_at: datetime | None = None

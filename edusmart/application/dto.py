from dataclasses import dataclass, field
from datetime import date

from ..domain.enums import Role


@dataclass
class RegisterUserInput:
    full_name: str
    role: str
    password: str


@dataclass
class RegisteredUser:
    user_id: int
    custom_id: str
    login_identifier: str


@dataclass
class AuthenticatedUser:
    user_id: int
    role: Role


@dataclass
class CourseInput:
    title: str
    description: str | None = None
    price: int = 1
    image_url: str | None = None


@dataclass
class ClassInput:
    name: str
    schedule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    capacity: int = 30
    meeting_url: str | None = None


@dataclass
class KycSubmission:
    kyc_type: str
    data: dict = field(default_factory=dict)
    files: dict = field(default_factory=dict)


@dataclass
class ReviewInput:
    course_rating: int
    teacher_rating: int
    comment: str | None = None

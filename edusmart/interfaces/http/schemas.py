from datetime import date, datetime
from pydantic import BaseModel, Field

# --- auth / users

class RegisterReq(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    role: str
    password: str = Field(min_length=6)

class RegisterResp(BaseModel):
    id: int
    custom_id: str
    login_identifier: str

class LoginReq(BaseModel):
    identifier: str
    password: str

class TokenResp(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResp(BaseModel):
    id: int
    custom_id: str
    full_name: str
    username: str
    role: str
    wallet_tokens: int
    kyc_status: str
    is_verified: bool
    avatar: str | None = None
    class Config: from_attributes = True

class AvatarReq(BaseModel):
    path: str

# --- KYC

class KycReq(BaseModel):
    kyc_type: str
    data: dict[str, str] = {}
    files: dict[str, str] = {}

class KycResp(BaseModel):
    id: int
    custom_id: str
    full_name: str
    kyc_status: str
    kyc_type: str | None = None
    kyc_data: dict = {}
    kyc_files: dict = {}
    is_verified: bool
    class Config: from_attributes = True

# --- catalog

class CourseCreate(BaseModel):
    title: str
    description: str | None = None
    price: int = Field(1, ge=0)
    image_url: str | None = None

class CourseOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    price_tokens: int
    image_url: str | None = None
    teacher_id: int
    teacher_name: str | None = None
    class Config: from_attributes = True

class ClassCreate(BaseModel):
    name: str
    schedule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    capacity: int = Field(30, ge=1)
    meeting_url: str | None = None

class ClassOut(BaseModel):
    id: int
    course_id: int
    name: str
    schedule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    capacity: int
    enrolled: int
    meeting_url: str | None = None
    class Config: from_attributes = True

class CourseDetail(CourseOut):
    classes: list[ClassOut] = []

# --- enrollment / attendance

class EnrollReq(BaseModel):
    course_id: int
    class_id: int

class EnrollmentOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    class_id: int
    class Config: from_attributes = True

class CheckInReq(BaseModel):
    student_id: int
    course_id: int

class AttendanceOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    class_id: int
    course_title: str
    tokens_deducted: int
    checkin_time: datetime
    class Config: from_attributes = True

# --- reviews

class ReviewReq(BaseModel):
    course_rating: int = Field(ge=1, le=5)
    teacher_rating: int = Field(ge=1, le=5)
    comment: str | None = None

class ReviewOut(BaseModel):
    id: int
    student_id: int
    student_name: str | None = None
    course_id: int
    course_rating: int
    teacher_rating: int
    comment: str | None = None
    class Config: from_attributes = True

class RatingOut(BaseModel):
    average: float
    count: int

# --- recordings

class RecordingReq(BaseModel):
    course_id: int
    class_id: int | None = None
    class_name: str | None = None
    video_path: str

class RecordingOut(BaseModel):
    id: int
    course_id: int
    class_id: int | None = None
    class_name: str | None = None
    file_name: str
    video_path: str | None = None
    allow_download: bool
    download_url: str | None = None
    recorded_at: datetime | None = None

# --- dashboards

class MarketItem(BaseModel):
    course: CourseOut
    available_classes: list[ClassOut]

class WalletOut(BaseModel):
    balance: int
    history: list[AttendanceOut]

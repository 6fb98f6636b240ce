from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    custom_id: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    wallet_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    kyc_status: Mapped[str] = mapped_column(String(16), nullable=False, default="none", index=True)
    kyc_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    kyc_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    kyc_files: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    avatar: Mapped[str] = mapped_column(String(512), nullable=False, default="/default-avatar.png")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now
    )

    __table_args__ = (CheckConstraint("wallet_tokens >= 0", name="ck_users_wallet_non_negative"),)

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, custom_id={self.custom_id!r}, role={self.role!r})"


class IdSequenceORM(Base):
    __tablename__ = "id_sequences"

    role: Mapped[str] = mapped_column(String(16), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CourseORM(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    teacher_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now
    )

    # no cascade: a course with classes must not be deleted
    classes: Mapped[list["ClassORM"]] = relationship(
        "ClassORM",
        back_populates="course",
        order_by="ClassORM.id",
    )

    __table_args__ = (CheckConstraint("price_tokens >= 0", name="ck_courses_price_non_negative"),)

    def __repr__(self) -> str:
        return f"CourseORM(id={self.id!r}, title={self.title!r})"


class ClassORM(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    schedule: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    enrolled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meeting_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    course: Mapped["CourseORM"] = relationship("CourseORM", back_populates="classes")

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_classes_capacity_positive"),
        CheckConstraint("enrolled >= 0", name="ck_classes_enrolled_non_negative"),
        CheckConstraint("enrolled <= capacity", name="ck_classes_enrolled_within_capacity"),
    )

    def __repr__(self) -> str:
        return f"ClassORM(id={self.id!r}, course_id={self.course_id!r}, name={self.name!r})"


class EnrollmentORM(Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now
    )

    student: Mapped["UserORM"] = relationship("UserORM")

    __table_args__ = (UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),)


class AttendanceORM(Base):
    __tablename__ = "attendances"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    course_title: Mapped[str] = mapped_column(String(512), nullable=False)
    tokens_deducted: Mapped[int] = mapped_column(Integer, nullable=False)
    checkin_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    checkin_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "checkin_date", name="uq_attendance_student_course_day"),
    )


class ReviewORM(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    student_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    course_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    teacher_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=datetime.now, onupdate=datetime.now
    )

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_review_student_course"),
        CheckConstraint("course_rating BETWEEN 1 AND 5", name="ck_reviews_course_rating"),
        CheckConstraint("teacher_rating BETWEEN 1 AND 5", name="ck_reviews_teacher_rating"),
    )


class RecordingORM(Base):
    __tablename__ = "recordings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    class_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    class_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    video_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    allow_download: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


__all__ = [
    "Base",
    "UserORM",
    "IdSequenceORM",
    "CourseORM",
    "ClassORM",
    "EnrollmentORM",
    "AttendanceORM",
    "ReviewORM",
    "RecordingORM",
]

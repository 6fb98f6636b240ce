import json
from datetime import date, datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import (
    AttendanceORM,
    ClassORM,
    CourseORM,
    EnrollmentORM,
    IdSequenceORM,
    RecordingORM,
    ReviewORM,
    UserORM,
)
from ..application.interfaces import (
    IAttendanceRepository,
    IClassRepository,
    ICourseRepository,
    IEnrollmentRepository,
    IRecordingRepository,
    IReviewRepository,
    IUserRepository,
)
from ..domain.entities import Attendance, Course, CourseClass, Enrollment, Recording, Review, User
from ..domain.enums import KycStatus, Role
from ..domain.errors import (
    AlreadyCheckedIn,
    AlreadyEnrolled,
    ClassFull,
    Conflict,
    InsufficientTokens,
    InvalidInput,
)

_REGISTRATION_ATTEMPTS = 3


def user_to_domain(u: UserORM) -> User:
    return User(
        id=u.id,
        custom_id=u.custom_id,
        full_name=u.full_name,
        username=u.username,
        role=Role(u.role),
        wallet_tokens=u.wallet_tokens,
        kyc_status=KycStatus(u.kyc_status),
        kyc_type=u.kyc_type,
        kyc_data=json.loads(u.kyc_data) if u.kyc_data else {},
        kyc_files=json.loads(u.kyc_files) if u.kyc_files else {},
        is_verified=u.is_verified,
        avatar=u.avatar,
        created_at=u.created_at,
    )


def course_to_domain(c: CourseORM) -> Course:
    return Course(
        id=c.id,
        title=c.title,
        teacher_id=c.teacher_id,
        price_tokens=c.price_tokens,
        description=c.description,
        image_url=c.image_url,
        teacher_name=c.teacher_name,
        created_at=c.created_at,
    )


def class_to_domain(c: ClassORM) -> CourseClass:
    return CourseClass(
        id=c.id,
        course_id=c.course_id,
        name=c.name,
        capacity=c.capacity,
        enrolled=c.enrolled,
        schedule=c.schedule,
        start_date=c.start_date,
        end_date=c.end_date,
        meeting_url=c.meeting_url,
    )


def enrollment_to_domain(e: EnrollmentORM) -> Enrollment:
    return Enrollment(
        id=e.id,
        student_id=e.student_id,
        course_id=e.course_id,
        class_id=e.class_id,
        created_at=e.created_at,
    )


def attendance_to_domain(a: AttendanceORM) -> Attendance:
    return Attendance(
        id=a.id,
        student_id=a.student_id,
        course_id=a.course_id,
        class_id=a.class_id,
        course_title=a.course_title,
        tokens_deducted=a.tokens_deducted,
        checkin_time=a.checkin_time,
        checkin_date=a.checkin_date,
    )


def review_to_domain(r: ReviewORM) -> Review:
    return Review(
        id=r.id,
        student_id=r.student_id,
        course_id=r.course_id,
        course_rating=r.course_rating,
        teacher_rating=r.teacher_rating,
        comment=r.comment,
        student_name=r.student_name,
        updated_at=r.updated_at,
    )


def recording_to_domain(r: RecordingORM) -> Recording:
    return Recording(
        id=r.id,
        course_id=r.course_id,
        video_path=r.video_path,
        file_name=r.file_name,
        class_id=r.class_id,
        class_name=r.class_name,
        allow_download=r.allow_download,
        recorded_at=r.recorded_at,
    )


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> User | None:
        row = self.db.get(UserORM, user_id)
        return user_to_domain(row) if row else None

    def get_with_password(self, username: str) -> tuple[User, str] | None:
        row = self.db.query(UserORM).filter(UserORM.username == username).first()
        return (user_to_domain(row), row.password_hash) if row else None

    def exists_with_role(self, role: Role) -> bool:
        return self.db.query(UserORM.id).filter(UserORM.role == role.value).first() is not None

    def _next_sequence_value(self, role: Role) -> int:
        bump = (
            update(IdSequenceORM)
            .where(IdSequenceORM.role == role.value)
            .values(last_value=IdSequenceORM.last_value + 1)
        )
        if self.db.execute(bump).rowcount == 0:
            # first account of this role; a concurrent insert fails on the primary key
            self.db.add(IdSequenceORM(role=role.value, last_value=1))
            self.db.flush()
            return 1
        return self.db.execute(
            select(IdSequenceORM.last_value).where(IdSequenceORM.role == role.value)
        ).scalar_one()

    def create_with_next_id(
        self,
        full_name,
        role,
        password_hash,
        wallet_tokens,
        make_username,
        kyc_status=KycStatus.NONE,
        is_verified=False,
    ) -> User:
        for attempt in range(1, _REGISTRATION_ATTEMPTS + 1):
            try:
                custom_id = f"{role.id_prefix}{self._next_sequence_value(role):06d}"
                row = UserORM(
                    custom_id=custom_id,
                    full_name=full_name,
                    username=make_username(custom_id),
                    password_hash=password_hash,
                    role=role.value,
                    wallet_tokens=wallet_tokens,
                    kyc_status=kyc_status.value,
                    is_verified=is_verified,
                )
                self.db.add(row)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if attempt == _REGISTRATION_ATTEMPTS:
                    raise Conflict("Could not allocate an account id, try again")
                continue
            self.db.refresh(row)
            return user_to_domain(row)

    def save_kyc(self, user_id, status, is_verified, kyc_type=None, data=None, files=None) -> User:
        row = self.db.get(UserORM, user_id)
        row.kyc_status = status.value
        row.is_verified = is_verified
        if kyc_type is not None:
            row.kyc_type = kyc_type
            row.kyc_data = json.dumps(data or {}, ensure_ascii=False)
            row.kyc_files = json.dumps(files or {}, ensure_ascii=False)
        self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)

    def list_by_kyc_status(self, status: KycStatus) -> list[User]:
        rows = (
            self.db.query(UserORM)
            .filter(UserORM.kyc_status == status.value)
            .order_by(UserORM.id)
            .all()
        )
        return [user_to_domain(r) for r in rows]

    def update_avatar(self, user_id: int, path: str) -> User:
        row = self.db.get(UserORM, user_id)
        row.avatar = path
        self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)


class CourseRepository(ICourseRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, course_id: int) -> Course | None:
        row = self.db.get(CourseORM, course_id)
        return course_to_domain(row) if row else None

    def create(self, **fields) -> Course:
        row = CourseORM(**fields)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return course_to_domain(row)

    def update(self, course_id: int, **fields) -> Course:
        row = self.db.get(CourseORM, course_id)
        for name, value in fields.items():
            setattr(row, name, value)
        self.db.commit(); self.db.refresh(row)
        return course_to_domain(row)

    def delete(self, course_id: int) -> None:
        # reviews and recordings go with the course; classes are guarded by the caller
        self.db.execute(delete(ReviewORM).where(ReviewORM.course_id == course_id))
        self.db.execute(delete(RecordingORM).where(RecordingORM.course_id == course_id))
        row = self.db.get(CourseORM, course_id)
        self.db.delete(row)
        self.db.commit()

    def count_classes(self, course_id: int) -> int:
        return self.db.query(func.count(ClassORM.id)).filter(ClassORM.course_id == course_id).scalar()

    def search(self, query: str, limit: int, offset: int) -> list[Course]:
        q = self.db.query(CourseORM)
        if query:
            q = q.filter(CourseORM.title.ilike(f"%{query}%"))
        rows = q.order_by(CourseORM.id.desc()).limit(limit).offset(offset).all()
        return [course_to_domain(r) for r in rows]

    def list_by_teacher(self, teacher_id: int) -> list[Course]:
        rows = (
            self.db.query(CourseORM)
            .filter(CourseORM.teacher_id == teacher_id)
            .order_by(CourseORM.id.desc())
            .all()
        )
        return [course_to_domain(r) for r in rows]

    def list_excluding(self, course_ids: list[int]) -> list[Course]:
        q = self.db.query(CourseORM)
        if course_ids:
            q = q.filter(CourseORM.id.notin_(course_ids))
        return [course_to_domain(r) for r in q.order_by(CourseORM.id.desc()).all()]


class ClassRepository(IClassRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, class_id: int) -> CourseClass | None:
        row = self.db.get(ClassORM, class_id)
        return class_to_domain(row) if row else None

    def create(self, **fields) -> CourseClass:
        row = ClassORM(**fields)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return class_to_domain(row)

    def update(self, class_id: int, **fields) -> CourseClass:
        fields.pop("enrolled", None)
        row = self.db.get(ClassORM, class_id)
        for name, value in fields.items():
            setattr(row, name, value)
        try:
            self.db.commit()
        except IntegrityError:
            # an enroll landed after the caller checked capacity
            self.db.rollback()
            raise InvalidInput("Capacity cannot drop below the enrolled learners")
        self.db.refresh(row)
        return class_to_domain(row)

    def delete(self, class_id: int) -> None:
        row = self.db.get(ClassORM, class_id)
        self.db.delete(row); self.db.commit()

    def count_enrollments(self, class_id: int) -> int:
        return self.db.query(func.count(EnrollmentORM.id)).filter(EnrollmentORM.class_id == class_id).scalar()

    def list_by_courses(self, course_ids: list[int]) -> list[CourseClass]:
        if not course_ids:
            return []
        rows = (
            self.db.query(ClassORM)
            .filter(ClassORM.course_id.in_(course_ids))
            .order_by(ClassORM.id)
            .all()
        )
        return [class_to_domain(r) for r in rows]


class EnrollmentRepository(IEnrollmentRepository):
    def __init__(self, db: Session): self.db = db

    def get_for(self, student_id: int, course_id: int) -> Enrollment | None:
        row = (
            self.db.query(EnrollmentORM)
            .filter(EnrollmentORM.student_id == student_id, EnrollmentORM.course_id == course_id)
            .first()
        )
        return enrollment_to_domain(row) if row else None

    def enroll(self, student_id: int, course_id: int, class_id: int) -> Enrollment:
        """Take a seat and write the enrollment row in one transaction."""
        reserved = self.db.execute(
            update(ClassORM)
            .where(ClassORM.id == class_id, ClassORM.enrolled < ClassORM.capacity)
            .values(enrolled=ClassORM.enrolled + 1)
        ).rowcount
        if reserved == 0:
            self.db.rollback()
            raise ClassFull()
        row = EnrollmentORM(student_id=student_id, course_id=course_id, class_id=class_id)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # the seat taken above is released together with the row
            self.db.rollback()
            raise AlreadyEnrolled()
        self.db.refresh(row)
        return enrollment_to_domain(row)

    def list_by_student(self, student_id: int) -> list[Enrollment]:
        rows = (
            self.db.query(EnrollmentORM)
            .filter(EnrollmentORM.student_id == student_id)
            .order_by(EnrollmentORM.id)
            .all()
        )
        return [enrollment_to_domain(r) for r in rows]

    def list_by_courses(self, course_ids: list[int]) -> list[Enrollment]:
        if not course_ids:
            return []
        rows = self.db.query(EnrollmentORM).filter(EnrollmentORM.course_id.in_(course_ids)).all()
        return [enrollment_to_domain(r) for r in rows]

    def list_students_by_class(self, class_id: int) -> list[tuple[Enrollment, User]]:
        rows = (
            self.db.query(EnrollmentORM, UserORM)
            .join(UserORM, EnrollmentORM.student_id == UserORM.id)
            .filter(EnrollmentORM.class_id == class_id)
            .order_by(EnrollmentORM.id)
            .all()
        )
        return [(enrollment_to_domain(e), user_to_domain(u)) for e, u in rows]


class AttendanceRepository(IAttendanceRepository):
    def __init__(self, db: Session): self.db = db

    def exists_on(self, student_id: int, course_id: int, day: date) -> bool:
        row = (
            self.db.query(AttendanceORM.id)
            .filter(
                AttendanceORM.student_id == student_id,
                AttendanceORM.course_id == course_id,
                AttendanceORM.checkin_date == day,
            )
            .first()
        )
        return row is not None

    def settle(self, student_id, course_id, class_id, course_title, price, at: datetime) -> Attendance:
        """Append the ledger row and debit the wallet, both or neither."""
        row = AttendanceORM(
            student_id=student_id,
            course_id=course_id,
            class_id=class_id,
            course_title=course_title,
            tokens_deducted=price,
            checkin_time=at,
            checkin_date=at.date(),
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyCheckedIn()

        debited = self.db.execute(
            update(UserORM)
            .where(UserORM.id == student_id, UserORM.wallet_tokens >= price)
            .values(wallet_tokens=UserORM.wallet_tokens - price)
        ).rowcount
        if debited == 0:
            self.db.rollback()
            raise InsufficientTokens()
        self.db.commit()
        self.db.refresh(row)
        return attendance_to_domain(row)

    def _scoped(self, q, course_ids, student_id):
        if course_ids is not None:
            q = q.filter(AttendanceORM.course_id.in_(course_ids))
        if student_id is not None:
            q = q.filter(AttendanceORM.student_id == student_id)
        return q

    def list_by_student(self, student_id: int) -> list[Attendance]:
        rows = (
            self.db.query(AttendanceORM)
            .filter(AttendanceORM.student_id == student_id)
            .order_by(AttendanceORM.checkin_time.desc(), AttendanceORM.id.desc())
            .all()
        )
        return [attendance_to_domain(r) for r in rows]

    def list_by_courses(self, course_ids: list[int], limit: int) -> list[Attendance]:
        if not course_ids:
            return []
        rows = (
            self.db.query(AttendanceORM)
            .filter(AttendanceORM.course_id.in_(course_ids))
            .order_by(AttendanceORM.checkin_time.desc(), AttendanceORM.id.desc())
            .limit(limit)
            .all()
        )
        return [attendance_to_domain(r) for r in rows]

    def total_tokens(self, *, course_ids=None, student_id=None) -> int:
        q = self._scoped(self.db.query(func.sum(AttendanceORM.tokens_deducted)), course_ids, student_id)
        return q.scalar() or 0

    def count(self, *, course_ids=None, student_id=None) -> int:
        q = self._scoped(self.db.query(func.count(AttendanceORM.id)), course_ids, student_id)
        return q.scalar() or 0

    def daily_totals(self, course_ids: list[int], day: date) -> tuple[int, int]:
        if not course_ids:
            return 0, 0
        revenue, count = (
            self.db.query(func.sum(AttendanceORM.tokens_deducted), func.count(AttendanceORM.id))
            .filter(AttendanceORM.course_id.in_(course_ids), AttendanceORM.checkin_date == day)
            .one()
        )
        return revenue or 0, count or 0

    def count_present(self, class_id: int, day: date) -> int:
        return (
            self.db.query(func.count(AttendanceORM.id))
            .filter(AttendanceORM.class_id == class_id, AttendanceORM.checkin_date == day)
            .scalar()
        )


class ReviewRepository(IReviewRepository):
    def __init__(self, db: Session): self.db = db

    def _find(self, student_id: int, course_id: int) -> ReviewORM | None:
        return (
            self.db.query(ReviewORM)
            .filter(ReviewORM.student_id == student_id, ReviewORM.course_id == course_id)
            .first()
        )

    def upsert(self, student_id, course_id, course_rating, teacher_rating, comment, student_name) -> Review:
        fields = dict(
            course_rating=course_rating,
            teacher_rating=teacher_rating,
            comment=comment,
            student_name=student_name,
        )
        row = self._find(student_id, course_id)
        if row is None:
            row = ReviewORM(student_id=student_id, course_id=course_id, **fields)
            self.db.add(row)
            try:
                self.db.commit()
            except IntegrityError:
                # a concurrent first submission won the unique key; overwrite it
                self.db.rollback()
                row = self._find(student_id, course_id)
                if row is None:
                    raise
        for name, value in fields.items():
            setattr(row, name, value)
        self.db.commit()
        self.db.refresh(row)
        return review_to_domain(row)

    def list_by_course(self, course_id: int) -> list[Review]:
        rows = (
            self.db.query(ReviewORM)
            .filter(ReviewORM.course_id == course_id)
            .order_by(ReviewORM.updated_at.desc(), ReviewORM.id.desc())
            .all()
        )
        return [review_to_domain(r) for r in rows]

    def course_ratings(self, course_id: int) -> list[int]:
        return list(
            self.db.execute(select(ReviewORM.course_rating).where(ReviewORM.course_id == course_id)).scalars()
        )

    def teacher_ratings(self, teacher_id: int) -> list[int]:
        stmt = (
            select(ReviewORM.teacher_rating)
            .join(CourseORM, ReviewORM.course_id == CourseORM.id)
            .where(CourseORM.teacher_id == teacher_id)
        )
        return list(self.db.execute(stmt).scalars())


class RecordingRepository(IRecordingRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, recording_id: int) -> Recording | None:
        row = self.db.get(RecordingORM, recording_id)
        return recording_to_domain(row) if row else None

    def create(self, **fields) -> Recording:
        row = RecordingORM(**fields)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return recording_to_domain(row)

    def set_allow_download(self, recording_id: int, allow: bool) -> Recording:
        row = self.db.get(RecordingORM, recording_id)
        row.allow_download = allow
        self.db.commit(); self.db.refresh(row)
        return recording_to_domain(row)

    def list_by_courses(self, course_ids: list[int]) -> list[Recording]:
        if not course_ids:
            return []
        rows = (
            self.db.query(RecordingORM)
            .filter(RecordingORM.course_id.in_(course_ids))
            .order_by(RecordingORM.recorded_at.desc(), RecordingORM.id.desc())
            .all()
        )
        return [recording_to_domain(r) for r in rows]

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ....application.use_cases.check_in import CheckIn
from ....application.use_cases.enroll import EnrollStudent
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
from ....infrastructure.metrics import checkins_total, enrollments_total, tokens_debited_total
from ....infrastructure.repositories import (
    AttendanceRepository,
    ClassRepository,
    CourseRepository,
    EnrollmentRepository,
    UserRepository,
)
from ..authz import CurrentUser, require_learner, require_teacher
from ..deps import get_clock
from ..errors import as_http
from ..schemas import AttendanceOut, CheckInReq, EnrollmentOut, EnrollReq

router = APIRouter(prefix="/api", tags=["enrollment"])


@router.post("/enrollments", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll(
    payload: EnrollReq,
    current: CurrentUser = Depends(require_learner),
    db: Session = Depends(get_db),
):
    uc = EnrollStudent(
        enrollments=EnrollmentRepository(db),
        classes=ClassRepository(db),
        users=UserRepository(db),
    )
    try:
        enrollment = uc.execute(current.id, payload.course_id, payload.class_id)
    except DomainError as e:
        enrollments_total.labels(result=e.code).inc()
        raise as_http(e)
    enrollments_total.labels(result="ok").inc()
    return enrollment


@router.post("/attendance", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def check_in(
    payload: CheckInReq,
    current: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    uc = CheckIn(
        enrollments=EnrollmentRepository(db),
        classes=ClassRepository(db),
        courses=CourseRepository(db),
        users=UserRepository(db),
        attendances=AttendanceRepository(db),
        clock=clock,
    )
    try:
        record = uc.execute(current.id, payload.student_id, payload.course_id)
    except DomainError as e:
        checkins_total.labels(result=e.code).inc()
        raise as_http(e)
    checkins_total.labels(result="ok").inc()
    tokens_debited_total.inc(record.tokens_deducted)
    return record

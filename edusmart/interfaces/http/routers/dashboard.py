from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.use_cases.dashboards import LearnerDashboard, TeacherDashboard
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
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
from ..schemas import MarketItem, WalletOut

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _repos(db: Session) -> dict:
    return dict(
        courses=CourseRepository(db),
        classes=ClassRepository(db),
        enrollments=EnrollmentRepository(db),
        attendances=AttendanceRepository(db),
        users=UserRepository(db),
    )


def teacher_dashboard(db: Session = Depends(get_db), clock=Depends(get_clock)) -> TeacherDashboard:
    return TeacherDashboard(clock=clock, **_repos(db))


def learner_dashboard(db: Session = Depends(get_db), clock=Depends(get_clock)) -> LearnerDashboard:
    return LearnerDashboard(clock=clock, **_repos(db))


@router.get("/teacher")
def teacher_overview(
    current: CurrentUser = Depends(require_teacher),
    dashboard: TeacherDashboard = Depends(teacher_dashboard),
):
    return dashboard.overview(current.id)


@router.get("/teacher/finance")
def teacher_finance(
    current: CurrentUser = Depends(require_teacher),
    dashboard: TeacherDashboard = Depends(teacher_dashboard),
):
    return dashboard.finance(current.id)


@router.get("/teacher/students")
def teacher_students(
    current: CurrentUser = Depends(require_teacher),
    dashboard: TeacherDashboard = Depends(teacher_dashboard),
):
    return dashboard.students(current.id)


@router.get("/teacher/calendar")
def teacher_calendar(
    current: CurrentUser = Depends(require_teacher),
    dashboard: TeacherDashboard = Depends(teacher_dashboard),
):
    return dashboard.calendar(current.id)


@router.get("/learner")
def learner_overview(
    current: CurrentUser = Depends(require_learner),
    dashboard: LearnerDashboard = Depends(learner_dashboard),
):
    return dashboard.overview(current.id)


@router.get("/learner/market", response_model=list[MarketItem])
def learner_market(
    current: CurrentUser = Depends(require_learner),
    dashboard: LearnerDashboard = Depends(learner_dashboard),
):
    return dashboard.market(current.id)


@router.get("/learner/wallet", response_model=WalletOut)
def learner_wallet(
    current: CurrentUser = Depends(require_learner),
    dashboard: LearnerDashboard = Depends(learner_dashboard),
):
    try:
        return dashboard.wallet(current.id)
    except DomainError as e:
        raise as_http(e)

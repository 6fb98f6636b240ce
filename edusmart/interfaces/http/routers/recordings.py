from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ....application.use_cases.recordings import Recordings
from ....domain.entities import Recording
from ....domain.enums import Role
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
from ....infrastructure.repositories import (
    ClassRepository,
    CourseRepository,
    EnrollmentRepository,
    RecordingRepository,
    UserRepository,
)
from ..authz import CurrentUser, get_current_user, require_teacher
from ..deps import get_clock
from ..errors import as_http
from ..schemas import RecordingOut, RecordingReq

router = APIRouter(prefix="/api/recordings", tags=["recordings"])


def recordings_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> Recordings:
    return Recordings(
        recordings=RecordingRepository(db),
        courses=CourseRepository(db),
        classes=ClassRepository(db),
        enrollments=EnrollmentRepository(db),
        users=UserRepository(db),
        clock=clock,
    )


def recording_out(rec: Recording, owner: bool) -> RecordingOut:
    # learners only get the file while downloads are on
    path = rec.video_path if owner or rec.allow_download else None
    return RecordingOut(
        id=rec.id,
        course_id=rec.course_id,
        class_id=rec.class_id,
        class_name=rec.class_name,
        file_name=rec.file_name,
        video_path=path,
        allow_download=rec.allow_download,
        download_url=path,
        recorded_at=rec.recorded_at,
    )


@router.post("", response_model=RecordingOut, status_code=status.HTTP_201_CREATED)
def save_recording(
    payload: RecordingReq,
    current: CurrentUser = Depends(require_teacher),
    service: Recordings = Depends(recordings_service),
):
    try:
        rec = service.save(
            current.id,
            payload.course_id,
            payload.video_path,
            class_id=payload.class_id,
            class_name=payload.class_name,
        )
    except DomainError as e:
        raise as_http(e)
    return recording_out(rec, owner=True)


@router.post("/{recording_id}/toggle-download", response_model=RecordingOut)
def toggle_download(
    recording_id: int,
    current: CurrentUser = Depends(require_teacher),
    service: Recordings = Depends(recordings_service),
):
    try:
        rec = service.toggle_download(current.id, recording_id)
    except DomainError as e:
        raise as_http(e)
    return recording_out(rec, owner=True)


@router.get("", response_model=list[RecordingOut])
def list_recordings(
    current: CurrentUser = Depends(get_current_user),
    service: Recordings = Depends(recordings_service),
):
    try:
        rows = service.visible_to(current.id)
    except DomainError as e:
        raise as_http(e)
    return [recording_out(r, owner=current.role is Role.TEACHER) for r in rows]

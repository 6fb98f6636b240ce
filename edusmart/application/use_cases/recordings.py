from datetime import datetime
from typing import Callable

import structlog

from ..interfaces import (
    IClassRepository,
    ICourseRepository,
    IEnrollmentRepository,
    IRecordingRepository,
    IUserRepository,
)
from .catalog import owned_course
from ...domain.entities import Recording
from ...domain.enums import Role
from ...domain.errors import ClassNotFound, InvalidInput, RecordingNotFound, Unauthorized, UserNotFound

logger = structlog.get_logger()


class Recordings:
    """Path references to recorded class sessions stored by the file service."""

    def __init__(
        self,
        recordings: IRecordingRepository,
        courses: ICourseRepository,
        classes: IClassRepository,
        enrollments: IEnrollmentRepository,
        users: IUserRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.recordings = recordings
        self.courses = courses
        self.classes = classes
        self.enrollments = enrollments
        self.users = users
        self.clock = clock

    def save(
        self,
        teacher_id: int,
        course_id: int,
        video_path: str,
        class_id: int | None = None,
        class_name: str | None = None,
    ) -> Recording:
        owned_course(self.courses, course_id, teacher_id)
        if not video_path.strip():
            raise InvalidInput("Video path is required")
        if class_id is not None:
            cls = self.classes.get(class_id)
            if cls is None or cls.course_id != course_id:
                raise ClassNotFound()
            class_name = class_name or cls.name
        now = self.clock()
        recording = self.recordings.create(
            course_id=course_id,
            class_id=class_id,
            class_name=class_name or "Online Class",
            video_path=video_path.strip(),
            file_name=f"Rec {now:%d/%m/%Y %H:%M:%S}",
            recorded_at=now,
            allow_download=False,
        )
        logger.info("recording_saved", recording_id=recording.id, course_id=course_id)
        return recording

    def toggle_download(self, teacher_id: int, recording_id: int) -> Recording:
        recording = self.recordings.get(recording_id)
        if recording is None:
            raise RecordingNotFound()
        owned_course(self.courses, recording.course_id, teacher_id)
        return self.recordings.set_allow_download(recording_id, not recording.allow_download)

    def visible_to(self, user_id: int) -> list[Recording]:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        if user.role is Role.TEACHER:
            course_ids = [c.id for c in self.courses.list_by_teacher(user_id)]
            return self.recordings.list_by_courses(course_ids)
        if user.role is Role.LEARNER:
            course_ids = [e.course_id for e in self.enrollments.list_by_student(user_id)]
            return self.recordings.list_by_courses(course_ids)
        raise Unauthorized("Recordings are available to teachers and learners only")

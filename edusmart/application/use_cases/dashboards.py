"""Read-side aggregates for the teacher and learner dashboards.

Everything here is derived from the enrollment rows and the attendance
ledger; nothing is written.
"""
from datetime import datetime, timedelta
from typing import Callable

from ..interfaces import (
    IAttendanceRepository,
    IClassRepository,
    ICourseRepository,
    IEnrollmentRepository,
    IUserRepository,
)
from ...domain.errors import UserNotFound
from ...domain.schedule import parse_schedule

FINANCE_HISTORY_LIMIT = 50
CHART_DAYS = 7


class TeacherDashboard:
    def __init__(
        self,
        courses: ICourseRepository,
        classes: IClassRepository,
        enrollments: IEnrollmentRepository,
        attendances: IAttendanceRepository,
        users: IUserRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.courses = courses
        self.classes = classes
        self.enrollments = enrollments
        self.attendances = attendances
        self.users = users
        self.clock = clock

    def _catalog(self, teacher_id: int):
        courses = self.courses.list_by_teacher(teacher_id)
        course_ids = [c.id for c in courses]
        return courses, course_ids, self.classes.list_by_courses(course_ids)

    def overview(self, teacher_id: int) -> dict:
        courses, course_ids, classes = self._catalog(teacher_id)
        enrollments = self.enrollments.list_by_courses(course_ids)

        today = self.clock().date()
        chart = {"labels": [], "revenue": [], "attendance": []}
        for offset in range(CHART_DAYS - 1, -1, -1):
            day = today - timedelta(days=offset)
            revenue, count = self.attendances.daily_totals(course_ids, day)
            chart["labels"].append(day.strftime("%d/%m"))
            chart["revenue"].append(revenue)
            chart["attendance"].append(count)

        per_course = []
        for course in courses:
            count = sum(1 for e in enrollments if e.course_id == course.id)
            if count:
                per_course.append({"course_id": course.id, "title": course.title, "enrollments": count})

        return {
            "stats": {
                "total_revenue": self.attendances.total_tokens(course_ids=course_ids),
                "total_students": len(enrollments),
                "total_courses": len(courses),
                "total_classes": len(classes),
            },
            "chart": chart,
            "enrollments_by_course": per_course,
        }

    def finance(self, teacher_id: int) -> list[dict]:
        _, course_ids, classes = self._catalog(teacher_id)
        class_names = {c.id: c.name for c in classes}
        history = []
        for log in self.attendances.list_by_courses(course_ids, FINANCE_HISTORY_LIMIT):
            student = self.users.get(log.student_id)
            history.append({
                "time": log.checkin_time,
                "content": f"Check-in: {class_names.get(log.class_id, 'Unknown')}",
                "student": student.full_name if student else "Unknown",
                "amount": log.tokens_deducted,
            })
        return history

    def students(self, teacher_id: int) -> list[dict]:
        courses, _, classes = self._catalog(teacher_id)
        titles = {c.id: c.title for c in courses}
        grouped = []
        for cls in classes:
            students = [
                {
                    "id": user.id,
                    "name": user.full_name,
                    "custom_id": user.custom_id,
                    "avatar": user.avatar,
                    "wallet": user.wallet_tokens,
                    "enroll_date": enrollment.created_at,
                }
                for enrollment, user in self.enrollments.list_students_by_class(cls.id)
            ]
            grouped.append({
                "class_id": cls.id,
                "class_name": cls.name,
                "course_name": titles.get(cls.course_id, "Unknown"),
                "students": students,
            })
        return grouped

    def calendar(self, teacher_id: int) -> list[dict]:
        _, _, classes = self._catalog(teacher_id)
        today = self.clock().date()
        events = []
        for cls in classes:
            schedule = parse_schedule(cls.schedule)
            if schedule is None:
                continue
            events.append(schedule.to_calendar_event(
                cls.name,
                cls.start_date,
                cls.end_date,
                extendedProps={
                    "className": cls.name,
                    "enrolled": cls.enrolled,
                    "capacity": cls.capacity,
                    "present": self.attendances.count_present(cls.id, today),
                    "meetingUrl": cls.meeting_url or "#",
                },
            ))
        return events


class LearnerDashboard:
    def __init__(
        self,
        courses: ICourseRepository,
        classes: IClassRepository,
        enrollments: IEnrollmentRepository,
        attendances: IAttendanceRepository,
        users: IUserRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.courses = courses
        self.classes = classes
        self.enrollments = enrollments
        self.attendances = attendances
        self.users = users
        self.clock = clock

    def overview(self, student_id: int) -> dict:
        today = self.clock().date()
        my_courses, events, upcoming = [], [], []
        for enrollment in self.enrollments.list_by_student(student_id):
            course = self.courses.get(enrollment.course_id)
            cls = self.classes.get(enrollment.class_id)
            if course is None or cls is None:
                continue
            my_courses.append({
                "id": course.id,
                "title": course.title,
                "image_url": course.image_url,
                "teacher_name": course.teacher_name,
                "class_name": cls.name,
                "schedule": cls.schedule,
                "start_date": cls.start_date,
                "end_date": cls.end_date,
                "meeting_url": cls.meeting_url,
            })
            schedule = parse_schedule(cls.schedule)
            if schedule is None:
                continue
            events.append(schedule.to_calendar_event(
                f"{cls.name} ({course.title})", cls.start_date, cls.end_date, url=cls.meeting_url
            ))
            if schedule.occurs_on(today):
                upcoming.append({
                    "course_name": course.title,
                    "class_name": cls.name,
                    "time": f"{schedule.start} - {schedule.end}",
                    "link": cls.meeting_url,
                })

        return {
            "stats": {
                "total_spent": self.attendances.total_tokens(student_id=student_id),
                "classes_attended": self.attendances.count(student_id=student_id),
                "active_courses": len(my_courses),
            },
            "courses": my_courses,
            "calendar": events,
            "upcoming": upcoming,
        }

    def market(self, student_id: int) -> list[dict]:
        taken = [e.course_id for e in self.enrollments.list_by_student(student_id)]
        courses = self.courses.list_excluding(taken)
        classes = self.classes.list_by_courses([c.id for c in courses])
        return [
            {
                "course": course,
                "available_classes": [c for c in classes if c.course_id == course.id and c.has_free_seat],
            }
            for course in courses
        ]

    def wallet(self, student_id: int) -> dict:
        student = self.users.get(student_id)
        if student is None:
            raise UserNotFound()
        return {
            "balance": student.wallet_tokens,
            "history": self.attendances.list_by_student(student_id),
        }

from enum import Enum


class Role(str, Enum):
    TEACHER = "teacher"
    LEARNER = "learner"
    ADMIN = "admin"

    @property
    def id_prefix(self) -> str:
        return _ID_PREFIXES[self]

    @classmethod
    def registrable(cls) -> tuple["Role", ...]:
        return (cls.TEACHER, cls.LEARNER)


_ID_PREFIXES = {
    Role.TEACHER: "GV",
    Role.LEARNER: "HS",
    Role.ADMIN: "AD",
}


class KycStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition(self, target: "KycStatus") -> bool:
        return target in _KYC_TRANSITIONS[self]


# a submission is accepted from any state and always lands in PENDING
_KYC_TRANSITIONS = {
    KycStatus.NONE: {KycStatus.PENDING},
    KycStatus.PENDING: {KycStatus.PENDING, KycStatus.APPROVED, KycStatus.REJECTED},
    KycStatus.APPROVED: {KycStatus.PENDING},
    KycStatus.REJECTED: {KycStatus.PENDING},
}


class KycType(str, Enum):
    STUDENT_CREATOR = "student_creator"
    LECTURER = "lecturer"

    @property
    def label(self) -> str:
        return "Student" if self is KycType.STUDENT_CREATOR else "Lecturer"

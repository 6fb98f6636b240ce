import structlog

from ..dto import KycSubmission
from ..interfaces import IUserRepository
from ...domain.entities import User
from ...domain.enums import KycStatus, KycType, Role
from ...domain.errors import InvalidInput, InvalidTransition, Unauthorized, Unverified, UserNotFound

logger = structlog.get_logger()

# accepted data fields and file slots per KYC type
_KYC_FIELDS = {
    KycType.STUDENT_CREATOR: (("student_id",), ("card", "transcript")),
    KycType.LECTURER: (("work_place", "degree_number"), ("degree",)),
}


def _load(repo: IUserRepository, user_id: int) -> User:
    user = repo.get(user_id)
    if user is None:
        raise UserNotFound()
    return user


def require_verified(repo: IUserRepository, user_id: int) -> User:
    user = _load(repo, user_id)
    if not user.is_verified:
        raise Unverified()
    return user


class SubmitKyc:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, user_id: int, submission: KycSubmission) -> User:
        user = _load(self.repo, user_id)
        if user.role not in Role.registrable():
            raise Unauthorized("Only teachers and learners submit KYC")
        try:
            kyc_type = KycType(submission.kyc_type)
        except ValueError:
            raise InvalidInput(f"Unknown KYC type: {submission.kyc_type}")
        if not user.kyc_status.can_transition(KycStatus.PENDING):
            raise InvalidTransition()

        data_fields, file_slots = _KYC_FIELDS[kyc_type]
        data = {"type": kyc_type.label}
        data.update({k: submission.data[k] for k in data_fields if submission.data.get(k)})
        files = {k: submission.files[k] for k in file_slots if submission.files.get(k)}

        updated = self.repo.save_kyc(
            user_id,
            status=KycStatus.PENDING,
            is_verified=False,
            kyc_type=kyc_type.value,
            data=data,
            files=files,
        )
        logger.info("kyc_submitted", user_id=user_id, kyc_type=kyc_type.value)
        return updated


class ReviewKyc:
    """Admin decision on a pending submission."""

    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def _move(self, user_id: int, target: KycStatus) -> User:
        user = _load(self.repo, user_id)
        if user.kyc_status is not KycStatus.PENDING or not user.kyc_status.can_transition(target):
            raise InvalidTransition(
                f"Cannot move KYC from {user.kyc_status.value} to {target.value}"
            )
        updated = self.repo.save_kyc(
            user_id, status=target, is_verified=target is KycStatus.APPROVED
        )
        logger.info("kyc_reviewed", user_id=user_id, status=target.value)
        return updated

    def approve(self, user_id: int) -> User:
        return self._move(user_id, KycStatus.APPROVED)

    def reject(self, user_id: int) -> User:
        return self._move(user_id, KycStatus.REJECTED)

    def pending(self) -> list[User]:
        return self.repo.list_by_kyc_status(KycStatus.PENDING)

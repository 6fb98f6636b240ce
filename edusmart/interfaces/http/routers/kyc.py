from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.dto import KycSubmission
from ....application.use_cases.kyc import ReviewKyc, SubmitKyc
from ....domain.entities import User
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
from ....infrastructure.repositories import UserRepository
from ..authz import CurrentUser, get_current_user, require_admin
from ..errors import as_http
from ..schemas import KycReq, KycResp

router = APIRouter(prefix="/api/kyc", tags=["kyc"])


def kyc_out(user: User) -> KycResp:
    return KycResp(
        id=user.id,
        custom_id=user.custom_id,
        full_name=user.full_name,
        kyc_status=user.kyc_status.value,
        kyc_type=user.kyc_type,
        kyc_data=user.kyc_data,
        kyc_files=user.kyc_files,
        is_verified=user.is_verified,
    )


@router.post("", response_model=KycResp)
def submit_kyc(
    payload: KycReq,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # files are paths already stored by the upload service
    submission = KycSubmission(kyc_type=payload.kyc_type, data=payload.data, files=payload.files)
    try:
        return kyc_out(SubmitKyc(UserRepository(db)).execute(current.id, submission))
    except DomainError as e:
        raise as_http(e)


# --- admin review

@router.get("/pending", response_model=list[KycResp], dependencies=[Depends(require_admin)])
def pending_kyc(db: Session = Depends(get_db)):
    return [kyc_out(u) for u in ReviewKyc(UserRepository(db)).pending()]


@router.post("/{user_id}/approve", response_model=KycResp, dependencies=[Depends(require_admin)])
def approve_kyc(user_id: int, db: Session = Depends(get_db)):
    try:
        return kyc_out(ReviewKyc(UserRepository(db)).approve(user_id))
    except DomainError as e:
        raise as_http(e)


@router.post("/{user_id}/reject", response_model=KycResp, dependencies=[Depends(require_admin)])
def reject_kyc(user_id: int, db: Session = Depends(get_db)):
    try:
        return kyc_out(ReviewKyc(UserRepository(db)).reject(user_id))
    except DomainError as e:
        raise as_http(e)

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from ....application.dto import RegisterUserInput
from ....application.use_cases.register_user import AuthenticateUser, RegisterUser, UpdateAvatar
from ....config import settings
from ....domain.entities import User
from ....domain.errors import DomainError
from ....infrastructure.db import get_db
from ....infrastructure.metrics import registrations_total
from ....infrastructure.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ..authz import CurrentUser, get_current_user
from ..errors import as_http
from ..schemas import AvatarReq, LoginReq, RegisterReq, RegisterResp, TokenResp, UserResp

router = APIRouter(prefix="/api/auth", tags=["auth"])


def user_out(user: User) -> UserResp:
    return UserResp(
        id=user.id,
        custom_id=user.custom_id,
        full_name=user.full_name,
        username=user.username,
        role=user.role.value,
        wallet_tokens=user.wallet_tokens,
        kyc_status=user.kyc_status.value,
        is_verified=user.is_verified,
        avatar=user.avatar,
    )


@router.post("/register", response_model=RegisterResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(request: Request, payload: RegisterReq, db: Session = Depends(get_db)):
    uc = RegisterUser(
        repo=UserRepository(db),
        hasher=PasswordHasher(),
        wallet_tokens=settings.DEFAULT_WALLET_TOKENS,
        login_domain=settings.LOGIN_DOMAIN,
    )
    try:
        created = uc.execute(RegisterUserInput(payload.full_name, payload.role, payload.password))
    except DomainError as e:
        raise as_http(e)
    registrations_total.labels(role=payload.role).inc()
    return RegisterResp(
        id=created.user_id,
        custom_id=created.custom_id,
        login_identifier=created.login_identifier,
    )


@router.post("/login", response_model=TokenResp)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    uc = AuthenticateUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        auth = uc.execute(payload.identifier, payload.password)
    except DomainError as e:
        raise as_http(e)
    token = create_access_token(user_id=auth.user_id, role=auth.role)
    return TokenResp(access_token=token, user_id=auth.user_id, role=auth.role.value)


@router.get("/me", response_model=UserResp)
def me(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    user = UserRepository(db).get(current.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user_out(user)


@router.put("/me/avatar", response_model=UserResp)
def update_avatar(
    payload: AvatarReq,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return user_out(UpdateAvatar(UserRepository(db)).execute(current.id, payload.path))
    except DomainError as e:
        raise as_http(e)

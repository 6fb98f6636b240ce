from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from ...domain.enums import Role
from ...infrastructure.security import decode_token

bearer = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: Role


def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> CurrentUser:
    try:
        user_id, role = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return CurrentUser(id=user_id, role=role)


def _require(role: Role):
    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role is not role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role.value.capitalize()} required")
        return user
    return dependency


require_teacher = _require(Role.TEACHER)
require_learner = _require(Role.LEARNER)
require_admin = _require(Role.ADMIN)

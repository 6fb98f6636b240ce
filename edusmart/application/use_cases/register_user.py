import unicodedata

import structlog

from ..dto import AuthenticatedUser, RegisteredUser, RegisterUserInput
from ..interfaces import IPasswordHasher, IUserRepository
from ...domain.entities import User
from ...domain.enums import KycStatus, Role
from ...domain.errors import InvalidCredentials, InvalidInput, RoleInvalid, UserNotFound

logger = structlog.get_logger()


def login_slug(full_name: str) -> str:
    """Lower-case, accent-free, whitespace-free form of a person's name."""
    text = full_name.lower().replace("đ", "d")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return "".join(text.split())


class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher, wallet_tokens: int, login_domain: str):
        self.repo = repo
        self.hasher = hasher
        self.wallet_tokens = wallet_tokens
        self.login_domain = login_domain

    def execute(self, payload: RegisterUserInput) -> RegisteredUser:
        try:
            role = Role(payload.role)
        except ValueError:
            raise RoleInvalid()
        if role not in Role.registrable():
            raise RoleInvalid()
        full_name = payload.full_name.strip()
        slug = login_slug(full_name)
        if not slug:
            raise InvalidInput("Full name is required")

        user = self.repo.create_with_next_id(
            full_name=full_name,
            role=role,
            password_hash=self.hasher.hash(payload.password),
            wallet_tokens=self.wallet_tokens,
            make_username=lambda custom_id: f"{custom_id}.{slug}.{self.login_domain}",
        )
        logger.info("user_registered", user_id=user.id, custom_id=user.custom_id, role=role.value)
        return RegisteredUser(user_id=user.id, custom_id=user.custom_id, login_identifier=user.username)


class AuthenticateUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, identifier: str, password: str) -> AuthenticatedUser:
        found = self.repo.get_with_password(identifier.strip())
        if not found or not self.hasher.verify(password, found[1]):
            raise InvalidCredentials()
        user = found[0]
        return AuthenticatedUser(user_id=user.id, role=user.role)


class EnsureAdmin:
    """Create the configured admin account on first start."""

    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, username: str, password: str) -> User | None:
        if not username or not password or self.repo.exists_with_role(Role.ADMIN):
            return None
        user = self.repo.create_with_next_id(
            full_name="Administrator",
            role=Role.ADMIN,
            password_hash=self.hasher.hash(password),
            wallet_tokens=0,
            make_username=lambda _custom_id: username,
            kyc_status=KycStatus.APPROVED,
            is_verified=True,
        )
        logger.info("admin_seeded", user_id=user.id, username=username)
        return user


class UpdateAvatar:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, user_id: int, path: str) -> User:
        if self.repo.get(user_id) is None:
            raise UserNotFound()
        path = path.strip()
        if not path:
            raise InvalidInput("Avatar path is required")
        return self.repo.update_avatar(user_id, path)

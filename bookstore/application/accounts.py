import asyncio
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, List

from pydantic import BaseModel

from bookstore.application.interfaces import PasswordHasher, SessionRepository, UserRepository
from bookstore.domain.exceptions import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    InvalidArgumentError,
    PermissionDeniedError,
    UserNotFoundError,
)
from bookstore.domain.models import Identity, Role, Session, User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4


class RegisterDTO(BaseModel):
    email: str
    password: str
    fullname: Optional[str] = None
    phone: Optional[str] = None


class UserUpdateDTO(BaseModel):
    fullname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None


class AuthResult(BaseModel):
    access_token: str
    user: User


class SessionIssuer:
    """Opaque bearer tokens stored in the sessions collection"""

    def __init__(self, sessions: SessionRepository, ttl_seconds: int):
        self._sessions = sessions
        self._ttl = timedelta(seconds=ttl_seconds)

    async def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        session = Session(
            id=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        await self._sessions.create(session)
        return session.id


class RegisterUseCase:
    def __init__(self, users: UserRepository, hasher: PasswordHasher, issuer: SessionIssuer):
        self._users = users
        self._hasher = hasher
        self._issuer = issuer

    async def __call__(self, data: RegisterDTO) -> AuthResult:
        email = data.email.strip().lower()
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError("Password is too short")
        # best effort; two simultaneous registrations can both pass this check
        if await self._users.get_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=await asyncio.to_thread(self._hasher.hash, data.password),
            fullname=data.fullname,
            phone=data.phone,
            role=Role.USER,
            created_at=now,
            updated_at=now,
        )
        user = await self._users.create(user)
        logger.info(f"User {user.id} registered")
        return AuthResult(access_token=await self._issuer.issue(user), user=user)


class LoginUseCase:
    def __init__(self, users: UserRepository, hasher: PasswordHasher, issuer: SessionIssuer):
        self._users = users
        self._hasher = hasher
        self._issuer = issuer

    async def __call__(self, email: str, password: str) -> AuthResult:
        user = await self._users.get_by_email(email.strip().lower())
        # hashing is CPU bound, keep it off the event loop
        if not user or not await asyncio.to_thread(self._hasher.verify, password, user.password_hash):
            raise AuthenticationError("Incorrect email or password")
        return AuthResult(access_token=await self._issuer.issue(user), user=user)


class LogoutUseCase:
    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    async def __call__(self, token: str) -> None:
        await self._sessions.delete(token)


class AuthenticateUseCase:
    """Resolve a bearer token to the identity behind it."""

    def __init__(self, sessions: SessionRepository, users: UserRepository):
        self._sessions = sessions
        self._users = users

    async def __call__(self, token: Optional[str]) -> Identity:
        if not token:
            raise AuthenticationError("Not authenticated")
        session = await self._sessions.get(token)
        if not session:
            raise AuthenticationError("Invalid token")
        if session.is_expired(datetime.now(timezone.utc)):
            await self._sessions.delete(token)
            raise AuthenticationError("Token expired")
        # role comes from the user record, so a promotion applies immediately
        user = await self._users.get_by_id(session.user_id)
        if not user:
            raise AuthenticationError("User no longer exists")
        return Identity(id=user.id, email=user.email, role=user.role)


class GetUserUseCase:
    def __init__(self, users: UserRepository):
        self._users = users

    async def __call__(self, actor: Identity, user_id: str) -> User:
        if not actor.can_access(user_id):
            raise PermissionDeniedError("Not authorized")
        user = await self._users.get_by_id(user_id)
        if not user:
            raise UserNotFoundError("User not found")
        return user


class FindUserByEmailUseCase:
    def __init__(self, users: UserRepository):
        self._users = users

    async def __call__(self, actor: Identity, email: str) -> User:
        email = email.strip().lower()
        if not actor.is_admin and actor.email != email:
            raise PermissionDeniedError("Not authorized")
        user = await self._users.get_by_email(email)
        if not user:
            raise UserNotFoundError("User not found")
        return user


class ListUsersUseCase:
    def __init__(self, users: UserRepository):
        self._users = users

    async def __call__(self, actor: Identity) -> List[User]:
        if not actor.is_admin:
            raise PermissionDeniedError("Not authorized")
        return await self._users.list()


class UpdateUserUseCase:
    def __init__(self, users: UserRepository):
        self._users = users

    async def __call__(self, actor: Identity, user_id: str, data: UserUpdateDTO) -> User:
        target = await self._users.get_by_id(user_id)
        if not target:
            raise UserNotFoundError("User not found")
        if not (actor.can_access(user_id) or actor.email == target.email):
            raise PermissionDeniedError("Not authorized to update this profile")

        email = data.email.strip().lower() if data.email is not None else None
        if email is not None and email != target.email:
            other = await self._users.get_by_email(email)
            if other and other.id != user_id:
                raise EmailAlreadyRegisteredError(email)

        def change(user: User) -> None:
            if data.fullname is not None:
                user.fullname = data.fullname
            if email is not None:
                user.email = email
            if data.phone is not None:
                user.phone = data.phone
            # only an admin may change roles; silently ignored otherwise
            if data.role is not None and actor.is_admin:
                user.role = data.role
            user.updated_at = datetime.now(timezone.utc)

        user = await self._users.mutate(user_id, change)
        if not user:
            raise UserNotFoundError("User not found")
        logger.info(f"User {user_id} updated by {actor.id}")
        return user


class DeleteUserUseCase:
    def __init__(self, users: UserRepository):
        self._users = users

    async def __call__(self, actor: Identity, user_id: str) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError("Not authorized")
        if not await self._users.delete(user_id):
            raise UserNotFoundError("User not found")
        logger.info(f"User {user_id} deleted by {actor.id}")

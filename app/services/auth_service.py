from datetime import datetime, timezone
from typing import Optional, Tuple
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole
from app.core.exceptions import DuplicateResourceError
from app.core.security import (
    verify_and_check_needs_rehash,
    get_password_hash,
    create_access_token,
)
from app.config import settings


logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service for registration, login and token issuing."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def authenticate_user(
        self,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Passwords verified against a deprecated hash (bcrypt) are
        transparently re-hashed with argon2.

        Returns:
            User object if authentication successful, None otherwise
        """
        user = await self.get_user_by_email(email)

        if user is None:
            return None

        is_valid, needs_rehash = verify_and_check_needs_rehash(password, user.password_hash)

        if not is_valid:
            return None

        if not user.is_active:
            return None

        if needs_rehash:
            user.password_hash = get_password_hash(password)
            await self.db.commit()

        return user

    async def create_tokens(self, user: User) -> Tuple[str, int]:
        """
        Create an access token for a user and stamp last_login_at.

        Returns:
            Tuple of (access_token, expires_in_seconds)
        """
        additional_claims = {
            "email": user.email,
            "role": user.role,
        }

        access_token = create_access_token(
            subject=user.id,
            additional_claims=additional_claims
        )

        expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.commit()

        return access_token, expires_in

    async def register_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Optional[UserRole] = None,
    ) -> User:
        """
        Register a new user.

        The admin role is granted only when requested and ALLOW_ADMIN_SIGNUP
        is on; everyone else becomes staff.

        Raises:
            DuplicateResourceError: e-mail already registered
        """
        email = email.strip().lower()

        if await self.get_user_by_email(email) is not None:
            raise DuplicateResourceError("Email already registered")

        granted = UserRole.STAFF
        if role == UserRole.ADMIN and settings.ALLOW_ADMIN_SIGNUP:
            granted = UserRole.ADMIN

        user = User(
            name=name.strip(),
            email=email,
            password_hash=get_password_hash(password),
            role=granted.value,
        )

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same e-mail
            await self.db.rollback()
            raise DuplicateResourceError("Email already registered")
        await self.db.refresh(user)

        logger.info(f"Registered user {user.email} with role {user.role}")
        return user

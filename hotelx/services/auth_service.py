import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.core.config import settings
from hotelx.core.exceptions import AuthenticationError, InactiveUserError
from hotelx.core.security import create_access_token, get_password_hash, verify_password
from hotelx.core.service_utils import validate_unique_field
from hotelx.models.user import User
from hotelx.schemas.user import LoginRequest, UserCreate

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    async def login(self, login_data: LoginRequest) -> dict:
        user = await self.authenticate_user(login_data.username, login_data.password)
        if not user:
            logger.info(f"Failed login for {login_data.username}")
            raise AuthenticationError("Incorrect username or password")

        if not user.is_active:
            raise InactiveUserError()

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": user.username}, expires_delta=access_token_expires
        )

        return {"access_token": access_token, "token_type": "bearer"}

    async def create_user(self, user_data: UserCreate) -> User:
        stmt = select(User).where(
            or_(User.username == user_data.username, User.email == user_data.email)
        )
        result = await self.db.execute(stmt)
        validate_unique_field(
            result.scalars().first(), "username or email", "User"
        )

        db_user = User(
            username=user_data.username,
            email=user_data.email,
            full_name=user_data.full_name,
            hashed_password=get_password_hash(user_data.password),
            role=user_data.role,
            is_active=user_data.is_active,
        )

        self.db.add(db_user)
        await self.db.commit()
        await self.db.refresh(db_user)
        logger.info(f"User {db_user.username} created with role {db_user.role.value}")
        return db_user

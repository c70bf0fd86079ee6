#!/usr/bin/env python3
"""
Bootstrap the first staff account.

Staff users can register further accounts through POST /api/v1/auth/register,
but somebody has to exist first.
"""

import asyncio
import getpass
import sys

from hotelx.core.database import AsyncSessionLocal
from hotelx.core.exceptions import ConflictError
from hotelx.models.user import UserRole
from hotelx.schemas.user import UserCreate
from hotelx.services.auth_service import AuthService


def prompt_user() -> UserCreate:
    username = input("Username: ").strip()
    email = input("Email: ").strip()
    full_name = input("Full name (optional): ").strip() or None
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        raise ValueError("Passwords do not match")
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")

    return UserCreate(
        username=username,
        email=email,
        full_name=full_name,
        password=password,
        role=UserRole.STAFF,
        is_active=True,
    )


async def create_staff_user(user_data: UserCreate) -> None:
    async with AsyncSessionLocal() as db:
        user = await AuthService(db).create_user(user_data)
        print(f"Staff user '{user.username}' created (id {user.id})")


def main() -> int:
    print("HotelX: create staff user")
    try:
        user_data = prompt_user()
        asyncio.run(create_staff_user(user_data))
    except KeyboardInterrupt:
        print("\nCancelled")
        return 1
    except (ValueError, ConflictError) as exc:
        # pydantic's ValidationError is a ValueError
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

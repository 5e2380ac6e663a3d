"""
Seed Admin User

Creates the first Admin account for a fresh SchoolHub database.
Credentials come from the command line or the SEED_ADMIN_* environment
variables; the script does nothing if the email is already taken.

Usage:
    python scripts/seed_admin.py --email admin@school.edu --username admin \
        --first-name Ada --last-name Reyes
    (password is read from SEED_ADMIN_PASSWORD or prompted for)
"""

import argparse
import asyncio
import getpass
import os
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schoolhub.core.database import async_session_maker, close_db
from schoolhub.core.security import hash_password
from schoolhub.modules.users import UserRepository, UserRole, UserStatus


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the initial SchoolHub admin")
    parser.add_argument("--email", default=os.getenv("SEED_ADMIN_EMAIL"))
    parser.add_argument("--username", default=os.getenv("SEED_ADMIN_USERNAME", "admin"))
    parser.add_argument("--first-name", default=os.getenv("SEED_ADMIN_FIRST_NAME", "School"))
    parser.add_argument("--last-name", default=os.getenv("SEED_ADMIN_LAST_NAME", "Admin"))
    args = parser.parse_args()
    if not args.email:
        parser.error("--email (or SEED_ADMIN_EMAIL) is required")
    return args


async def seed_admin(args: argparse.Namespace, password: str) -> None:
    """Create the admin user if it doesn't exist."""
    async with async_session_maker() as db:
        existing_user = await UserRepository.get_by_email(db, args.email)
        if existing_user:
            print(f"User already exists: {args.email}")
            print(f"  ID: {existing_user.id}")
            print(f"  Role: {existing_user.role.value}")
            return

        admin = await UserRepository.create(
            db,
            role=UserRole.ADMIN,
            username=args.username,
            email=args.email,
            password_hash=hash_password(password),
            first_name=args.first_name,
            last_name=args.last_name,
            status=UserStatus.ACTIVE,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Email: {admin.email}")
        print(f"  Name: {admin.full_name}")
        print(f"  ID: {admin.id}")
        print(f"  User code: {admin.user_code}")

    await close_db()


if __name__ == "__main__":
    arguments = parse_args()
    admin_password = os.getenv("SEED_ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    asyncio.run(seed_admin(arguments, admin_password))

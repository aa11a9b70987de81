"""
Create the first admin user.

Credentials come from the command line, falling back to the
SEED_ADMIN_NAME / SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD environment variables.
An existing user with the same e-mail is left untouched.

Usage:
    python -m scripts.seed_admin --email admin@example.com --password secret123
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.database import get_db_session, init_db
from app.models.user import User, UserRole
from app.core.security import get_password_hash


async def seed_admin(name: str, email: str, password: str) -> int:
    await init_db()

    async with get_db_session() as session:
        email = email.strip().lower()
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()

        if existing:
            print(f"Admin already exists: {existing.email} | role: {existing.role}")
            return 0

        admin = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=UserRole.ADMIN.value,
        )
        session.add(admin)
        await session.commit()

        print(f"Seed admin created: {admin.email}")
        return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the first admin user")
    parser.add_argument("--name", default=os.getenv("SEED_ADMIN_NAME", "Super Admin"))
    parser.add_argument("--email", default=os.getenv("SEED_ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("SEED_ADMIN_PASSWORD"))
    args = parser.parse_args()

    if not args.email or not args.password:
        print("Missing --email/--password (or SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD)")
        return 1

    return asyncio.run(seed_admin(args.name, args.email, args.password))


if __name__ == "__main__":
    sys.exit(main())

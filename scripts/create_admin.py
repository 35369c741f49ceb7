#!/usr/bin/env python3
"""Seed an ADMIN account so the first login to the dashboard is possible.

Usage:
    python scripts/create_admin.py <email> <name> [password]

A password is generated and printed when none is given.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import insert  # noqa: E402

from app.core.exceptions import BadRequestException  # noqa: E402
from app.core.security import generate_password  # noqa: E402
from app.database import AsyncSessionLocal, engine  # noqa: E402
from app.models.admins import admins  # noqa: E402
from app.schemas.users import UserRole  # noqa: E402
from app.services.user_service import UserService  # noqa: E402


async def create_admin(email: str, name: str, password: str) -> None:
    async with AsyncSessionLocal() as db:
        user = await UserService.create_account(db, email, password, UserRole.ADMIN)
        await db.execute(insert(admins).values(user_id=user["id"], name=name))
        await db.commit()
    await engine.dispose()


def main() -> None:
    if len(sys.argv) not in (3, 4):
        print(__doc__)
        sys.exit(1)

    email, name = sys.argv[1], sys.argv[2]
    password = sys.argv[3] if len(sys.argv) == 4 else generate_password(12)

    try:
        asyncio.run(create_admin(email, name, password))
    except BadRequestException as e:
        print(f"✗ {e.message}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ Admin {email} created")
    if len(sys.argv) == 3:
        print(f"  Password: {password}")


if __name__ == "__main__":
    main()

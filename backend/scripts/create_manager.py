"""
Bootstrap a manager account.

Managers cannot be invited through the API; run this once per manager:

    python scripts/create_manager.py --email boss@example.com --first-name Ada --last-name Lovelace

The manager then signs in with the normal email magic-code flow.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from salesup.core.config import settings
from salesup.core.log_config import configure_logging
from salesup.core.roles import UserRole
from salesup.crud.user import get_user_by_email, normalize_email
from salesup.db.session import AsyncSessionLocal
from salesup.models.user import User

logger = logging.getLogger("salesup.scripts.create_manager")


class ManagerExistsError(Exception):
    pass


async def create_manager(db: AsyncSession, *, email: str, first_name: str, last_name: str) -> User:
    email = normalize_email(email)
    if await get_user_by_email(db, email) is not None:
        raise ManagerExistsError(f"A user with email {email} already exists")

    user = User(
        email=email,
        first_name=User.normalize_name(first_name) or first_name,
        last_name=User.normalize_name(last_name) or last_name,
        role=UserRole.MANAGER.value,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


async def _run(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        try:
            user = await create_manager(db, email=args.email, first_name=args.first_name, last_name=args.last_name)
        except ManagerExistsError as e:
            logger.error("%s", e)
            return 1

    logger.info("Manager created: %s (%s)", user.email, user.id)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a SalesUp manager account.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()

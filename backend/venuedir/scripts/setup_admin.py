"""
Venue Directory Backend: Admin Account Setup
===============================================

What:  Creates the first administrator, or resets an existing user's
       password, name and role.
How:   Opens one session on the configured database and calls
       CredentialStore.upsert_user(). The password comes from the
       ADMIN_PASSWORD environment variable, or an interactive prompt.

Usage:
    python -m venuedir.scripts.setup_admin --email admin@example.com --name "Admin"
    ADMIN_PASSWORD=... python -m venuedir.scripts.setup_admin --email ... --role user

Exit codes: 0 on success, 1 on validation or database failure.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from typing import List, Optional

from venuedir.config import settings
from venuedir.database import Database
from venuedir.exceptions import VenueDirError
from venuedir.models.user import USER_ROLES
from venuedir.services.credential_store import CredentialStore

logger = logging.getLogger("venuedir.scripts.setup_admin")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or reset a directory user.")
    parser.add_argument("--email", required=True, help="Login email (exact match)")
    parser.add_argument("--name", default="Admin", help="Display name")
    parser.add_argument("--role", default="admin", choices=USER_ROLES)
    return parser.parse_args(argv)


def read_password() -> str:
    password = os.environ.get("ADMIN_PASSWORD")
    if password:
        return password
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        raise SystemExit("Passwords do not match")
    return password


async def setup_admin(database: Database, email: str, password: str, name: str, role: str) -> int:
    """Upsert the user; returns its id."""
    async with database.session() as session:
        user = await CredentialStore(session).upsert_user(
            email=email,
            password=password,
            name=name,
            role=role,
        )
        return user.id


async def _run(args: argparse.Namespace, password: str) -> int:
    database = Database.from_settings(settings)
    try:
        user_id = await setup_admin(database, args.email, password, args.name, args.role)
    finally:
        await database.dispose()
    logger.info("User %s ready (id=%s, role=%s)", args.email, user_id, args.role)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = parse_args(argv)
    password = read_password()
    try:
        return asyncio.run(_run(args, password))
    except VenueDirError as e:
        logger.error("Setup failed: %s", e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Bootstrap an admin account: python create_admin.py <username> <full name> [--role super_admin]

The password is read from ADMIN_PASSWORD or prompted for.
"""
from __future__ import annotations
import argparse
import asyncio
import getpass
import os
import sys
from ecolearn.db import SessionLocal
from ecolearn.errors import EcoLearnError
from ecolearn.logging_setup import configure_logging
from ecolearn.services.admins import create_admin_user, ROLES


async def _run(username: str, full_name: str, role: str, password: str) -> int:
    async with SessionLocal() as session:
        try:
            admin = await create_admin_user(
                session, username=username, password=password, full_name=full_name, role=role,
            )
        except EcoLearnError as e:
            print(f"error: {e.message}", file=sys.stderr)
            return 1
    print(f"created {admin.role} '{admin.username}' ({admin.id})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an EcoLearn admin user")
    parser.add_argument("username")
    parser.add_argument("full_name")
    parser.add_argument("--role", choices=ROLES, default="admin")
    args = parser.parse_args(argv)
    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    configure_logging()
    return asyncio.run(_run(args.username, args.full_name, args.role, password))


if __name__ == "__main__":
    sys.exit(main())

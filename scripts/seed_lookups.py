#!/usr/bin/env python3
"""
HRMS - Reference Data Seeder

Inserts the default lookup values and, optionally, an administrator account
for logging in to the API.

Usage:
    python -m scripts.seed_lookups
    python -m scripts.seed_lookups --admin-email admin@example.com --admin-password secret
"""

import argparse
import asyncio
import logging

from app.database import async_session_factory
from app.services.auth_service import AuthService
from app.services.lookup_service import LookupService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


async def main():
    parser = argparse.ArgumentParser(description="Seed default lookups and an admin user")
    parser.add_argument("--admin-email", type=str, help="Create this admin user if it does not exist")
    parser.add_argument("--admin-password", type=str, help="Password for the admin user")
    parser.add_argument("--admin-name", type=str, default="Administrator")
    args = parser.parse_args()

    async with async_session_factory() as session:
        created = await LookupService(session).seed_defaults()
        print(f"Lookups inserted: {created}")

        if args.admin_email:
            if not args.admin_password:
                parser.error("--admin-password is required with --admin-email")

            auth_service = AuthService(session)
            if await auth_service.get_user_by_email(args.admin_email):
                print(f"User {args.admin_email} already exists")
            else:
                user = await auth_service.create_user(
                    email=args.admin_email,
                    name=args.admin_name,
                    password=args.admin_password,
                )
                print(f"Created admin user {user.email} (id={user.id})")


if __name__ == "__main__":
    asyncio.run(main())

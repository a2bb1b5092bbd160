#!/usr/bin/env python3
"""
Create or promote a HomeServices admin account.

Usage:
    python scripts/create_admin.py admin@example.com --password secret
"""

import argparse
import asyncio
import getpass
import sys

from homeservices.admin import ensure_admin
from homeservices.api.dependencies import AppContext, Settings


async def run(args) -> None:
    settings = Settings.from_env()
    if args.database_url:
        settings.database_url = args.database_url

    context = AppContext.from_settings(settings)
    try:
        await context.create_tables()
        user = await ensure_admin(
            context,
            email=args.email,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            phone_number=args.phone_number,
        )
        print(f"Admin ready: {user.email} (id={user.id})")
    finally:
        await context.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("email", type=str)
    parser.add_argument("--password", type=str, default=None, help="Required for a new account unless --prompt is given")
    parser.add_argument("--first-name", type=str, default="Admin")
    parser.add_argument("--last-name", type=str, default="User")
    parser.add_argument("--phone-number", type=str, default="00000000")
    parser.add_argument("--database-url", type=str, default=None)
    parser.add_argument("--prompt", action="store_true", help="Prompt for the password")
    args = parser.parse_args()

    if args.prompt and not args.password:
        args.password = getpass.getpass("Password: ")

    try:
        asyncio.run(run(args))
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)

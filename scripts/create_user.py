"""
Seed a user account.

Usage: DATABASE_URL=... python scripts/create_user.py <username> <password>
"""

from __future__ import annotations

import asyncio
import sys

from auth import repository, security
from core.logs import configure_logging


async def main(username: str, password: str) -> int:
    created = await repository.create_user(
        username=username.strip(),
        password_hash=security.hash_password(password),
    )
    if not created:
        print(f"User {username!r} already exists.", file=sys.stderr)
        return 1
    print(f"Created user {username!r}.")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(2)
    configure_logging()
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))

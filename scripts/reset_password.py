"""Set a user's password directly in the database (operator use only)."""
import argparse
import asyncio
import getpass
import sys

sys.path.insert(0, ".")

from kcnotes.config import get_settings
from kcnotes.database import close_db, create_engine, create_session_maker
from kcnotes.kernel.identity import PasswordHasher, SqlAlchemyUserRepository


async def reset(username: str, password: str) -> int:
    settings = get_settings()
    engine = create_engine(settings.database_url)
    users = SqlAlchemyUserRepository(create_session_maker(engine))
    try:
        user = await users.get_by_username(username)
        if user is None:
            print(f"No user named {username!r}")
            return 1
        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        await users.update_password(user.id, hasher.hash(password))
        print(f"Password updated for {username}")
        return 0
    finally:
        await close_db(engine)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    args = parser.parse_args()

    password = getpass.getpass("New password: ")
    if not password or password != getpass.getpass("Repeat: "):
        print("Passwords are empty or do not match")
        sys.exit(1)
    sys.exit(asyncio.run(reset(args.username, password)))


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse

from forum.config import Settings
from forum.db import Base, build_engine, build_session_local
from forum.services.user_service import upsert_user


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a forum user, or change whether an existing user is a manager."
    )
    parser.add_argument("username", help="Unique username (1-20 characters).")
    parser.add_argument(
        "--manager",
        action="store_true",
        help="Grant manager permission. Without this flag the user is a regular member.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = Settings()
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session_local = build_session_local(engine)

    with session_local() as db:
        user = upsert_user(db, args.username, is_manager=args.manager)
        print(f"database_url={settings.database_url}")
        print(f"user_id={user.user_id} username={user.username} is_manager={user.is_manager}")


if __name__ == "__main__":
    main()

# scripts/create_admin.py
# Creates (or promotes) an admin account in the DATABASE_URL database from market.core.config.settings.
# Usage: python scripts/create_admin.py admin@example.com 's3cret-pass' [username]
import sys

from market.db.base import Base
from market.db.session import SessionLocal, engine
from market.services.users import UserService

import market.models.user
import market.models.product
import market.models.cart
import market.models.order


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print("usage: create_admin.py EMAIL PASSWORD [USERNAME]")
        return 2
    email, password = argv[0], argv[1]
    username = argv[2] if len(argv) > 2 else email.split("@")[0]

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = UserService(db).ensure_admin(email, password, username)
        print(f"Admin ready: id={user.id} email={user.email}")
    finally:
        db.close()
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))

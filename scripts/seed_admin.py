"""Seed an administrator account.

Registration always assigns USER, so this is the only way to get an ADMIN.
"""

import os

from app import create_app
from models import db
from models.user import ROLE_ADMIN, User

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        algorithm = app.config["PASSWORD_HASH_ALGORITHM"]
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(email=ADMIN_EMAIL, name=ADMIN_NAME, role=ROLE_ADMIN)
            admin.set_password(ADMIN_PASSWORD, algorithm)
            db.session.add(admin)
            action = "created"
        else:
            admin.role = ROLE_ADMIN
            admin.set_password(ADMIN_PASSWORD, algorithm)
            action = "updated"
        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()

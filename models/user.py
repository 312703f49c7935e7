"""User model definition."""

from datetime import datetime

from security.hashing import DEFAULT_ALGORITHM, hash_password

from . import db


ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
USER_ROLES = (ROLE_USER, ROLE_ADMIN)


class User(db.Model):
    """Represents a calendar account and its current session tokens."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*USER_ROLES, name="user_role"),
        nullable=False,
        default=ROLE_USER,
        server_default=db.text("'USER'"),
    )
    access_token = db.Column(db.String(1024), nullable=True, index=True)
    refresh_token = db.Column(db.String(1024), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password: str, algorithm: str = DEFAULT_ALGORITHM) -> None:
        """Hash and store the password."""

        self.password_hash = hash_password(password, algorithm)

    def update_tokens(self, access_token: str, refresh_token: str) -> None:
        """Replace both session tokens."""

        self.access_token = access_token
        self.refresh_token = refresh_token

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"

    def to_dict(self, include_tokens: bool = False) -> dict:
        """Serialize the user without its password hash."""

        data = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
        }
        if include_tokens:
            data["access_token"] = self.access_token
            data["refresh_token"] = self.refresh_token
        return data

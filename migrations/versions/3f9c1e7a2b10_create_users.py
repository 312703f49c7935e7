"""Create the users table with session token columns."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1e7a2b10"
down_revision = None
branch_labels = None
depends_on = None


USER_ROLE_ENUM = "user_role"


def upgrade() -> None:
    """Create the users table and its token lookup indexes."""

    user_role = sa.Enum("USER", "ADMIN", name=USER_ROLE_ENUM)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            user_role,
            nullable=False,
            server_default=sa.text("'USER'"),
        ),
        sa.Column("access_token", sa.String(length=1024), nullable=True),
        sa.Column("refresh_token", sa.String(length=1024), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(
        op.f("ix_users_access_token"), "users", ["access_token"], unique=False
    )
    op.create_index(
        op.f("ix_users_refresh_token"), "users", ["refresh_token"], unique=False
    )


def downgrade() -> None:
    """Drop the users table."""

    op.drop_index(op.f("ix_users_refresh_token"), table_name="users")
    op.drop_index(op.f("ix_users_access_token"), table_name="users")
    op.drop_table("users")
    op.execute(f"DROP TYPE IF EXISTS {USER_ROLE_ENUM}")

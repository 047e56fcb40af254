"""initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Users, accounts, tags, expenses (+ expense_tags join), incomes.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = '001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    conn = op.get_bind()

    conn.execute(sa.text("""CREATE TABLE users
                            (
                                id              INTEGER PRIMARY KEY,
                                username        VARCHAR  NOT NULL,
                                email           VARCHAR  NOT NULL,
                                hashed_password VARCHAR  NOT NULL,
                                is_active       BOOLEAN  NOT NULL,
                                is_superuser    BOOLEAN  NOT NULL,
                                created_at      DATETIME NOT NULL,
                                updated_at      DATETIME NOT NULL
                            )"""))
    conn.execute(sa.text("CREATE UNIQUE INDEX ix_users_username ON users (username)"))
    conn.execute(sa.text("CREATE UNIQUE INDEX ix_users_email ON users (email)"))

    conn.execute(sa.text("""CREATE TABLE accounts
                            (
                                id         INTEGER PRIMARY KEY,
                                user_id    INTEGER        NOT NULL,
                                name       VARCHAR        NOT NULL,
                                balance    NUMERIC(18, 6) NOT NULL,
                                created_at DATETIME       NOT NULL,
                                updated_at DATETIME       NOT NULL,
                                FOREIGN KEY (user_id) REFERENCES users (id)
                            )"""))
    conn.execute(sa.text("CREATE INDEX ix_accounts_user_id ON accounts (user_id)"))
    conn.execute(sa.text("CREATE INDEX idx_accounts_user_created ON accounts (user_id, created_at)"))

    conn.execute(sa.text("""CREATE TABLE tags
                            (
                                id         INTEGER PRIMARY KEY,
                                user_id    INTEGER  NOT NULL,
                                name       VARCHAR  NOT NULL,
                                created_at DATETIME NOT NULL,
                                CONSTRAINT uq_tags_user_name UNIQUE (user_id, name),
                                FOREIGN KEY (user_id) REFERENCES users (id)
                            )"""))
    conn.execute(sa.text("CREATE INDEX ix_tags_user_id ON tags (user_id)"))

    for table in ("expenses", "incomes"):
        conn.execute(sa.text(f"""CREATE TABLE {table}
                                 (
                                     id          INTEGER PRIMARY KEY,
                                     user_id     INTEGER        NOT NULL,
                                     title       VARCHAR        NOT NULL,
                                     amount      NUMERIC(18, 6) NOT NULL,
                                     description TEXT,
                                     date        DATE           NOT NULL,
                                     account_id  INTEGER,
                                     created_at  DATETIME       NOT NULL,
                                     updated_at  DATETIME       NOT NULL,
                                     CONSTRAINT ck_{table}_amount_non_negative CHECK (amount >= 0),
                                     FOREIGN KEY (user_id) REFERENCES users (id),
                                     FOREIGN KEY (account_id) REFERENCES accounts (id)
                                 )"""))
        conn.execute(sa.text(f"CREATE INDEX ix_{table}_user_id ON {table} (user_id)"))
        conn.execute(sa.text(f"CREATE INDEX ix_{table}_date ON {table} (date)"))
        conn.execute(sa.text(f"CREATE INDEX ix_{table}_account_id ON {table} (account_id)"))
        conn.execute(sa.text(f"CREATE INDEX idx_{table}_user_date ON {table} (user_id, date)"))

    conn.execute(sa.text("""CREATE TABLE expense_tags
                            (
                                expense_id INTEGER NOT NULL,
                                tag_id     INTEGER NOT NULL,
                                PRIMARY KEY (expense_id, tag_id),
                                FOREIGN KEY (expense_id) REFERENCES expenses (id) ON DELETE CASCADE,
                                FOREIGN KEY (tag_id) REFERENCES tags (id) ON DELETE CASCADE
                            )"""))
    conn.execute(sa.text("CREATE INDEX ix_expense_tags_tag_id ON expense_tags (tag_id)"))


def downgrade() -> None:
    """Drop all tables."""
    conn = op.get_bind()
    for table in ['expense_tags', 'incomes', 'expenses', 'tags', 'accounts', 'users']:
        conn.execute(sa.text(f"DROP TABLE IF EXISTS {table}"))

"""
users/store.py -- The users table and its repository.

UserStore is a TableAccessor bound to users_table:
  - password is hidden: usable as a filter (login lookup), never returned.
  - password is protected: update_by_id() drops it, so the hash can only be
    written by create().
  - email is checked for duplicates before insert. There is no UNIQUE index on
    email; the pre-insert lookup is the only guard (see db/query.py).
  - update_by_id() does not re-check email, so a PATCH can give two users the
    same address. Do not assume emails are unique when reading.

Layer rule: imports core/ and db/ only.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, String, Table, Text

from db.engine import Database, metadata
from db.query import TableAccessor
from users.models import User

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("email", String(255), nullable=False, index=True),
    Column("password", Text, nullable=False),  # sha256 hex digest, see auth/tokens.py
    Column("country", String(255)),
    Column("city", String(255)),
    Column("phone_number", String(64)),
    Column("position", String(255)),
    Column("created_at", String(40), nullable=False),
    Column("updated_at", String(40), nullable=False),
)


def _row_to_user(row: dict) -> User:
    return User(**row)


class UserStore(TableAccessor):
    """Repository for User records.

    Usage:
        store = UserStore(database)
        user = await store.create({"email": "a@x.com", "password": digest, ...})
        same = await store.find_one({"email": "a@x.com"})
    """

    def __init__(self, database: Database) -> None:
        super().__init__(
            database,
            users_table,
            entity="User",
            hidden=("password",),
            protected=("password",),
            unique=("email",),
            row_factory=_row_to_user,
        )

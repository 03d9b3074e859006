"""
tests/test_query.py -- Unit tests for db/query.py through UserStore.

Covers:
  - create: generated id and timestamps, Conflict on duplicate email,
    BadRequest on unknown or server-owned columns
  - find_many / find_one: newest-first order, conjunction of filters, empty
    result is [] / None, hidden columns filterable but never projected
  - update_by_id: password silently dropped, NotFound on missing id, empty
    payload only touches updated_at, email duplicates not re-checked
  - delete_by_id: returns the snapshot, NotFound on missing id
  - driver errors surface as InternalError
  - TableAccessor works on a table other than users; a UNIQUE index violation
    surfaces as Conflict
"""

from __future__ import annotations

from dataclasses import asdict

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, select, text

from core.errors import BadRequest, Conflict, InternalError, NotFound
from db.engine import Database
from db.query import TableAccessor
from users.models import User
from users.store import UserStore, users_table


async def _stored_password(database: Database, user_id: int) -> str:
    rows = await database.fetch_all(select(users_table.c.password).where(users_table.c.id == user_id))
    return rows[0]["password"]


class TestCreate:
    async def test_create_returns_record_with_generated_fields(self, user_store: UserStore, user_fields) -> None:
        user = await user_store.create(user_fields(password="hashed"))
        assert isinstance(user, User)
        assert isinstance(user.id, int)
        assert user.email == "a@x.com"
        assert user.created_at
        assert user.created_at == user.updated_at
        assert "password" not in asdict(user)

    async def test_duplicate_email_conflict(self, user_store: UserStore, user_fields) -> None:
        await user_store.create(user_fields())
        with pytest.raises(Conflict) as excinfo:
            await user_store.create(user_fields(first_name="Other"))
        assert excinfo.value.message == "User with email: a@x.com already exists"
        assert len(await user_store.find_many()) == 1

    async def test_email_match_is_case_sensitive(self, user_store: UserStore, user_fields) -> None:
        await user_store.create(user_fields(email="a@x.com"))
        await user_store.create(user_fields(email="A@x.com"))
        assert len(await user_store.find_many()) == 2

    async def test_unknown_column_rejected(self, user_store: UserStore, user_fields) -> None:
        with pytest.raises(BadRequest):
            await user_store.create(user_fields(is_admin=True))

    @pytest.mark.parametrize("column", ["id", "created_at", "updated_at"])
    async def test_server_owned_column_rejected(self, user_store: UserStore, user_fields, column: str) -> None:
        with pytest.raises(BadRequest):
            await user_store.create(user_fields(**{column: 1}))


class TestFind:
    async def test_find_many_newest_first(self, user_store: UserStore, user_fields) -> None:
        first = await user_store.create(user_fields(email="one@x.com"))
        second = await user_store.create(user_fields(email="two@x.com"))
        assert [u.id for u in await user_store.find_many()] == [second.id, first.id]

    async def test_find_many_conjunction(self, user_store: UserStore, user_fields) -> None:
        await user_store.create(user_fields(email="one@x.com", city="Paris"))
        target = await user_store.create(user_fields(email="two@x.com", city="Paris", position="CTO"))
        await user_store.create(user_fields(email="three@x.com", city="Rome", position="CTO"))
        found = await user_store.find_many({"city": "Paris", "position": "CTO"})
        assert [u.id for u in found] == [target.id]

    async def test_find_many_no_match_is_empty(self, user_store: UserStore) -> None:
        assert await user_store.find_many({"email": "nobody@x.com"}) == []

    async def test_find_one_absent_is_none(self, user_store: UserStore) -> None:
        assert await user_store.find_one({"id": 12345}) is None

    async def test_filter_on_hidden_column(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields(password="digest"))
        found = await user_store.find_one({"email": "a@x.com", "password": "digest"})
        assert found is not None and found.id == created.id
        assert await user_store.find_one({"email": "a@x.com", "password": "other"}) is None

    async def test_unknown_filter_rejected(self, user_store: UserStore) -> None:
        with pytest.raises(BadRequest):
            await user_store.find_many({"email = email OR 1": 1})

    async def test_round_trip(self, user_store: UserStore, user_fields) -> None:
        fields = user_fields(password="digest")
        await user_store.create(fields)
        found = asdict(await user_store.find_one({"email": fields["email"]}))
        for name, value in fields.items():
            if name != "password":
                assert found[name] == value


class TestUpdate:
    async def test_update_fields(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields())
        updated = await user_store.update_by_id({"city": "Oslo", "position": "Lead"}, created.id)
        assert updated.city == "Oslo"
        assert updated.position == "Lead"
        assert updated.first_name == created.first_name
        assert updated.updated_at >= created.updated_at
        assert updated.created_at == created.created_at

    async def test_password_dropped(self, database: Database, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields(password="original-digest"))
        updated = await user_store.update_by_id({"password": "overwrite", "city": "Oslo"}, created.id)
        assert updated.city == "Oslo"
        assert await _stored_password(database, created.id) == "original-digest"

    async def test_missing_id_not_found(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields())
        with pytest.raises(NotFound) as excinfo:
            await user_store.update_by_id({"city": "Oslo"}, 999)
        assert excinfo.value.message == "User with ID: 999 not found"
        assert (await user_store.find_one({"id": created.id})).city == "London"

    async def test_empty_payload_touches_updated_at_only(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields())
        updated = await user_store.update_by_id({"password": "ignored"}, created.id)
        assert asdict(updated) | {"updated_at": None} == asdict(created) | {"updated_at": None}

    async def test_unknown_column_rejected(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields())
        with pytest.raises(BadRequest):
            await user_store.update_by_id({"role": "admin"}, created.id)

    async def test_update_does_not_check_email_uniqueness(self, user_store: UserStore, user_fields) -> None:
        await user_store.create(user_fields(email="a@x.com"))
        other = await user_store.create(user_fields(email="b@x.com"))
        await user_store.update_by_id({"email": "a@x.com"}, other.id)
        assert len(await user_store.find_many({"email": "a@x.com"})) == 2


class TestDelete:
    async def test_delete_returns_snapshot(self, user_store: UserStore, user_fields) -> None:
        created = await user_store.create(user_fields())
        deleted = await user_store.delete_by_id(created.id)
        assert deleted == created
        assert await user_store.find_one({"id": created.id}) is None

    async def test_missing_id_not_found(self, user_store: UserStore, user_fields) -> None:
        await user_store.create(user_fields())
        with pytest.raises(NotFound):
            await user_store.delete_by_id(999)
        assert len(await user_store.find_many()) == 1


class TestErrors:
    async def test_driver_error_wrapped(self, database: Database, user_store: UserStore) -> None:
        await database.execute(text("DROP TABLE users"))
        with pytest.raises(InternalError) as excinfo:
            await user_store.find_many()
        assert excinfo.value.message == "Something went wrong"
        assert excinfo.value.status_code == 500


class TestGenericTable:
    async def test_accessor_on_untimestamped_table(self, database: Database) -> None:
        meta = MetaData()
        tags = Table(
            "tags",
            meta,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("label", String(50), nullable=False),
        )
        async with database.engine.begin() as conn:
            await conn.run_sync(meta.create_all)

        accessor = TableAccessor(database, tags, entity="Tag", unique=("label",))
        created = await accessor.create({"label": "blue"})
        assert created == {"id": created["id"], "label": "blue"}
        with pytest.raises(Conflict) as excinfo:
            await accessor.create({"label": "blue"})
        assert excinfo.value.message == "Tag with label: blue already exists"
        assert await accessor.update_by_id({"label": "green"}, created["id"]) == {"id": created["id"], "label": "green"}
        with pytest.raises(NotFound) as excinfo:
            await accessor.delete_by_id(created["id"] + 1)
        assert excinfo.value.message == f"Tag with ID: {created['id'] + 1} not found"

    async def test_unique_index_violation_is_conflict(self, database: Database) -> None:
        meta = MetaData()
        labels = Table(
            "labels",
            meta,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("label", String(50), unique=True),
        )
        async with database.engine.begin() as conn:
            await conn.run_sync(meta.create_all)

        # No pre-insert lookup: the database constraint is the only guard.
        accessor = TableAccessor(database, labels, entity="Label", unique=())
        await accessor.create({"label": "red"})
        with pytest.raises(Conflict) as excinfo:
            await accessor.create({"label": "red"})
        assert excinfo.value.status_code == 409
        assert len(await accessor.find_many()) == 1

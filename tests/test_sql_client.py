import asyncio
import uuid
from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, OperationalError, ProgrammingError

from pointart_api.core.errors import (
    ConflictError,
    DataAccessError,
    DataAuthError,
    DataQueryError,
    NotFoundError,
    ValidationFailed,
)
from pointart_api.db.sql_client import SqlDataClient, translate_error

ITEM_ID = str(uuid.uuid4())


def run(coro):
    return asyncio.run(coro)


class PgError(Exception):
    def __init__(self, sqlstate):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


class FakeResult:
    def __init__(self, rows):
        self.rows = rows

    def __iter__(self):
        return iter(SimpleNamespace(_mapping=row) for row in self.rows)

    def one(self):
        return SimpleNamespace(_mapping=self.rows[0])

    def scalar_one(self):
        return self.rows[0]


class FakeSession:
    """Records statements and transaction calls; plays back scripted outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.statements = []
        self.events = []

    async def execute(self, stmt):
        self.statements.append(stmt)
        self.events.append("execute")
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if outcome == "hang":
            await asyncio.sleep(5)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResult(outcome)

    async def commit(self):
        self.events.append("commit")

    async def rollback(self):
        self.events.append("rollback")


def make_client(session, **kwargs):
    kwargs.setdefault("timeout", None)
    return SqlDataClient(session, base_delay=0, **kwargs)


def compiled(stmt):
    return stmt.compile(dialect=postgresql.dialect())


def test_select_translates_filters_order_and_window():
    session = FakeSession([])
    client = make_client(session)
    run(
        client.table("stationery").select("*").eq("category", "Books").gte("stock", 2)
        .order("stock", desc=True).range(20, 24).execute()
    )
    sql = str(compiled(session.statements[0]))
    assert "stationery.category = " in sql
    assert "stationery.stock >= " in sql
    assert "ORDER BY stationery.stock DESC NULLS LAST" in sql
    assert "LIMIT" in sql and "OFFSET" in sql
    params = compiled(session.statements[0]).params
    assert {"Books", 2, 5, 20} <= set(params.values())
    assert session.events == ["execute"]


def test_count_runs_a_separate_statement():
    session = FakeSession([7], [{"item": "Pen"}])
    res = run(make_client(session).table("stationery").select("item", count="exact").execute())
    assert res.count == 7
    assert res.data == [{"item": "Pen"}]
    assert "count(*)" in str(compiled(session.statements[0]))


def test_iso_strings_become_dates_and_datetimes():
    session = FakeSession([{"id": ITEM_ID}])
    run(
        make_client(session).table("stationery").insert(
            {"item": "Pen", "category": "Writing", "date": "2024-05-01", "created_at": "2024-05-01T10:00:00Z"}
        ).execute()
    )
    params = compiled(session.statements[0]).params
    assert params["date"] == date(2024, 5, 1)
    assert params["created_at"] == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert session.events == ["execute", "commit"]


def test_update_stamps_updated_at():
    session = FakeSession([{"id": ITEM_ID}])
    run(make_client(session).table("stationery").update({"stock": 3}).eq("id", ITEM_ID).execute())
    sql = str(compiled(session.statements[0]))
    assert "updated_at=now()" in sql
    assert "RETURNING" in sql


def test_adjust_is_one_conditional_update():
    session = FakeSession([])
    res = run(
        make_client(session).table("stationery").adjust("stock", -3, floor=0).eq("id", ITEM_ID)
        .maybe_single().execute()
    )
    assert res.data is None
    sql = str(compiled(session.statements[0]))
    assert sql.startswith("UPDATE stationery SET stock=")
    assert "coalesce(stationery.stock, " in sql
    assert ">= " in sql.split("WHERE", 1)[1]
    assert len(session.statements) == 1


def test_malformed_id_matches_nothing():
    session = FakeSession([])
    with pytest.raises(NotFoundError):
        run(make_client(session).table("stationery").select("*").eq("id", "not-a-uuid").single().execute())
    assert "WHERE false" in str(compiled(session.statements[0]))
    assert session.events == ["execute"]


def test_in_filter_drops_malformed_ids():
    session = FakeSession([])
    run(make_client(session).table("stationery").select("*").in_("id", [ITEM_ID, "nope"]).execute())
    assert [ITEM_ID] in compiled(session.statements[0]).params.values()


def test_bad_payload_value_is_rejected_before_executing():
    session = FakeSession()
    with pytest.raises(ValidationFailed):
        run(make_client(session).table("stationery").insert({"item": "Pen", "stock": "many"}).execute())
    with pytest.raises(ValidationFailed):
        run(make_client(session).table("stationery").insert({"colour": "red"}).execute())
    assert session.statements == []


@pytest.mark.parametrize(
    "exc, expected",
    [
        (DBAPIError("stmt", {}, PgError("42501")), DataAuthError),
        (DataError("stmt", {}, PgError("22P02")), ValidationFailed),
        (IntegrityError("stmt", {}, PgError("23505")), ConflictError),
        (OperationalError("stmt", {}, PgError("08006")), DataAccessError),
        (ProgrammingError("stmt", {}, PgError("42P01")), DataQueryError),
    ],
)
def test_translate_error(exc, expected):
    assert type(translate_error(exc, "stationery", "select")) is expected


def test_conflict_is_not_retried():
    session = FakeSession(IntegrityError("stmt", {}, PgError("23505")))
    with pytest.raises(ConflictError):
        run(make_client(session).table("customers").insert({"full_name": "Jane"}).execute())
    assert session.events == ["execute", "rollback"]


def test_operational_error_is_retried_after_rollback():
    session = FakeSession(OperationalError("stmt", {}, PgError("08006")), [{"id": ITEM_ID}])
    res = run(make_client(session).table("customers").insert({"full_name": "Jane"}).execute())
    assert res.data == [{"id": ITEM_ID}]
    assert session.events == ["execute", "rollback", "rollback", "execute", "commit"]


def test_timed_out_attempt_is_rolled_back_before_retry():
    session = FakeSession("hang", [{"id": ITEM_ID}])
    res = run(make_client(session, timeout=0.05).table("customers").insert({"full_name": "Jane"}).execute())
    assert res.data == [{"id": ITEM_ID}]
    assert session.events == ["execute", "rollback", "execute", "commit"]


def test_timeout_on_every_attempt_is_data_access_error():
    session = FakeSession("hang", "hang")
    with pytest.raises(DataAccessError):
        run(make_client(session, timeout=0.05, max_attempts=2).table("customers").select("*").execute())


def test_transaction_commits_once_at_the_end():
    session = FakeSession([{"id": ITEM_ID}], [{"id": ITEM_ID}])
    client = make_client(session)

    async def block():
        async with client.transaction():
            await client.table("stationery").adjust("stock", -1, floor=0).eq("id", ITEM_ID).execute()
            await client.table("stationery_sales").insert(
                {"item_id": ITEM_ID, "quantity": 1, "selling_price": 500, "total_amount": 500, "profit": 200}
            ).execute()

    run(block())
    assert session.events == ["execute", "execute", "commit"]


def test_transaction_rolls_back_and_does_not_retry():
    session = FakeSession([{"id": ITEM_ID}], OperationalError("stmt", {}, PgError("08006")))
    client = make_client(session)

    async def block():
        async with client.transaction():
            await client.table("stationery").adjust("stock", -1, floor=0).eq("id", ITEM_ID).execute()
            await client.table("customers").insert({"full_name": "Jane"}).execute()

    with pytest.raises(DataAccessError):
        run(block())
    assert session.events == ["execute", "execute", "rollback"]
    assert not client.in_transaction

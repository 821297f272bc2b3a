import logging
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from quote_importer.adapters.supabase_client import SupabaseQuotationStore
from quote_importer.errors import StoreError
from quote_importer.logging_config import get_logger, setup_logging


class FakeQuery:
    """Records the fluent calls made on a postgrest query builder."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.steps = []

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.steps.append((name, args, kwargs))
            return self

        return step

    def execute(self):
        self.client.executed.append((self.table, self.steps))
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.data)


class FakeSupabase:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.executed = []

    def table(self, name):
        return FakeQuery(self, name)


def test_select_chains_filters():
    client = FakeSupabase(data=[{"id": 3}])
    store = SupabaseQuotationStore(client)

    rows = store.select("customers", {"name": "A"}, columns="id", ilike={"name": "%A%"}, limit=1)

    assert rows == [{"id": 3}]
    table, steps = client.executed[0]
    assert table == "customers"
    assert [(name, args) for name, args, _ in steps] == [
        ("select", ("id",)),
        ("eq", ("name", "A")),
        ("ilike", ("name", "%A%")),
        ("limit", (1,)),
    ]


def test_insert_upsert_and_delete():
    client = FakeSupabase(data=None)
    store = SupabaseQuotationStore(client)

    assert store.insert("cases", []) == []
    assert client.executed == []
    assert store.insert("cases", [{"case_id": "x"}]) == []
    store.upsert("products", [{"name": "p"}], on_conflict="name")
    store.delete("cases", {"case_id": "x"})

    assert [steps[0][0] for _, steps in client.executed] == ["insert", "upsert", "delete"]
    assert client.executed[1][1][0][2] == {"on_conflict": "name"}
    with pytest.raises(ValueError):
        store.delete("cases", {})


def test_api_errors_become_store_errors():
    error = APIError({"message": "duplicate key", "code": "23505"})
    store = SupabaseQuotationStore(FakeSupabase(error=error))
    with pytest.raises(StoreError) as excinfo:
        store.insert("customers", [{"name": "x"}])
    assert excinfo.value.table == "customers"
    assert "duplicate key" in str(excinfo.value)


def test_transport_errors_become_store_errors():
    store = SupabaseQuotationStore(FakeSupabase(error=httpx.ConnectError("refused")))
    with pytest.raises(StoreError):
        store.select("cases")


def test_logging_setup_is_idempotent():
    first = setup_logging("debug")
    second = setup_logging("warning")
    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert get_logger("backend").name == "quote_importer.backend"
    assert get_logger("quote_importer.mapping").name == "quote_importer.mapping"
    setup_logging("INFO")

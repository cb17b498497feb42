import pytest
from filelock import FileLock

from storefront.core.errors import PersistenceError
from storefront.database import FileBackedDB


@pytest.fixture
def store(temp_data_dir):
    return FileBackedDB(temp_data_dir, lock_timeout=0.2)


def test_missing_table_reads_as_empty(store):
    assert store.list_records("carts") == []
    assert store.get_record("carts", "user_id", "u1") is None


def test_create_generates_id_and_reads_back_as_strings(store):
    row = store.create_record("products", {"name": "Mug", "price": 120.0})
    assert row["id"]
    got = store.get_record("products", "id", row["id"])
    assert got["name"] == "Mug"
    assert float(got["price"]) == 120.0


def test_apply_record_inserts_updates_and_deletes(store):
    stored = store.apply_record("carts", "user_id", "u1", lambda row: {"items": "[]", "version": 1})
    assert stored["user_id"] == "u1"
    cart_id = stored["id"]

    def bump(row):
        assert row is not None
        return {**row, "version": int(row["version"]) + 1}

    updated = store.apply_record("carts", "user_id", "u1", bump)
    assert updated["id"] == cart_id
    assert store.get_record("carts", "user_id", "u1")["version"] == "2"

    assert store.apply_record("carts", "user_id", "u1", lambda row: None) is None
    assert store.get_record("carts", "user_id", "u1") is None


def test_apply_record_writes_nothing_when_fn_raises(store):
    store.apply_record("carts", "user_id", "u1", lambda row: {"items": "[]", "version": 1})

    def boom(row):
        raise ValueError("nope")

    with pytest.raises(ValueError):
        store.apply_record("carts", "user_id", "u1", boom)
    assert store.get_record("carts", "user_id", "u1")["version"] == "1"


def test_update_and_delete_report_misses(store):
    assert store.update_record("users", "email", "ghost@example.com", {"is_admin": True}) is None
    assert store.delete_record("users", "email", "ghost@example.com") is False


def test_find_records_keeps_file_order(store):
    for n in range(3):
        store.create_record("orders", {"user_id": "u1", "total_amount": n})
    store.create_record("orders", {"user_id": "u2", "total_amount": 9})
    rows = store.find_records("orders", "user_id", "u1")
    assert [r["total_amount"] for r in rows] == ["0", "1", "2"]


def test_lock_timeout_becomes_persistence_error(store):
    path = store._file_path("carts")
    held = FileLock(str(path) + ".lock")
    held.acquire()
    try:
        with pytest.raises(PersistenceError):
            store.create_record("carts", {"user_id": "u1"})
    finally:
        held.release()


def test_unreadable_table_raises_persistence_error(store, data_path):
    # a directory where the CSV file should be cannot be read
    data_path("orders.csv").mkdir()
    with pytest.raises(PersistenceError):
        store.list_records("orders")


def test_writes_replace_the_file_whole(store, data_path):
    store.create_record("carts", {"user_id": "u1", "items": "[]"})
    store.apply_record("carts", "user_id", "u2", lambda row: {"items": "[]"})
    assert sorted(p.name for p in data_path("").iterdir() if not p.name.endswith(".lock")) == ["carts.csv"]
    assert [r["user_id"] for r in store.list_records("carts")] == ["u1", "u2"]

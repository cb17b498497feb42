# storefront/database.py
"""
Simple file-backed DB layer using CSV files as storage.
Provides basic CRUD primitives per table name plus an atomic
read-modify-write (`apply_record`). Every write holds the table's file lock
and swaps the new file in with os.replace, so lock-free readers never see a
partial table. Every lock acquisition is bounded by settings.STORAGE_LOCK_TIMEOUT.

Usage:
    from storefront.database import db
    db.list_records("users")
    db.get_record("products", "id", "ab12...")
    db.create_record("users", {"name": "bob", "email": "b@x.com"})
    db.apply_record("carts", "user_id", "u1", lambda row: {...})
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging
import os
import uuid

import pandas as pd
from filelock import FileLock, Timeout

from storefront.config import settings
from storefront.core.errors import PersistenceError

logger = logging.getLogger(__name__)

DATA_DIR = Path(settings.DATA_DIR)

Row = Dict[str, Any]


class FileBackedDB:
    """
    Manages CSV files inside DATA_DIR.
    Table name corresponds to a file name in settings (or you may pass full filename).
    """

    def __init__(self, data_dir: Path = DATA_DIR, lock_timeout: float = settings.STORAGE_LOCK_TIMEOUT):
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout

    def _file_path(self, table: str) -> Path:
        """
        Resolve table -> file path. If table looks like a filename (has .csv),
        use it directly (relative to data_dir). Otherwise try config mapping,
        else fallback to table + .csv
        """
        if table.endswith(".csv"):
            return Path(self.data_dir) / Path(table)

        mapping = {
            "users": settings.USERS_FILE,
            "products": settings.PRODUCTS_FILE,
            "orders": settings.ORDERS_FILE,
            "carts": settings.CARTS_FILE,
        }
        filename = mapping.get(table, f"{table}.csv")
        return Path(self.data_dir) / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock", timeout=self.lock_timeout)

    @contextmanager
    def _locked(self, table: str) -> Iterator[Path]:
        path = self._file_path(table)
        path.parent.mkdir(parents=True, exist_ok=True)
        lock = self._lock_for(path)
        try:
            lock.acquire()
        except Timeout:
            logger.error("Timed out waiting for lock on %s", path)
            raise PersistenceError(f"Storage busy: could not lock table '{table}'")
        try:
            yield path
        finally:
            lock.release()

    def _read_df(self, table: str) -> pd.DataFrame:
        path = self._file_path(table)
        if not path.exists():
            return pd.DataFrame()
        try:
            return pd.read_csv(path, dtype=str, keep_default_na=False).fillna("")
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except (OSError, pd.errors.ParserError) as e:
            logger.error("Failed to read table %s: %s", table, e)
            raise PersistenceError(f"Could not read table '{table}'") from e

    def _write_df_nolock(self, path: Path, df: pd.DataFrame) -> None:
        """
        Write DataFrame to `path` WITHOUT acquiring file lock.
        Use this only when the caller already holds the lock.
        """
        tmp = path.with_name(path.name + ".tmp")
        try:
            # readers take no lock; they must only ever see a whole file
            df.to_csv(tmp, index=False)
            os.replace(tmp, path)
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise PersistenceError(f"Could not write '{path.name}'") from e

    @staticmethod
    def _records(df: pd.DataFrame) -> List[Row]:
        if df.empty:
            return []
        return df.to_dict(orient="records")

    @staticmethod
    def _to_df(rows: List[Row], columns: List[str]) -> pd.DataFrame:
        cleaned = [{k: ("" if v is None else v) for k, v in r.items()} for r in rows]
        if not cleaned:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame(cleaned)
        # keep previously known columns, even if no current row uses them
        missing = [c for c in columns if c not in df.columns]
        for c in missing:
            df[c] = ""
        return df

    # --- high-level CRUD primitives ---

    def list_records(self, table: str) -> List[Row]:
        return self._records(self._read_df(table))

    def find_records(self, table: str, key: str, value: Any) -> List[Row]:
        """All rows where row[key] == value, in file order."""
        return [r for r in self.list_records(table) if str(r.get(key, "")) == str(value)]

    def get_record(self, table: str, key: str, value: Any) -> Optional[Row]:
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return None
        # treat everything as string for comparison simplicity
        mask = df[key].astype(str) == str(value)
        if not mask.any():
            return None
        return df[mask].iloc[0].to_dict()

    def create_record(self, table: str, data: Row, id_field: str = "id") -> Row:
        """
        Create a new record. If id_field not present in `data`, one will be generated (uuid4 hex).
        Returns the saved record (with id).
        """
        if id_field not in data or not data.get(id_field):
            data[id_field] = uuid.uuid4().hex
        with self._locked(table) as path:
            df = self._read_df(table)
            rows = self._records(df)
            rows.append(dict(data))
            self._write_df_nolock(path, self._to_df(rows, list(df.columns)))
        return data

    def update_record(self, table: str, key: str, value: Any, updates: Row) -> Optional[Row]:
        """
        Update rows where row[key] == value with fields in updates. Returns the updated first row dict or None.
        """
        with self._locked(table) as path:
            df = self._read_df(table)
            rows = self._records(df)
            matched = None
            for r in rows:
                if str(r.get(key, "")) == str(value):
                    r.update(updates)
                    matched = matched or r
            if matched is None:
                return None
            self._write_df_nolock(path, self._to_df(rows, list(df.columns)))
            return dict(matched)

    def delete_record(self, table: str, key: str, value: Any) -> bool:
        """
        Delete all records where row[key] == value. Returns True if any rows were removed.
        """
        with self._locked(table) as path:
            df = self._read_df(table)
            rows = self._records(df)
            kept = [r for r in rows if str(r.get(key, "")) != str(value)]
            if len(kept) == len(rows):
                return False
            self._write_df_nolock(path, self._to_df(kept, list(df.columns)))
            return True

    def apply_record(self, table: str, key: str, value: Any,
                     fn: Callable[[Optional[Row]], Optional[Row]], id_field: str = "id") -> Optional[Row]:
        """
        Atomically read the row where row[key] == value, pass it (or None) to `fn`
        and store what `fn` returns, all under the table lock.

        - fn returns a dict -> the row is replaced (or inserted, with a generated id)
        - fn returns None   -> the row is deleted (no-op if it did not exist)

        Exceptions raised by `fn` abort the operation without writing anything.
        Returns the stored row, or None when the row was deleted.
        """
        with self._locked(table) as path:
            df = self._read_df(table)
            rows = self._records(df)
            idx = next((i for i, r in enumerate(rows) if str(r.get(key, "")) == str(value)), None)
            current = dict(rows[idx]) if idx is not None else None

            new_row = fn(current)

            if new_row is None:
                if idx is None:
                    return None
                rows.pop(idx)
            else:
                new_row = dict(new_row)
                new_row[key] = value
                if not new_row.get(id_field):
                    new_row[id_field] = (current or {}).get(id_field) or uuid.uuid4().hex
                if idx is None:
                    rows.append(new_row)
                else:
                    rows[idx] = new_row
            self._write_df_nolock(path, self._to_df(rows, list(df.columns)))
            return new_row


# module-level singleton for convenience
db = FileBackedDB()

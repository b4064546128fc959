import asyncio
import logging
from copy import deepcopy
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

from fintrack import SEED_PATH
from fintrack.naming_conventions import OWNER_FIELD, SHARED_TABLES, Tables
from fintrack.transforms import Row, load_seed

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class MemoryStore:
    """
    Table-oriented row store standing in for the hosted backend.

    Rows are plain dicts. Every owned table is filtered by ``user_id``;
    tables in ``SHARED_TABLES`` are visible to everyone. Returned rows are
    copies, so callers cannot change stored data except through
    ``insert``, ``update`` and ``delete``.
    """

    def __init__(self, tables: Optional[Mapping[Tables, Iterable[Row]]] = None):
        self._tables: Dict[Tables, List[Row]] = {t: [] for t in Tables}
        for table, rows in (tables or {}).items():
            self._tables[table] = [dict(r) for r in rows]

    @classmethod
    def from_seed(cls, path: str = SEED_PATH) -> "MemoryStore":
        return cls(load_seed(path))

    def _rows(self, table: Tables) -> List[Row]:
        if not isinstance(table, Tables):
            raise StoreError(f"Unknown table {table!r}")
        return self._tables[table]

    def _owned(self, table: Tables, owner_id: Optional[str]) -> List[Row]:
        rows = self._rows(table)
        if table in SHARED_TABLES:
            return rows
        return [r for r in rows if r.get(OWNER_FIELD) == owner_id]

    def _find(self, table: Tables, row_id: str, owner_id: Optional[str]) -> Row:
        for row in self._owned(table, owner_id):
            if row.get("id") == row_id:
                return row
        raise StoreError(f"No row {row_id} in {table.value}")

    async def select(
        self,
        table: Tables,
        owner_id: Optional[str] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        rows = deepcopy(self._owned(table, owner_id))
        if order_by is not None:
            rows.sort(key=lambda r: str(r.get(order_by, "")), reverse=descending)
        await asyncio.sleep(0)
        logger.debug(f"Selected {len(rows)} rows from {table.value}")
        return rows

    async def insert(self, table: Tables, row: Mapping[str, Any]) -> Row:
        new_row = dict(row)
        new_row.setdefault("id", str(uuid4()))
        self._rows(table).append(new_row)
        await asyncio.sleep(0)
        logger.info(f"Inserted {table.value} {new_row['id']}")
        return deepcopy(new_row)

    async def update(self, table: Tables, row_id: str, changes: Mapping[str, Any], owner_id: Optional[str] = None) -> Row:
        row = self._find(table, row_id, owner_id)
        row.update(changes)
        await asyncio.sleep(0)
        logger.info(f"Updated {table.value} {row_id}: {sorted(changes)}")
        return deepcopy(row)

    async def delete(self, table: Tables, row_id: str, owner_id: Optional[str] = None) -> None:
        row = self._find(table, row_id, owner_id)
        self._rows(table).remove(row)
        await asyncio.sleep(0)
        logger.info(f"Deleted {table.value} {row_id}")

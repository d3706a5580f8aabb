from typing import Dict, Optional, Protocol, runtime_checkable
from sqlalchemy import select
from sqlalchemy.engine import Engine
from tenantnotes.database import Base, create_session_factory
from tenantnotes.models.storage_item import StorageItem
from tenantnotes.core.logging_config import logger


class StorageError(Exception):
    """Base error for failures in the persistence layer."""


class CorruptCollectionError(StorageError):
    """A stored collection could not be decoded or validated."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Collection '{key}' is corrupt: {reason}")


@runtime_checkable
class KeyValueStorage(Protocol):
    """
    Durable string-keyed store holding serialized collections.

    Mirrors the browser local storage surface: values are opaque strings
    and every write replaces the previous value for the key.
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process storage; contents are lost when the object goes away."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLStorage:
    """
    Key-value storage persisted in a single SQLAlchemy table.

    Each call opens its own session and commits immediately. There is no
    locking across calls: two processes sharing the database can still
    overwrite each other's whole-collection writes.
    """

    def __init__(self, engine: Engine, create_tables: bool = True):
        """
        Initialize storage on an engine.

        Args:
            engine: SQLAlchemy engine (see database.create_db_engine)
            create_tables: Create the storage_item table if missing
        """
        self.engine = engine
        self.SessionLocal = create_session_factory(engine)
        if create_tables:
            Base.metadata.create_all(bind=engine, tables=[StorageItem.__table__])

    def get_item(self, key: str) -> Optional[str]:
        with self.SessionLocal() as db:
            stmt = select(StorageItem.value).where(StorageItem.key == key)
            return db.execute(stmt).scalar_one_or_none()

    def set_item(self, key: str, value: str) -> None:
        with self.SessionLocal() as db:
            item = db.get(StorageItem, key)
            if item is None:
                db.add(StorageItem(key=key, value=value))
            else:
                item.value = value
            try:
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to write storage key {key}: {type(e).__name__}: {str(e)}")
                raise

    def remove_item(self, key: str) -> None:
        with self.SessionLocal() as db:
            item = db.get(StorageItem, key)
            if item is None:
                return
            db.delete(item)
            try:
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to remove storage key {key}: {type(e).__name__}: {str(e)}")
                raise

from typing import Optional
from tenantnotes.core.config import Settings, settings as default_settings
from tenantnotes.core.logging_config import logger
from tenantnotes.database import create_db_engine
from tenantnotes.services.tenant_store import TenantStore
from tenantnotes.storage import KeyValueStorage, MemoryStorage, SQLStorage


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    """
    Build the key-value storage selected by STORAGE_BACKEND.

    Args:
        settings: Settings to read; defaults to the environment settings

    Returns:
        MemoryStorage or SQLStorage instance

    Raises:
        ValueError: If the backend name is not recognised
    """
    settings = settings or default_settings
    backend = settings.STORAGE_BACKEND
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()
    if backend == "sql":
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        return SQLStorage(engine)
    raise ValueError(f"Unknown storage backend: {backend}")


def create_tenant_store(settings: Optional[Settings] = None) -> TenantStore:
    """
    Build a TenantStore with initialized collections.

    Call once per process and share the returned store.
    """
    store = TenantStore(create_storage(settings))
    store.ensure_init()
    logger.info("Tenant store ready")
    return store

from tenantnotes.crud.base import CollectionCRUD, ensure_init, read_collection, write_collection
from tenantnotes.crud.tenant import tenant
from .membership import membership
from .note import note

__all__ = ["CollectionCRUD", "ensure_init", "read_collection", "write_collection", "tenant", "membership", "note"]

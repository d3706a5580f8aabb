import json
from typing import Generic, TypeVar, Type, Optional, List, Dict, Tuple, Any
from pydantic import BaseModel, ValidationError
from tenantnotes.storage import KeyValueStorage, CorruptCollectionError
from tenantnotes.core.logging_config import logger

TENANTS_KEY = "saas_tenants"
MEMBERSHIPS_KEY = "saas_memberships"
NOTES_KEY = "saas_notes"

COLLECTION_KEYS = (TENANTS_KEY, MEMBERSHIPS_KEY, NOTES_KEY)

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def ensure_init(storage: KeyValueStorage) -> None:
    """
    Create every collection as an empty list if it is absent.

    Idempotent; existing collections are left untouched.

    Args:
        storage: Key-value storage backend
    """
    for key in COLLECTION_KEYS:
        if not storage.get_item(key):
            write_collection(storage, key, [])


def read_collection(storage: KeyValueStorage, key: str, fallback: Any = None) -> Any:
    """
    Read and decode a whole collection.

    Args:
        storage: Key-value storage backend
        key: Collection key
        fallback: Value returned when the key is absent or empty

    Returns:
        Decoded JSON value, or fallback

    Raises:
        CorruptCollectionError: If the stored value is not valid JSON
    """
    raw = storage.get_item(key)
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to decode collection {key}: {str(e)}")
        raise CorruptCollectionError(key, str(e)) from e


def write_collection(storage: KeyValueStorage, key: str, value: Any) -> None:
    """
    Serialize and persist a whole collection, replacing the previous value.

    Args:
        storage: Key-value storage backend
        key: Collection key
        value: JSON-serializable value
    """
    storage.set_item(key, json.dumps(value, separators=(",", ":")))


def _matches(item: BaseModel, match: Dict[str, Any]) -> bool:
    return all(getattr(item, field) == value for field, value in match.items())


class CollectionCRUD(Generic[SchemaType]):
    """
    Generic access to one stored collection of records.

    Every read loads the full collection and every write replaces it.
    Lookups are linear scans; there are no indexes.

    Type Parameters:
        SchemaType: Pydantic model describing one record
    """

    def __init__(self, schema: Type[SchemaType], key: str):
        """
        Initialize CRUD object with record schema and collection key.

        Args:
            schema: Pydantic model class for records
            key: Storage key of the collection
        """
        self.schema = schema
        self.key = key

    def _load(self, storage: KeyValueStorage) -> List[Tuple[Dict[str, Any], SchemaType]]:
        """
        Load stored records paired with their validated models.

        Writes go back through the raw dicts so records an operation does
        not target are persisted exactly as they were read.
        """
        raw_items = read_collection(storage, self.key, [])
        if not isinstance(raw_items, list):
            raise CorruptCollectionError(self.key, "expected a list of records")
        try:
            return [(raw, self.schema.model_validate(raw)) for raw in raw_items]
        except ValidationError as e:
            logger.error(f"Invalid record in collection {self.key}: {str(e)}")
            raise CorruptCollectionError(self.key, str(e)) from e

    def _dump(self, obj: SchemaType) -> Dict[str, Any]:
        return obj.model_dump(by_alias=True, mode="json")

    def get_all(self, storage: KeyValueStorage) -> List[SchemaType]:
        """
        Load every record in the collection, in stored order.

        Args:
            storage: Key-value storage backend

        Returns:
            List of records (empty if the collection does not exist)

        Raises:
            CorruptCollectionError: If the collection cannot be decoded
                or a record fails validation
        """
        return [item for _, item in self._load(storage)]

    def append(self, storage: KeyValueStorage, obj: SchemaType) -> SchemaType:
        """
        Add a record to the end of the collection.

        Args:
            storage: Key-value storage backend
            obj: Record to add

        Returns:
            The added record
        """
        raw_items = [raw for raw, _ in self._load(storage)]
        raw_items.append(self._dump(obj))
        write_collection(storage, self.key, raw_items)
        return obj

    def find_first(self, storage: KeyValueStorage, **match: Any) -> Optional[SchemaType]:
        """
        Return the first record whose attributes equal all given values.

        Args:
            storage: Key-value storage backend
            **match: Attribute name/value pairs

        Returns:
            Record or None if nothing matches
        """
        for item in self.get_all(storage):
            if _matches(item, match):
                return item
        return None

    def filter(self, storage: KeyValueStorage, **match: Any) -> List[SchemaType]:
        """
        Return every record whose attributes equal all given values.

        Args:
            storage: Key-value storage backend
            **match: Attribute name/value pairs

        Returns:
            Matching records in stored order
        """
        return [item for item in self.get_all(storage) if _matches(item, match)]

    def update(
        self,
        storage: KeyValueStorage,
        *,
        match: Dict[str, Any],
        obj_in: Dict[str, Any]
    ) -> Optional[SchemaType]:
        """
        Update the first record matching the given attributes.

        Only the fields named in obj_in change in storage; the rest of the
        stored record, unknown keys included, is kept as it was.

        Args:
            storage: Key-value storage backend
            match: Attribute name/value pairs identifying the record
            obj_in: Field names and new values

        Returns:
            Updated record, or None if nothing matched (nothing is written)
        """
        loaded = self._load(storage)
        for idx, (raw, item) in enumerate(loaded):
            if _matches(item, match):
                updated = item.model_copy(update=obj_in)
                dumped = self._dump(updated)
                new_raw = dict(raw)
                for field in obj_in:
                    alias = self.schema.model_fields[field].alias or field
                    new_raw[alias] = dumped[alias]
                raw_items = [r for r, _ in loaded]
                raw_items[idx] = new_raw
                write_collection(storage, self.key, raw_items)
                return updated
        return None

    def delete(self, storage: KeyValueStorage, **match: Any) -> int:
        """
        Remove every record matching the given attributes.

        The collection is rewritten even when nothing matched.

        Args:
            storage: Key-value storage backend
            **match: Attribute name/value pairs

        Returns:
            Number of removed records
        """
        loaded = self._load(storage)
        remaining = [raw for raw, item in loaded if not _matches(item, match)]
        write_collection(storage, self.key, remaining)
        return len(loaded) - len(remaining)

from typing import Optional, List
from tenantnotes.crud.base import CollectionCRUD, NOTES_KEY
from tenantnotes.core.identifiers import parse_iso
from tenantnotes.schemas.note import Note
from tenantnotes.storage import KeyValueStorage, CorruptCollectionError
from tenantnotes.core.logging_config import logger


class CRUDNote(CollectionCRUD[Note]):
    """
    CRUD operations for the notes collection.
    
    A note is addressed by the (tenant_id, id) pair everywhere, so a
    note id taken from another tenant never matches.
    """
    
    def get(self, storage: KeyValueStorage, *, id: str, tenant_id: str) -> Optional[Note]:
        return self.find_first(storage, id=id, tenant_id=tenant_id)
    
    def get_multi(self, storage: KeyValueStorage, *, tenant_id: str) -> List[Note]:
        """
        Get a tenant's notes, most recently updated first.
        
        The sort is stable, so notes with equal updated_at keep their
        stored order.
        
        Args:
            storage: Key-value storage backend
            tenant_id: Tenant ID for isolation
            
        Returns:
            List of Note instances
        """
        notes = self.filter(storage, tenant_id=tenant_id)
        try:
            return sorted(notes, key=lambda n: parse_iso(n.updated_at), reverse=True)
        except ValueError as e:
            logger.error(f"Invalid updatedAt in collection {self.key}: {str(e)}")
            raise CorruptCollectionError(self.key, f"invalid updatedAt: {str(e)}") from e
    
    def count(self, storage: KeyValueStorage, *, tenant_id: str) -> int:
        # Same predicate as get_multi
        return len(self.filter(storage, tenant_id=tenant_id))
    
    def create(
        self,
        storage: KeyValueStorage,
        *,
        id: str,
        tenant_id: str,
        author_email: str,
        title: str,
        content: str,
        timestamp: str
    ) -> Note:
        """
        Append a new note with trimmed title and content.
        
        Args:
            storage: Key-value storage backend
            id: Generated note id
            tenant_id: Owning tenant
            author_email: Normalized author email
            title: Note title
            content: Note body
            timestamp: ISO-8601 value used for both created_at and updated_at
            
        Returns:
            Created Note instance
        """
        note = Note(
            id=id,
            tenant_id=tenant_id,
            author_email=author_email,
            title=title.strip(),
            content=content.strip(),
            created_at=timestamp,
            updated_at=timestamp,
        )
        return self.append(storage, note)
    
    def update_content(
        self,
        storage: KeyValueStorage,
        *,
        id: str,
        tenant_id: str,
        title: str,
        content: str,
        updated_at: str
    ) -> Optional[Note]:
        return self.update(
            storage,
            match={"id": id, "tenant_id": tenant_id},
            obj_in={"title": title.strip(), "content": content.strip(), "updated_at": updated_at}
        )
    
    def remove(self, storage: KeyValueStorage, *, id: str, tenant_id: str) -> int:
        return self.delete(storage, id=id, tenant_id=tenant_id)


# Create a singleton instance
note = CRUDNote(Note, NOTES_KEY)

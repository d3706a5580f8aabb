from datetime import datetime
from typing import List
from tenantnotes.crud import note as note_crud, tenant as tenant_crud
from tenantnotes.crud.base import ensure_init
from tenantnotes.core.identifiers import generate_id, to_iso
from tenantnotes.core.user_context import normalize_email
from tenantnotes.core.logging_config import logger
from tenantnotes.schemas.common import OperationResult, ErrorKind
from tenantnotes.schemas.note import Note
from tenantnotes.schemas.tenant import FREE_PLAN_NOTE_LIMIT
from tenantnotes.storage import KeyValueStorage

QUOTA_EXCEEDED_MESSAGE = f"Free plan limit reached ({FREE_PLAN_NOTE_LIMIT} notes). Upgrade to Pro."


class NoteService:
    """
    Service layer for notes.
    
    Enforces the free-plan quota on create and tenant isolation on update
    and delete.
    """
    
    def __init__(self):
        self.crud = note_crud
    
    def list_notes(self, storage: KeyValueStorage, tenant_id: str) -> List[Note]:
        return self.crud.get_multi(storage, tenant_id=tenant_id)
    
    def count_notes(self, storage: KeyValueStorage, tenant_id: str) -> int:
        return self.crud.count(storage, tenant_id=tenant_id)
    
    def create_note(
        self,
        storage: KeyValueStorage,
        tenant_id: str,
        author_email: str,
        title: str,
        content: str,
        now: datetime
    ) -> OperationResult:
        """
        Create a note, subject to the tenant's plan quota.
        
        Args:
            storage: Key-value storage backend
            tenant_id: Owning tenant
            author_email: Author email (any case)
            title: Note title (trimmed)
            content: Note body (trimmed)
            now: Current time, used for the id and both timestamps
            
        Returns:
            OperationResult with the created note, TenantNotFound, or
            QuotaExceeded when a free tenant already has the maximum
        """
        ensure_init(storage)
        tenant = tenant_crud.get(storage, tenant_id)
        if not tenant:
            logger.warning(f"Note creation failed: tenant_id={tenant_id} not found")
            return OperationResult.fail(ErrorKind.tenant_not_found)
        
        # Business rule: free tenants hold at most FREE_PLAN_NOTE_LIMIT notes
        if tenant.is_free and self.count_notes(storage, tenant_id) >= FREE_PLAN_NOTE_LIMIT:
            logger.info(f"Note creation rejected: free plan limit reached for tenant_id={tenant_id}")
            return OperationResult.fail(ErrorKind.quota_exceeded, QUOTA_EXCEEDED_MESSAGE)
        
        note = self.crud.create(
            storage,
            id=generate_id(now),
            tenant_id=tenant_id,
            author_email=normalize_email(author_email),
            title=title,
            content=content,
            timestamp=to_iso(now)
        )
        logger.info(f"Note created: id={note.id}, tenant_id={tenant_id}")
        return OperationResult.ok(note=note)
    
    def update_note(
        self,
        storage: KeyValueStorage,
        tenant_id: str,
        note_id: str,
        title: str,
        content: str,
        now: datetime
    ) -> OperationResult:
        """
        Overwrite a note's title and content and refresh updated_at.
        
        Both the note id and tenant id must match; a note belonging to a
        different tenant is reported as not found and left untouched.
        
        Returns:
            OperationResult with the updated note, or NoteNotFound
        """
        note = self.crud.update_content(
            storage,
            id=note_id,
            tenant_id=tenant_id,
            title=title,
            content=content,
            updated_at=to_iso(now)
        )
        if not note:
            logger.warning(f"Note update failed: id={note_id} not found in tenant_id={tenant_id}")
            return OperationResult.fail(ErrorKind.note_not_found)
        
        logger.info(f"Note updated: id={note_id}, tenant_id={tenant_id}")
        return OperationResult.ok(note=note)
    
    def delete_note(self, storage: KeyValueStorage, tenant_id: str, note_id: str) -> OperationResult:
        """
        Delete a note. Always succeeds, even if nothing matched.
        """
        removed = self.crud.remove(storage, id=note_id, tenant_id=tenant_id)
        logger.info(f"Note delete: id={note_id}, tenant_id={tenant_id}, removed={removed}")
        return OperationResult.ok()


# Create a singleton instance
note_service = NoteService()

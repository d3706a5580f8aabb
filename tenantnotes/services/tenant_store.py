from datetime import datetime
from typing import Any, Callable, List, Optional
from tenantnotes.crud import base as collections
from tenantnotes.core.identifiers import utc_now
from tenantnotes.schemas.common import OperationResult
from tenantnotes.schemas.membership import Membership, MemberRole
from tenantnotes.schemas.note import Note
from tenantnotes.schemas.tenant import Tenant
from tenantnotes.services.membership import membership_service
from tenantnotes.services.note import note_service
from tenantnotes.services.tenant import tenant_service
from tenantnotes.storage import KeyValueStorage


class TenantStore:
    """
    Tenant, membership and note data layer over a key-value storage.

    Construct one per process and pass it to callers. Each method loads
    the collections it needs, computes the result and writes whole
    collections back. Methods are atomic only with respect to themselves:
    two stores sharing one backing storage can overwrite each other's
    writes, since nothing locks across the read-modify-write cycle.

    Expected failures (unknown tenant, note or membership, invalid invite
    code, exhausted quota) come back as an OperationResult with
    success=False. Corrupt stored data raises CorruptCollectionError.
    """

    def __init__(self, storage: KeyValueStorage, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            storage: Backend holding the serialized collections
            clock: Returns the current time; defaults to UTC now
        """
        self.storage = storage
        self.clock = clock or utc_now

    # Collections

    def ensure_init(self) -> None:
        collections.ensure_init(self.storage)

    def read_collection(self, name: str, fallback: Any = None) -> Any:
        return collections.read_collection(self.storage, name, fallback)

    def write_collection(self, name: str, value: Any) -> None:
        collections.write_collection(self.storage, name, value)

    # Tenants

    def get_or_create_tenant_by_name(self, name: str) -> Tenant:
        return tenant_service.get_or_create_tenant_by_name(self.storage, name, self.clock())

    def create_team(self, name: str, owner_email: Optional[str]) -> OperationResult:
        return tenant_service.create_team(self.storage, name, owner_email, self.clock())

    def get_tenant_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return tenant_service.get_tenant_by_id(self.storage, tenant_id)

    def get_tenant_by_invite_code(self, code: Optional[str]) -> Optional[Tenant]:
        return tenant_service.get_tenant_by_invite_code(self.storage, code)

    def rotate_invite_code(self, tenant_id: str) -> OperationResult:
        return tenant_service.rotate_invite_code(self.storage, tenant_id)

    def list_user_teams(self, user_email: Optional[str]) -> List[Tenant]:
        return tenant_service.list_user_teams(self.storage, user_email)

    def upgrade_tenant_to_pro(self, tenant_id: str) -> OperationResult:
        return tenant_service.upgrade_tenant_to_pro(self.storage, tenant_id)

    # Memberships

    def add_membership(self, user_email: str, tenant_id: str, role: Any = MemberRole.member) -> Membership:
        return membership_service.add_membership(self.storage, user_email, tenant_id, role)

    def join_by_invite_code(self, user_email: str, invite_code: Optional[str]) -> OperationResult:
        return membership_service.join_by_invite_code(self.storage, user_email, invite_code)

    def get_membership(self, user_email: str) -> Optional[Membership]:
        # First match only, even for users in several tenants
        return membership_service.get_membership(self.storage, user_email)

    def get_membership_for_tenant(self, user_email: str, tenant_id: str) -> Optional[Membership]:
        return membership_service.get_membership_for_tenant(self.storage, user_email, tenant_id)

    def list_members(self, tenant_id: str) -> List[Membership]:
        return membership_service.list_members(self.storage, tenant_id)

    def update_member_role(self, user_email: str, tenant_id: str, role: Any) -> OperationResult:
        return membership_service.update_member_role(self.storage, user_email, tenant_id, role)

    # Notes

    def list_notes(self, tenant_id: str) -> List[Note]:
        return note_service.list_notes(self.storage, tenant_id)

    def count_notes(self, tenant_id: str) -> int:
        return note_service.count_notes(self.storage, tenant_id)

    def create_note(self, tenant_id: str, author_email: str, title: str, content: str) -> OperationResult:
        return note_service.create_note(self.storage, tenant_id, author_email, title, content, self.clock())

    def update_note(self, tenant_id: str, note_id: str, title: str, content: str) -> OperationResult:
        return note_service.update_note(self.storage, tenant_id, note_id, title, content, self.clock())

    def delete_note(self, tenant_id: str, note_id: str) -> OperationResult:
        return note_service.delete_note(self.storage, tenant_id, note_id)

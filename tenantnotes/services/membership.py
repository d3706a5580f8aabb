from typing import Any, List, Optional
from tenantnotes.crud import membership as membership_crud, tenant as tenant_crud
from tenantnotes.crud.base import ensure_init
from tenantnotes.core.user_context import normalize_email
from tenantnotes.core.logging_config import logger
from tenantnotes.schemas.common import OperationResult, ErrorKind
from tenantnotes.schemas.membership import Membership, MemberRole
from tenantnotes.storage import KeyValueStorage


class MembershipService:
    """
    Service layer for memberships.
    
    Normalizes emails, coerces roles and keeps at most one membership per
    (email, tenant) pair by checking before insert.
    """
    
    def __init__(self):
        self.crud = membership_crud
    
    def add_membership(
        self,
        storage: KeyValueStorage,
        user_email: str,
        tenant_id: str,
        role: Any = MemberRole.member
    ) -> Membership:
        """
        Add a user to a tenant, or return the existing membership.
        
        An existing membership is returned unchanged; its role is not
        updated. Unknown roles become member.
        
        Args:
            storage: Key-value storage backend
            user_email: User email (any case)
            tenant_id: Tenant ID
            role: Requested role
            
        Returns:
            The stored Membership
        """
        ensure_init(storage)
        email = normalize_email(user_email)
        existing = self.crud.get(storage, user_email=email, tenant_id=tenant_id)
        if existing:
            return existing
        
        membership = self.crud.create(
            storage,
            user_email=email,
            tenant_id=tenant_id,
            role=MemberRole.coerce(role)
        )
        logger.info(f"Membership created: email={email}, tenant_id={tenant_id}, role={membership.role.value}")
        return membership
    
    def join_by_invite_code(
        self,
        storage: KeyValueStorage,
        user_email: str,
        invite_code: Optional[str]
    ) -> OperationResult:
        """
        Join the tenant identified by an invite code as a member.
        
        Args:
            storage: Key-value storage backend
            user_email: Joining user's email
            invite_code: Invite code (any case)
            
        Returns:
            OperationResult with tenant and member, or InvalidInviteCode
        """
        ensure_init(storage)
        tenant = tenant_crud.get_by_invite_code(storage, invite_code) if invite_code else None
        if not tenant:
            logger.warning(f"Join rejected: invalid invite code for email={normalize_email(user_email)}")
            return OperationResult.fail(ErrorKind.invalid_invite_code)
        
        member = self.add_membership(storage, user_email, tenant.id, MemberRole.member)
        return OperationResult.ok(tenant=tenant, member=member)
    
    def get_membership(self, storage: KeyValueStorage, user_email: str) -> Optional[Membership]:
        """
        Get the first membership recorded for a user across all tenants.
        
        Users in several tenants only get one membership back; use
        get_membership_for_tenant for tenant-scoped lookups.
        """
        return self.crud.get_first_by_email(storage, normalize_email(user_email))
    
    def get_membership_for_tenant(
        self,
        storage: KeyValueStorage,
        user_email: str,
        tenant_id: str
    ) -> Optional[Membership]:
        return self.crud.get(storage, user_email=normalize_email(user_email), tenant_id=tenant_id)
    
    def list_members(self, storage: KeyValueStorage, tenant_id: str) -> List[Membership]:
        return self.crud.get_multi_by_tenant(storage, tenant_id)
    
    def update_member_role(
        self,
        storage: KeyValueStorage,
        user_email: str,
        tenant_id: str,
        role: Any
    ) -> OperationResult:
        """
        Change a member's role within a tenant.
        
        Args:
            storage: Key-value storage backend
            user_email: Member email
            tenant_id: Tenant ID
            role: New role; unknown values become member
            
        Returns:
            OperationResult with the updated member, or MembershipNotFound
        """
        email = normalize_email(user_email)
        member = self.crud.update_role(
            storage,
            user_email=email,
            tenant_id=tenant_id,
            role=MemberRole.coerce(role)
        )
        if not member:
            logger.warning(f"Role update failed: no membership for email={email}, tenant_id={tenant_id}")
            return OperationResult.fail(ErrorKind.membership_not_found)
        
        logger.info(f"Member role updated: email={email}, tenant_id={tenant_id}, role={member.role.value}")
        return OperationResult.ok(member=member)


# Create a singleton instance
membership_service = MembershipService()

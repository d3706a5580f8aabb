from datetime import datetime
from typing import List, Optional
from tenantnotes.crud import tenant as tenant_crud, membership as membership_crud
from tenantnotes.crud.base import ensure_init
from tenantnotes.core.identifiers import generate_id, generate_invite_code, to_iso
from tenantnotes.core.user_context import normalize_email
from tenantnotes.core.logging_config import logger
from tenantnotes.schemas.common import OperationResult, ErrorKind
from tenantnotes.schemas.membership import MemberRole
from tenantnotes.schemas.tenant import Tenant, Plan
from tenantnotes.services.membership import membership_service
from tenantnotes.storage import KeyValueStorage


class TenantService:
    """
    Service layer for tenants (teams).
    
    Handles creation, invite codes and plan changes. Tenants are never
    deleted and plans only move from free to pro.
    """
    
    def __init__(self):
        self.crud = tenant_crud
    
    def get_or_create_tenant_by_name(
        self,
        storage: KeyValueStorage,
        name: str,
        now: datetime
    ) -> Tenant:
        """
        Find a tenant by name (case-insensitive) or create an ownerless one.
        
        Args:
            storage: Key-value storage backend
            name: Tenant name
            now: Current time, used for the id and created_at
            
        Returns:
            Existing or newly created Tenant
        """
        ensure_init(storage)
        existing = self.crud.get_by_name(storage, name)
        if existing:
            return existing
        
        tenant = self.crud.create(
            storage,
            id=generate_id(now),
            name=name,
            created_at=to_iso(now),
            invite_code=generate_invite_code(),
            owner_email=None
        )
        logger.info(f"Tenant created by name: id={tenant.id}, name={tenant.name}")
        return tenant
    
    def create_team(
        self,
        storage: KeyValueStorage,
        name: str,
        owner_email: Optional[str],
        now: datetime
    ) -> OperationResult:
        """
        Create a new team and make its owner an admin member.
        
        No duplicate-name check is made; every call creates a tenant.
        
        Args:
            storage: Key-value storage backend
            name: Team name
            owner_email: Creating user's email
            now: Current time
            
        Returns:
            OperationResult with the created tenant
        """
        ensure_init(storage)
        email = normalize_email(owner_email)
        tenant = self.crud.create(
            storage,
            id=generate_id(now),
            name=name,
            created_at=to_iso(now),
            invite_code=generate_invite_code(),
            owner_email=email
        )
        logger.info(f"Team created: id={tenant.id}, name={tenant.name}, owner={email}")
        
        # Owner becomes admin member
        membership_service.add_membership(storage, email, tenant.id, MemberRole.admin)
        return OperationResult.ok(tenant=tenant)
    
    def get_tenant_by_id(self, storage: KeyValueStorage, tenant_id: str) -> Optional[Tenant]:
        return self.crud.get(storage, tenant_id)
    
    def get_tenant_by_invite_code(self, storage: KeyValueStorage, code: Optional[str]) -> Optional[Tenant]:
        if not code:
            return None
        return self.crud.get_by_invite_code(storage, code)
    
    def rotate_invite_code(self, storage: KeyValueStorage, tenant_id: str) -> OperationResult:
        """
        Replace a tenant's invite code with a fresh random one.
        
        Args:
            storage: Key-value storage backend
            tenant_id: Tenant ID
            
        Returns:
            OperationResult with the updated tenant, or TenantNotFound
        """
        tenant = self.crud.update(
            storage,
            match={"id": tenant_id},
            obj_in={"invite_code": generate_invite_code()}
        )
        if not tenant:
            logger.warning(f"Invite code rotation failed: tenant_id={tenant_id} not found")
            return OperationResult.fail(ErrorKind.tenant_not_found)
        
        logger.info(f"Invite code rotated: tenant_id={tenant_id}")
        return OperationResult.ok(tenant=tenant)
    
    def list_user_teams(self, storage: KeyValueStorage, user_email: Optional[str]) -> List[Tenant]:
        """
        List every tenant the user belongs to, in membership order.
        
        Memberships whose tenant no longer exists are skipped.
        
        Args:
            storage: Key-value storage backend
            user_email: User email (any case)
            
        Returns:
            List of Tenant instances
        """
        ensure_init(storage)
        memberships = membership_crud.get_multi_by_email(storage, normalize_email(user_email))
        tenants = {}
        for tenant in self.crud.get_all(storage):
            tenants.setdefault(tenant.id, tenant)
        return [tenants[m.tenant_id] for m in memberships if m.tenant_id in tenants]
    
    def upgrade_tenant_to_pro(self, storage: KeyValueStorage, tenant_id: str) -> OperationResult:
        """
        Move a tenant to the pro plan, lifting the note quota.
        
        Args:
            storage: Key-value storage backend
            tenant_id: Tenant ID
            
        Returns:
            OperationResult with the updated tenant, or TenantNotFound
        """
        tenant = self.crud.update(storage, match={"id": tenant_id}, obj_in={"plan": Plan.pro})
        if not tenant:
            logger.warning(f"Upgrade failed: tenant_id={tenant_id} not found")
            return OperationResult.fail(ErrorKind.tenant_not_found)
        
        logger.info(f"Tenant upgraded to pro: tenant_id={tenant_id}")
        return OperationResult.ok(tenant=tenant)


# Create a singleton instance
tenant_service = TenantService()

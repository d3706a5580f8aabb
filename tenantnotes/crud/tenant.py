from typing import Optional
from tenantnotes.crud.base import CollectionCRUD, TENANTS_KEY
from tenantnotes.schemas.tenant import Tenant, Plan
from tenantnotes.storage import KeyValueStorage


class CRUDTenant(CollectionCRUD[Tenant]):
    """
    CRUD operations for the tenants collection.
    
    Tenants are never deleted; only plan and invite code change after
    creation.
    """
    
    def get(self, storage: KeyValueStorage, tenant_id: str) -> Optional[Tenant]:
        return self.find_first(storage, id=tenant_id)
    
    def get_by_name(self, storage: KeyValueStorage, name: str) -> Optional[Tenant]:
        """
        Get the first tenant whose name matches case-insensitively.
        
        Args:
            storage: Key-value storage backend
            name: Tenant name as typed by the user
            
        Returns:
            Tenant instance or None
        """
        wanted = name.lower()
        for tenant in self.get_all(storage):
            if tenant.name.lower() == wanted:
                return tenant
        return None
    
    def get_by_invite_code(self, storage: KeyValueStorage, code: str) -> Optional[Tenant]:
        """
        Get a tenant by invite code, ignoring case.
        
        Args:
            storage: Key-value storage backend
            code: Invite code
            
        Returns:
            Tenant instance or None
        """
        wanted = str(code).upper()
        for tenant in self.get_all(storage):
            if (tenant.invite_code or "").upper() == wanted:
                return tenant
        return None
    
    def create(
        self,
        storage: KeyValueStorage,
        *,
        id: str,
        name: str,
        created_at: str,
        invite_code: str,
        owner_email: Optional[str] = None
    ) -> Tenant:
        """
        Append a new free-plan tenant.
        
        Args:
            storage: Key-value storage backend
            id: Generated tenant id
            name: Display name (stored trimmed)
            created_at: ISO-8601 creation timestamp
            invite_code: Initial invite code
            owner_email: Normalized owner email, or None
            
        Returns:
            Created Tenant instance
        """
        tenant = Tenant(
            id=id,
            name=name.strip(),
            plan=Plan.free,
            created_at=created_at,
            invite_code=invite_code,
            owner_email=owner_email,
        )
        return self.append(storage, tenant)


# Create singleton instance
tenant = CRUDTenant(Tenant, TENANTS_KEY)

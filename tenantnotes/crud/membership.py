from typing import Optional, List
from tenantnotes.crud.base import CollectionCRUD, MEMBERSHIPS_KEY
from tenantnotes.schemas.membership import Membership, MemberRole
from tenantnotes.storage import KeyValueStorage


class CRUDMembership(CollectionCRUD[Membership]):
    """
    CRUD operations for the memberships collection.
    
    Emails are expected to be normalized by the caller. The
    one-membership-per-(email, tenant) rule is checked by the service
    layer before insert; nothing here enforces it.
    """
    
    def get(self, storage: KeyValueStorage, *, user_email: str, tenant_id: str) -> Optional[Membership]:
        return self.find_first(storage, user_email=user_email, tenant_id=tenant_id)
    
    def get_first_by_email(self, storage: KeyValueStorage, user_email: str) -> Optional[Membership]:
        """
        Get the first membership recorded for an email, across all tenants.
        
        Args:
            storage: Key-value storage backend
            user_email: Normalized email
            
        Returns:
            Membership instance or None
        """
        return self.find_first(storage, user_email=user_email)
    
    def get_multi_by_email(self, storage: KeyValueStorage, user_email: str) -> List[Membership]:
        return self.filter(storage, user_email=user_email)
    
    def get_multi_by_tenant(self, storage: KeyValueStorage, tenant_id: str) -> List[Membership]:
        return self.filter(storage, tenant_id=tenant_id)
    
    def create(
        self,
        storage: KeyValueStorage,
        *,
        user_email: str,
        tenant_id: str,
        role: MemberRole
    ) -> Membership:
        membership = Membership(user_email=user_email, tenant_id=tenant_id, role=role)
        return self.append(storage, membership)
    
    def update_role(
        self,
        storage: KeyValueStorage,
        *,
        user_email: str,
        tenant_id: str,
        role: MemberRole
    ) -> Optional[Membership]:
        """
        Overwrite the role of an existing membership.
        
        Args:
            storage: Key-value storage backend
            user_email: Normalized email
            tenant_id: Tenant ID
            role: New role
            
        Returns:
            Updated Membership or None if no membership matched
        """
        return self.update(
            storage,
            match={"user_email": user_email, "tenant_id": tenant_id},
            obj_in={"role": role}
        )


# Create singleton instance
membership = CRUDMembership(Membership, MEMBERSHIPS_KEY)

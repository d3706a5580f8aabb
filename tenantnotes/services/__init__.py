from tenantnotes.services.membership import membership_service
from tenantnotes.services.tenant import tenant_service
from .note import note_service
from .tenant_store import TenantStore

__all__ = ["membership_service", "tenant_service", "note_service", "TenantStore"]

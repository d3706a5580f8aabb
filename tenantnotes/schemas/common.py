import enum
from pydantic import BaseModel, ConfigDict
from typing import Optional
from tenantnotes.schemas.tenant import Tenant
from tenantnotes.schemas.membership import Membership
from tenantnotes.schemas.note import Note


class ErrorKind(str, enum.Enum):
    tenant_not_found = "TenantNotFound"
    membership_not_found = "MembershipNotFound"
    note_not_found = "NoteNotFound"
    invalid_invite_code = "InvalidInviteCode"
    quota_exceeded = "QuotaExceeded"


ERROR_MESSAGES = {
    ErrorKind.tenant_not_found: "Tenant not found",
    ErrorKind.membership_not_found: "Membership not found",
    ErrorKind.note_not_found: "Note not found",
    ErrorKind.invalid_invite_code: "Invalid invite code",
}


class OperationResult(BaseModel):
    """
    Outcome of a mutating operation.

    Expected failures are reported here instead of raised: success is
    False, error names the failure kind and message is human readable.
    """
    model_config = ConfigDict(frozen=True)

    success: bool
    message: Optional[str] = None
    error: Optional[ErrorKind] = None
    tenant: Optional[Tenant] = None
    member: Optional[Membership] = None
    note: Optional[Note] = None

    @classmethod
    def ok(cls, **payload) -> "OperationResult":
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, error: ErrorKind, message: Optional[str] = None) -> "OperationResult":
        return cls(success=False, error=error, message=message or ERROR_MESSAGES.get(error))

from pydantic import BaseModel
from typing import Optional

PENDING = "pending"
ACCEPTED = "accepted"


# Fields stay optional: missing/empty values are reported by the service
# as invalid-argument, same as a bad role.
class CreateInviteRequest(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None

class CreateInviteResponse(BaseModel):
    success: bool = True
    inviteCode: str
    inviteLink: str
    message: str

class AcceptInviteRequest(BaseModel):
    inviteCode: Optional[str] = None
    newUserUid: Optional[str] = None
    newUserEmail: Optional[str] = None

class AcceptInviteResponse(BaseModel):
    success: bool = True
    role: str
    message: str

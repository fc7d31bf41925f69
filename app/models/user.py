from pydantic import BaseModel
from typing import List, Optional

USER = "User"
ADMINISTRATOR = "Administrator"
ROLES = (USER, ADMINISTRATOR)


class MeResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    displayName: Optional[str] = None
    role: Optional[str] = None
    onboarded: bool = False
    assignedProjects: List[str] = []

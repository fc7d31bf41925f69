# app/models/project.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

# never writable through updateProject
IMMUTABLE_FIELDS = ("projectId", "createdBy", "createdAt")


class CreateProjectRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = ""
    members: Optional[List[str]] = None

class CreateProjectResponse(BaseModel):
    success: bool = True
    projectId: str
    message: str

class UpdateProjectRequest(BaseModel):
    updates: Optional[Dict[str, Any]] = None

class ProjectListResponse(BaseModel):
    success: bool = True
    projects: List[Dict[str, Any]] = []
    message: str

class MessageResponse(BaseModel):
    success: bool = True
    message: str

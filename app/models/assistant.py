from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


# ===== Source records =====
class Email(BaseModel):
    id: str
    source: str
    sender: str
    subject: str
    body: str = ""

class StoredFile(BaseModel):
    id: str
    source: str
    name: str
    path: str

class CalendarEvent(BaseModel):
    id: str
    source: str
    title: str
    start_time: datetime
    end_time: datetime


# ===== Requests / responses =====
class ProjectSummaryRequest(BaseModel):
    projectId: str = Field(..., min_length=1)

class ProjectSummaryResponse(BaseModel):
    success: bool = True
    summary: str

class QuickSearchRequest(BaseModel):
    query: str

class SearchResult(BaseModel):
    type: str
    source: str
    title: str
    description: str = ""
    link: str = ""

class QuickSearchResponse(BaseModel):
    success: bool = True
    results: List[SearchResult] = []

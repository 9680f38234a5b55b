from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class IssueFiltersModel(BaseModel):
    search: str = ""
    city: str = "All"
    client: str = "All"
    assigned_to: str = "All"
    priority: str = "All"
    status: str = "All"


class SummaryResponse(BaseModel):
    total: int
    open: int
    closed: int
    on_hold: int


class FilterOptionsResponse(BaseModel):
    city: List[str] = Field(default_factory=list)
    client: List[str] = Field(default_factory=list)
    assigned_to: List[str] = Field(default_factory=list)
    priority: List[str] = Field(default_factory=list)
    status: List[str] = Field(default_factory=list)


class StatusResponse(BaseModel):
    last_updated: str
    source: Optional[str] = None
    degraded: bool = False
    message: Optional[str] = None
    loading: bool = False
    total: int = 0
    showing: int = 0


class IssuesResponse(BaseModel):
    rows: List[Dict[str, str]]
    showing: int
    total: int

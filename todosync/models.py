from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class TimeRange(BaseModel):
    start: str  # "H:MM" as written in the task line
    end: Optional[str] = None


class Task(BaseModel):
    description: str
    completed: bool = False
    time_range: Optional[TimeRange] = None

    @property
    def key(self) -> str:
        return self.description.strip()


# DateKey ("YYYY-MM-DD") -> tasks in document order
TaskIndex = Dict[str, List[Task]]


class EventTime(BaseModel):
    date: Optional[str] = None  # all-day
    date_time: Optional[str] = None  # timed
    time_zone: Optional[str] = None

    @property
    def all_day(self) -> bool:
        return self.date_time is None and self.date is not None


class RemoteEvent(BaseModel):
    id: Optional[str] = None
    summary: str = ""
    start: EventTime
    end: Optional[EventTime] = None


class CalendarInfo(BaseModel):
    id: str
    summary: Optional[str] = None
    primary: bool = False
    access_role: Optional[str] = None


class SyncReport(BaseModel):
    status: str = "ok"  # "ok" | "partial" | "failed" | "busy"
    trigger: str = "manual"
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    created: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    skipped_duplicates: List[str] = Field(default_factory=list)
    anomalies: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class CalendarSelectRequest(BaseModel):
    calendar_id: str


class SyncRequest(BaseModel):
    year: Optional[str] = None
    month: Optional[str] = None

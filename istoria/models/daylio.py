"""
Models for the JSON payload inside a Daylio backup.

Only the fields Istoria reads are declared; Daylio writes many more and
pydantic ignores them.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class DaylioMood(BaseModel):
    """A mood definition from ``customMoods``."""

    id: int
    custom_name: Optional[str] = ""
    predefined_name_id: Optional[int] = None


class DaylioTag(BaseModel):
    """A tag (activity) definition from ``tags``."""

    id: int
    name: str


class DaylioEntry(BaseModel):
    """A single mood check-in from ``dayEntries``."""

    id: Optional[int] = None
    year: int
    month: int = Field(..., description="Zero-indexed month, as Daylio stores it")
    day: int
    hour: int = 0
    minute: int = 0
    datetime: int = Field(..., description="Milliseconds since the epoch")
    timeZoneOffset: int = Field(0, description="UTC offset in milliseconds")
    mood: int
    note: Optional[str] = ""
    tags: List[int] = Field(default_factory=list)


class DaylioBackup(BaseModel):
    """The decoded ``backup.daylio`` document."""

    customMoods: List[DaylioMood] = Field(default_factory=list)
    tags: List[DaylioTag] = Field(default_factory=list)
    dayEntries: List[DaylioEntry]

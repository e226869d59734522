"""Data models for Istoria."""

from .canonical import Memory, MetadataKeys, NewMemory
from .daylio import DaylioBackup, DaylioEntry, DaylioMood, DaylioTag

__all__ = [
    "Memory",
    "MetadataKeys",
    "NewMemory",
    "DaylioBackup",
    "DaylioEntry",
    "DaylioMood",
    "DaylioTag"
]

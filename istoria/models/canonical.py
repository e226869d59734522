"""
Canonical data models for Istoria.

This module defines the standardized record shape that every importer must
convert its source data into, and that the exporter reads back from the store.
"""

from typing import Dict, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class MetadataKeys:
    """Recognized keys of the ``metadata`` mapping."""

    DAY_KEY = "dayKey"
    ENTRY_COUNT = "entryCount"
    ORIGINAL_PATH = "originalPath"


class NewMemory(BaseModel):
    """
    A normalized memory as produced by an importer, before it is stored.

    Memories from different sources (Daylio, Obsidian, ...) share this shape
    so the store and the exporters never need to know where they came from.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(
        ...,
        min_length=1,
        description="Short tag naming the importer that produced the memory"
    )

    title: str = Field(
        ...,
        min_length=1,
        description="Human-readable label for the memory"
    )

    memory_created_at: AwareDatetime = Field(
        ...,
        description="When the underlying event happened, with its original UTC offset"
    )

    metadata: Dict[str, str] = Field(
        default_factory=dict,
        description="Importer-specific provenance (see MetadataKeys)"
    )

    content: Optional[str] = Field(
        default=None,
        description="Free text body"
    )

    content_blob: Optional[bytes] = Field(
        default=None,
        description="Raw binary payload, reserved for future importers"
    )


class Memory(NewMemory):
    """
    A memory read back from the store.
    """

    id: str = Field(
        ...,
        description="Opaque unique identifier assigned at insert time"
    )

    created_at: AwareDatetime = Field(
        ...,
        description="When the memory was written to the store"
    )

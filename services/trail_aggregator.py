"""Builds the read-only trail projection from stored versions."""
from typing import Iterable, List

from core.domain import DocumentVersion, TrailEntry


def to_trail_entry(version: DocumentVersion) -> TrailEntry:
    return TrailEntry(
        document_name=version.document_name,
        version=version.version,
        recommendations=list(version.recommendations),
        created_at=version.created_at,
        updated_at=version.updated_at,
    )


def build_trail(versions: Iterable[DocumentVersion]) -> List[TrailEntry]:
    """
    Documents in name order, newest version first within each document.
    Recommendations keep their extraction order regardless of status.
    """
    ordered = sorted(versions, key=lambda v: v.version, reverse=True)
    ordered.sort(key=lambda v: v.document_name)
    return [to_trail_entry(v) for v in ordered]

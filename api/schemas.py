from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

from core.domain import (
    ChatMessage, DocumentVersion, RecommendationItem, RecommendationStatus, TrailEntry
)


class CamelModel(BaseModel):
    """JSON uses camelCase keys; Python code uses field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Folders / files ----------

class CreateFolderRequest(CamelModel):
    name: str

class FolderRequest(CamelModel):
    folder: str

class DeleteFileRequest(CamelModel):
    folder: str
    file_name: str

class FoldersResponse(CamelModel):
    folders: List[str]

class FilesResponse(CamelModel):
    files: List[str]


# ---------- Recommendations ----------

class RecommendationItemSchema(CamelModel):
    id: str
    point: str
    status: RecommendationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class TrailEntrySchema(CamelModel):
    document_name: str
    version: int
    recommendations: List[RecommendationItemSchema]
    created_at: datetime
    updated_at: datetime

class TrailResponse(CamelModel):
    trail: List[TrailEntrySchema]

class UploadResponse(CamelModel):
    message: str
    versions: List[TrailEntrySchema] = Field(default_factory=list)

class DecisionRequest(CamelModel):
    folder: str
    document: str
    version: int
    accept_ids: List[str] = Field(default_factory=list)
    reject_ids: List[str] = Field(default_factory=list)
    # Optional optimistic concurrency token: the version's updatedAt as last read
    expected_updated_at: Optional[datetime] = None


# ---------- Chat / regeneration ----------

class ChatRequest(CamelModel):
    folder: str
    document: Optional[str] = None
    message: str

class ChatResponse(CamelModel):
    reply: str
    applied: Optional[int] = None
    modified_content: Optional[str] = None
    new_file_name: Optional[str] = None

class ChatMessageSchema(CamelModel):
    sender: str
    content: str
    timestamp: datetime
    document_name: Optional[str] = None

class ChatHistoryResponse(CamelModel):
    messages: List[ChatMessageSchema]

class RecommendationInput(CamelModel):
    id: Optional[str] = None
    point: str
    status: RecommendationStatus = RecommendationStatus.PENDING

class ApplyChangesRequest(CamelModel):
    folder: str
    document: str
    recommendations: List[RecommendationInput]

class ApplyChangesResponse(CamelModel):
    modified_content: str
    new_file_name: str


# ---------- Capabilities ----------

class PermissionsResponse(CamelModel):
    role: str
    permissions: Dict[str, bool]


# ---------- Converters ----------

def item_schema(item: RecommendationItem) -> RecommendationItemSchema:
    return RecommendationItemSchema(
        id=item.id,
        point=item.point,
        status=item.status,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )

def trail_entry_schema(entry: TrailEntry) -> TrailEntrySchema:
    return TrailEntrySchema(
        document_name=entry.document_name,
        version=entry.version,
        recommendations=[item_schema(r) for r in entry.recommendations],
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )

def version_schema(version: DocumentVersion) -> TrailEntrySchema:
    return TrailEntrySchema(
        document_name=version.document_name,
        version=version.version,
        recommendations=[item_schema(r) for r in version.recommendations],
        created_at=version.created_at,
        updated_at=version.updated_at,
    )

def chat_message_schema(message: ChatMessage) -> ChatMessageSchema:
    return ChatMessageSchema(
        sender=message.sender.value,
        content=message.content,
        timestamp=message.timestamp,
        document_name=message.document_name,
    )

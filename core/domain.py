"""Domain enumerations and models."""
from enum import Enum

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

# ============= Enums =============

class RecommendationStatus(str, Enum):
    """Review state of a single recommendation item."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ChatSender(str, Enum):
    USER = "user"
    AI = "ai"


class OverlapPolicy(str, Enum):
    """How a decision treats ids named in both acceptIds and rejectIds."""
    ERROR = "error"
    REJECT_WINS = "reject_wins"


# ============= Domain Models =============

@dataclass
class RecommendationItem:
    """One AI-suggested point inside a document version"""
    id: str
    point: str
    status: RecommendationStatus = RecommendationStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class DocumentVersion:
    """One upload instance of a document with its recommendations in extraction order"""
    id: int
    folder: str
    document_name: str
    version: int
    created_at: datetime
    updated_at: datetime
    recommendations: List[RecommendationItem] = field(default_factory=list)

    def pending_ids(self) -> List[str]:
        return [r.id for r in self.recommendations if r.status == RecommendationStatus.PENDING]


@dataclass
class TrailEntry:
    """Read-only projection of a version for the trail view"""
    document_name: str
    version: int
    recommendations: List[RecommendationItem]
    created_at: datetime
    updated_at: datetime

    def pending_ids(self) -> List[str]:
        return [r.id for r in self.recommendations if r.status == RecommendationStatus.PENDING]


@dataclass
class ChatMessage:
    sender: ChatSender
    content: str
    timestamp: datetime
    document_name: Optional[str] = None


@dataclass
class RegenerationResult:
    """Rewritten document content; not persisted"""
    modified_content: str
    suggested_file_name: str


@dataclass
class ChatReply:
    reply: str
    applied: Optional[int] = None
    regeneration: Optional[RegenerationResult] = None

"""Core interfaces for the recommendation review system"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from core.domain import (
    ChatMessage, DocumentVersion, RecommendationStatus, TrailEntry
)

# ============= Repository Interfaces =============
class IFolderRepository(ABC):
    """Folder registry. Deleting a folder cascades to everything stored under it."""

    @abstractmethod
    async def create(self, name: str) -> None:
        pass

    @abstractmethod
    async def exists(self, name: str) -> bool:
        pass

    @abstractmethod
    async def list_names(self) -> List[str]:
        pass

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Delete folder, documents, versions, items and chat messages. False if missing."""
        pass


class IRecommendationRepository(ABC):
    """
    Persistence for document versions and their recommendation items.

    Items are returned in extraction order. Only statuses (and timestamps)
    are ever updated after creation.
    """

    @abstractmethod
    async def create_version(self, folder: str, document_name: str, points: List[str]) -> DocumentVersion:
        """Create version N+1 of the document with every item pending."""
        pass

    @abstractmethod
    async def get_version(self, folder: str, document_name: str, version: int) -> Optional[DocumentVersion]:
        pass

    @abstractmethod
    async def list_versions(self, folder: str, document_name: Optional[str] = None) -> List[DocumentVersion]:
        pass

    @abstractmethod
    async def update_statuses(self, version_id: int, statuses: Dict[str, RecommendationStatus]) -> List[str]:
        """
        Set statuses for the named item ids in one transaction and bump the
        version's updated_at. Unknown ids are skipped; returns the ids applied.
        """
        pass

    @abstractmethod
    async def delete_document(self, folder: str, document_name: str) -> bool:
        pass


class IChatRepository(ABC):
    """Interface for chat history"""

    @abstractmethod
    async def save_exchange(self, folder: str, document_name: Optional[str],
                            question: str, reply: str) -> None:
        """Store a user message and its AI reply together"""
        pass

    @abstractmethod
    async def get_history(self, folder: str, document_name: Optional[str] = None,
                          limit: int = 50) -> List[ChatMessage]:
        """Most recent messages, returned oldest first"""
        pass


# ============= File Storage Interface =============
class IFileStorage(ABC):
    """Blob store addressed by (folder, filename)"""

    @abstractmethod
    async def create_folder(self, folder: str) -> None:
        pass

    @abstractmethod
    async def delete_folder(self, folder: str) -> bool:
        pass

    @abstractmethod
    async def list_files(self, folder: str) -> List[str]:
        pass

    @abstractmethod
    async def save(self, folder: str, filename: str, content: bytes) -> str:
        """
        Write content, replacing any previous file with the same name.

        Returns:
            str: Full path of the stored file
        """
        pass

    @abstractmethod
    async def read(self, folder: str, filename: str) -> Optional[bytes]:
        """Return the stored bytes, or None if the file does not exist."""
        pass

    @abstractmethod
    async def delete(self, folder: str, filename: str) -> bool:
        pass


# ============= AI Engine Interface =============
class IRecommendationEngine(ABC):
    """
    External AI engine. Produces recommendation points, rewrites documents
    and owns the definition of "apply intent" in chat messages.
    """

    @abstractmethod
    async def extract_recommendations(self, document_name: str, text: str) -> List[str]:
        pass

    @abstractmethod
    async def rewrite_document(self, document_name: str, text: str, points: Sequence[str]) -> str:
        pass

    @abstractmethod
    async def answer(
        self,
        message: str,
        document_name: Optional[str],
        text: Optional[str],
        trail: List[TrailEntry],
        history: List[ChatMessage],
    ) -> str:
        pass

    @abstractmethod
    def detect_apply_intent(self, message: str) -> bool:
        pass

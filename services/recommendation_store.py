"""Recommendation Store: owns persisted recommendation items per document version."""
import logging
from typing import List, Optional

from config import settings
from core.domain import DocumentVersion, TrailEntry
from core.exceptions import NotFoundError
from core.interfaces import IFolderRepository, IRecommendationRepository
from services.trail_aggregator import build_trail
from utils.common import validate_name

logger = logging.getLogger(settings.LOGGER_NAME)


class RecommendationStore:
    def __init__(self, folder_repo: IFolderRepository, recommendation_repo: IRecommendationRepository):
        self.folder_repo = folder_repo
        self.recommendation_repo = recommendation_repo

    async def _require_folder(self, folder: str) -> str:
        folder = validate_name(folder, "Folder")
        if not await self.folder_repo.exists(folder):
            raise NotFoundError(f"Folder '{folder}' not found")
        return folder

    async def create_version(self, folder: str, document_name: str, points: List[str]) -> DocumentVersion:
        """Create version N+1 of a document with every point pending."""
        folder = await self._require_folder(folder)
        document_name = validate_name(document_name, "Document")
        return await self.recommendation_repo.create_version(folder, document_name, list(points))

    async def list_trail(self, folder: str, document_name: Optional[str] = None) -> List[TrailEntry]:
        """
        All versions of the folder's documents (optionally one document),
        newest first per document. Empty list when nothing was uploaded yet.

        Raises:
            NotFoundError: folder does not exist (or was deleted).
        """
        folder = await self._require_folder(folder)
        if document_name is not None:
            document_name = validate_name(document_name, "Document")
        versions = await self.recommendation_repo.list_versions(folder, document_name)
        return build_trail(versions)

    async def latest_version(self, folder: str, document_name: str) -> Optional[TrailEntry]:
        trail = await self.list_trail(folder, document_name)
        return trail[0] if trail else None

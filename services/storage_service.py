"""Folder and file operations on the blob store, kept consistent with the recommendation records."""
import logging
from typing import List, Sequence, Tuple

from config import settings
from core.domain import DocumentVersion
from core.exceptions import ConflictError, NotFoundError, UpstreamError
from core.interfaces import (
    IFileStorage, IFolderRepository, IRecommendationEngine, IRecommendationRepository
)
from services.recommendation_store import RecommendationStore
from utils.common import decode_text, validate_name, validate_upload

logger = logging.getLogger(settings.LOGGER_NAME)


class StorageService:
    def __init__(
        self,
        folder_repo: IFolderRepository,
        recommendation_repo: IRecommendationRepository,
        store: RecommendationStore,
        file_storage: IFileStorage,
        engine: IRecommendationEngine,
    ):
        self.folder_repo = folder_repo
        self.recommendation_repo = recommendation_repo
        self.store = store
        self.file_storage = file_storage
        self.engine = engine

    async def _require_folder(self, folder: str) -> str:
        folder = validate_name(folder, "Folder")
        if not await self.folder_repo.exists(folder):
            raise NotFoundError(f"Folder '{folder}' not found")
        return folder

    # ---------- Folders ----------
    async def create_folder(self, name: str) -> str:
        name = validate_name(name, "Folder")
        if await self.folder_repo.exists(name):
            raise ConflictError(f"Folder '{name}' already exists")
        await self.folder_repo.create(name)
        try:
            await self.file_storage.create_folder(name)
        except UpstreamError:
            # no directory, so the folder must not stay registered
            await self.folder_repo.delete(name)
            raise
        return name

    async def list_folders(self) -> List[str]:
        return await self.folder_repo.list_names()

    async def delete_folder(self, name: str) -> None:
        """Hard cascade: records are removed in one commit before the files go."""
        name = validate_name(name, "Folder")
        if not await self.folder_repo.delete(name):
            raise NotFoundError(f"Folder '{name}' not found")
        await self.file_storage.delete_folder(name)

    # ---------- Files ----------
    async def list_files(self, folder: str) -> List[str]:
        folder = await self._require_folder(folder)
        return await self.file_storage.list_files(folder)

    async def upload(self, folder: str, files: Sequence[Tuple[str, bytes]]) -> List[DocumentVersion]:
        """
        Store each file and record a new version with the AI engine's
        recommendations. Re-uploading a name creates the next version.

        All files are validated before anything is written.
        """
        folder = await self._require_folder(folder)
        for filename, content in files:
            validate_upload(filename, len(content))

        versions = []
        for filename, content in files:
            filename = filename.strip()
            await self.file_storage.save(folder, filename, content)
            points = await self.engine.extract_recommendations(filename, decode_text(content))
            versions.append(await self.store.create_version(folder, filename, points))
        return versions

    async def read_file(self, folder: str, filename: str) -> bytes:
        folder = await self._require_folder(folder)
        filename = validate_name(filename, "File")
        content = await self.file_storage.read(folder, filename)
        if content is None:
            raise NotFoundError(f"File '{filename}' not found in folder '{folder}'")
        return content

    async def delete_file(self, folder: str, filename: str) -> None:
        """Remove the stored file and the document's versions and recommendations."""
        folder = await self._require_folder(folder)
        filename = validate_name(filename, "File")
        removed_records = await self.recommendation_repo.delete_document(folder, filename)
        removed_file = await self.file_storage.delete(folder, filename)
        if not (removed_records or removed_file):
            raise NotFoundError(f"File '{filename}' not found in folder '{folder}'")

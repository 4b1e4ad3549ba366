import shutil
import logging
from pathlib import Path
from typing import List, Optional, Union

from core.interfaces import IFileStorage
from core.exceptions import UpstreamError

from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

class LocalFileStorage(IFileStorage):
    """Stores each folder as a directory on local disk."""

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)
        # Create the directory if it doesn't exist
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            logger.error(f"Could not create upload directory at {self.base_path}: {e}")
            raise

    def _folder_path(self, folder: str) -> Path:
        return self.base_path / folder

    def _file_path(self, folder: str, filename: str) -> Path:
        """Join folder and filename, refusing paths that escape the base directory."""
        base = self.base_path.resolve()
        full = (base / folder / filename).resolve()
        try:
            full.relative_to(base)
        except ValueError:
            raise UpstreamError(f"Invalid storage path: {folder}/{filename}")
        return full

    async def create_folder(self, folder: str) -> None:
        try:
            self._folder_path(folder).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create folder directory '{folder}': {e}")
            raise UpstreamError(f"Storage failure creating folder '{folder}'")

    async def delete_folder(self, folder: str) -> bool:
        folder_path = self._folder_path(folder)
        if not folder_path.exists():
            logger.warning(f"Attempted to delete non-existent folder directory: {folder_path}")
            return False
        try:
            shutil.rmtree(folder_path)
        except OSError as e:
            logger.error(f"Error deleting folder directory {folder_path}: {e}")
            raise UpstreamError(f"Storage failure deleting folder '{folder}'")
        logger.info(f"Successfully deleted folder directory: {folder_path}")
        return True

    async def list_files(self, folder: str) -> List[str]:
        folder_path = self._folder_path(folder)
        if not folder_path.exists():
            return []
        return sorted(p.name for p in folder_path.iterdir() if p.is_file())

    async def save(self, folder: str, filename: str, content: bytes) -> str:
        """Saves a file into the folder directory."""
        file_path = self._file_path(folder, filename)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as buffer:
                buffer.write(content)
            logger.info(f"Successfully saved file to {file_path}")
            return str(file_path)
        except OSError as e:
            logger.error(f"Failed to save file to {file_path}: {e}")
            raise UpstreamError(f"Storage failure saving '{filename}'")

    async def read(self, folder: str, filename: str) -> Optional[bytes]:
        file_path = self._file_path(folder, filename)
        if not file_path.is_file():
            return None
        with open(file_path, "rb") as f:
            return f.read()

    async def delete(self, folder: str, filename: str) -> bool:
        """Deletes a file from the folder directory."""
        file_path = self._file_path(folder, filename)
        if not file_path.exists():
            logger.warning(f"Attempted to delete non-existent file: {file_path}")
            return False
        try:
            file_path.unlink()
        except OSError as e:
            logger.error(f"Error deleting file {file_path}: {e}")
            raise UpstreamError(f"Storage failure deleting '{filename}'")
        logger.info(f"Successfully deleted file: {file_path}")
        return True

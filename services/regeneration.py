"""Chat-driven regeneration of documents from recommendation points."""
import logging
from typing import List, Optional, Sequence

from config import settings
from core.domain import ChatMessage, ChatReply, RecommendationItem, RegenerationResult
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import IChatRepository, IFileStorage, IRecommendationEngine
from services.recommendation_store import RecommendationStore
from utils.common import decode_text, modified_file_name, validate_name

logger = logging.getLogger(settings.LOGGER_NAME)


class RegenerationService:
    """
    Rewrites documents through the AI engine. Advisory only: it never
    changes recommendation statuses and never stores the rewritten file.
    """

    def __init__(
        self,
        store: RecommendationStore,
        file_storage: IFileStorage,
        engine: IRecommendationEngine,
        chat_repo: IChatRepository,
    ):
        self.store = store
        self.file_storage = file_storage
        self.engine = engine
        self.chat_repo = chat_repo

    async def _read_document(self, folder: str, document_name: str) -> str:
        content = await self.file_storage.read(folder, document_name)
        if content is None:
            raise NotFoundError(f"File '{document_name}' not found in folder '{folder}'")
        return decode_text(content)

    async def apply_changes(self, folder: str, document_name: str,
                            items: Sequence[RecommendationItem]) -> RegenerationResult:
        """
        Rewrite the document with every given point, whatever its status.

        Raises:
            NotFoundError: folder or file missing.
            ValidationError: no recommendations given.
            UpstreamError: the AI engine failed.
        """
        folder = validate_name(folder, "Folder")
        document_name = validate_name(document_name, "Document")
        points = [item.point.strip() for item in items if item.point and item.point.strip()]
        if not points:
            raise ValidationError("No recommendations to apply")

        # folder existence check; also keeps deleted folders from being regenerated
        await self.store.list_trail(folder, document_name)
        text = await self._read_document(folder, document_name)

        modified = await self.engine.rewrite_document(document_name, text, points)
        result = RegenerationResult(
            modified_content=modified,
            suggested_file_name=modified_file_name(document_name),
        )
        logger.info(f"Regenerated '{folder}/{document_name}' with {len(points)} recommendations")
        return result

    async def chat(self, folder: str, document_name: Optional[str], message: str) -> ChatReply:
        """
        Free-text Q&A over a document (or the whole folder). When the engine
        sees apply intent and the latest version has recommendations, the
        document is regenerated and `applied` reports how many were used.
        """
        folder = validate_name(folder, "Folder")
        if document_name is not None:
            document_name = validate_name(document_name, "Document")
        if not message or not message.strip():
            raise ValidationError("Message must not be empty")
        message = message.strip()

        latest = None
        if document_name and self.engine.detect_apply_intent(message):
            latest = await self.store.latest_version(folder, document_name)

        if latest and latest.recommendations:
            regeneration = await self.apply_changes(folder, document_name, latest.recommendations)
            applied = len(latest.recommendations)
            reply = ChatReply(
                reply=(
                    f"I've applied all {applied} recommendations to {document_name}. "
                    f"New file: {regeneration.suggested_file_name}"
                ),
                applied=applied,
                regeneration=regeneration,
            )
        else:
            trail = await self.store.list_trail(folder, document_name)
            history = await self.chat_repo.get_history(
                folder, document_name, settings.CHAT_CONTEXT_LIMIT
            )
            text = await self._read_document(folder, document_name) if document_name else None
            answer = await self.engine.answer(message, document_name, text, trail, history)
            reply = ChatReply(reply=answer)

        # both turns are written only once the engine has replied
        await self.chat_repo.save_exchange(folder, document_name, message, reply.reply)
        return reply

    async def chat_history(self, folder: str, document_name: Optional[str] = None) -> List[ChatMessage]:
        folder = validate_name(folder, "Folder")
        # raises NotFoundError for unknown folders
        await self.store.list_trail(folder)
        return await self.chat_repo.get_history(folder, document_name, settings.CHAT_HISTORY_LIMIT)

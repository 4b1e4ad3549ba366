"""Database repository implementations"""
import logging
from typing import Dict, List, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.interfaces import IChatRepository, IFolderRepository, IRecommendationRepository
from core.domain import (
    ChatMessage, ChatSender, DocumentVersion, RecommendationItem, RecommendationStatus
)
from core.exceptions import ConflictError
from database.session import (
    ChatMessageEntity, DocumentEntity, FolderEntity, RecommendationEntity, VersionEntity, utcnow
)
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


def _item_to_domain(entity: RecommendationEntity) -> RecommendationItem:
    return RecommendationItem(
        id=entity.item_id,
        point=entity.point,
        status=RecommendationStatus(entity.status),
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def _version_to_domain(entity: VersionEntity, folder: str, document_name: str,
                       items: List[RecommendationEntity]) -> DocumentVersion:
    return DocumentVersion(
        id=entity.id,
        folder=folder,
        document_name=document_name,
        version=entity.version_number,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        recommendations=[_item_to_domain(i) for i in sorted(items, key=lambda i: i.position)],
    )


class SQLFolderRepository(IFolderRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str) -> None:
        self.session.add(FolderEntity(name=name))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(f"Folder '{name}' already exists")
        logger.info(f"Created folder '{name}' in database")

    async def exists(self, name: str) -> bool:
        return await self.session.get(FolderEntity, name) is not None

    async def list_names(self) -> List[str]:
        result = await self.session.execute(select(FolderEntity.name).order_by(FolderEntity.name))
        return [row[0] for row in result]

    async def delete(self, name: str) -> bool:
        folder = await self.session.get(FolderEntity, name)
        if not folder:
            return False

        document_ids = select(DocumentEntity.id).where(DocumentEntity.folder_name == name)
        version_ids = select(VersionEntity.id).where(VersionEntity.document_id.in_(document_ids))
        sync = {"synchronize_session": "fetch"}
        try:
            await self.session.execute(
                delete(RecommendationEntity).where(RecommendationEntity.version_id.in_(version_ids)),
                execution_options=sync,
            )
            await self.session.execute(
                delete(VersionEntity).where(VersionEntity.document_id.in_(document_ids)),
                execution_options=sync,
            )
            await self.session.execute(
                delete(DocumentEntity).where(DocumentEntity.folder_name == name),
                execution_options=sync,
            )
            await self.session.execute(
                delete(ChatMessageEntity).where(ChatMessageEntity.folder_name == name),
                execution_options=sync,
            )
            await self.session.delete(folder)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info(f"Deleted folder '{name}' with all documents and recommendations")
        return True


class SQLRecommendationRepository(IRecommendationRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_document(self, folder: str, document_name: str) -> Optional[DocumentEntity]:
        result = await self.session.execute(
            select(DocumentEntity).where(
                DocumentEntity.folder_name == folder,
                DocumentEntity.name == document_name,
            )
        )
        return result.scalar_one_or_none()

    async def create_version(self, folder: str, document_name: str,
                             points: List[str]) -> DocumentVersion:
        now = utcnow()
        try:
            document = await self._get_document(folder, document_name)
            if document is None:
                document = DocumentEntity(folder_name=folder, name=document_name)
                self.session.add(document)
                await self.session.flush()

            latest = await self.session.scalar(
                select(func.max(VersionEntity.version_number)).where(
                    VersionEntity.document_id == document.id
                )
            )
            version = VersionEntity(
                document_id=document.id,
                version_number=(latest or 0) + 1,
                created_at=now,
                updated_at=now,
            )
            self.session.add(version)
            await self.session.flush()

            items = [
                RecommendationEntity(
                    version_id=version.id,
                    item_id=f"r{position}",
                    position=position,
                    point=point,
                    status=RecommendationStatus.PENDING.value,
                    created_at=now,
                    updated_at=now,
                )
                for position, point in enumerate(points, start=1)
            ]
            self.session.add_all(items)
            await self.session.commit()
        except IntegrityError:
            # another upload of the same document committed first
            await self.session.rollback()
            raise ConflictError(
                f"'{document_name}' in '{folder}' was changed by a concurrent upload; retry"
            )
        logger.info(
            f"Created version {version.version_number} of '{document_name}' in '{folder}' "
            f"with {len(items)} recommendations"
        )
        return _version_to_domain(version, folder, document_name, items)

    async def get_version(self, folder: str, document_name: str,
                          version: int) -> Optional[DocumentVersion]:
        result = await self.session.execute(
            select(VersionEntity)
            .join(DocumentEntity, VersionEntity.document_id == DocumentEntity.id)
            .where(
                DocumentEntity.folder_name == folder,
                DocumentEntity.name == document_name,
                VersionEntity.version_number == version,
            )
            .options(selectinload(VersionEntity.items))
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            return None
        return _version_to_domain(entity, folder, document_name, entity.items)

    async def list_versions(self, folder: str,
                            document_name: Optional[str] = None) -> List[DocumentVersion]:
        query = (
            select(VersionEntity, DocumentEntity.name)
            .join(DocumentEntity, VersionEntity.document_id == DocumentEntity.id)
            .where(DocumentEntity.folder_name == folder)
            .options(selectinload(VersionEntity.items))
            .order_by(DocumentEntity.name, VersionEntity.version_number.desc())
        )
        if document_name is not None:
            query = query.where(DocumentEntity.name == document_name)

        result = await self.session.execute(query)
        return [
            _version_to_domain(entity, folder, name, entity.items)
            for entity, name in result.all()
        ]

    async def update_statuses(self, version_id: int,
                              statuses: Dict[str, RecommendationStatus]) -> List[str]:
        version = await self.session.get(VersionEntity, version_id)
        if version is None:
            return []

        result = await self.session.execute(
            select(RecommendationEntity).where(RecommendationEntity.version_id == version_id)
        )
        items = {entity.item_id: entity for entity in result.scalars().all()}

        now = utcnow()
        applied = []
        for item_id, status in statuses.items():
            entity = items.get(item_id)
            if entity is None:
                continue
            applied.append(item_id)
            if entity.status != status.value:
                entity.status = status.value
                entity.updated_at = now

        version.updated_at = now
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return applied

    async def delete_document(self, folder: str, document_name: str) -> bool:
        document = await self._get_document(folder, document_name)
        if document is None:
            return False

        version_ids = select(VersionEntity.id).where(VersionEntity.document_id == document.id)
        sync = {"synchronize_session": "fetch"}
        try:
            await self.session.execute(
                delete(RecommendationEntity).where(RecommendationEntity.version_id.in_(version_ids)),
                execution_options=sync,
            )
            await self.session.execute(
                delete(VersionEntity).where(VersionEntity.document_id == document.id),
                execution_options=sync,
            )
            await self.session.execute(
                delete(ChatMessageEntity).where(
                    ChatMessageEntity.folder_name == folder,
                    ChatMessageEntity.document_name == document_name,
                ),
                execution_options=sync,
            )
            await self.session.delete(document)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info(f"Deleted document '{document_name}' from '{folder}' with all versions")
        return True


class SQLChatRepository(IChatRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_exchange(self, folder: str, document_name: Optional[str],
                            question: str, reply: str) -> None:
        now = utcnow()
        # same timestamp; insertion order (id) keeps the user turn first
        self.session.add_all([
            ChatMessageEntity(
                folder_name=folder,
                document_name=document_name,
                sender=sender.value,
                content=content,
                timestamp=now,
            )
            for sender, content in ((ChatSender.USER, question), (ChatSender.AI, reply))
        ])
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def get_history(self, folder: str, document_name: Optional[str] = None,
                          limit: int = 50) -> List[ChatMessage]:
        query = select(ChatMessageEntity).where(ChatMessageEntity.folder_name == folder)
        if document_name is None:
            query = query.where(ChatMessageEntity.document_name.is_(None))
        else:
            query = query.where(ChatMessageEntity.document_name == document_name)

        result = await self.session.execute(
            query.order_by(ChatMessageEntity.timestamp.desc(), ChatMessageEntity.id.desc()).limit(limit)
        )
        messages = list(reversed(result.scalars().all()))
        return [
            ChatMessage(
                sender=ChatSender(msg.sender),
                content=msg.content,
                timestamp=msg.timestamp,
                document_name=msg.document_name,
            )
            for msg in messages
        ]

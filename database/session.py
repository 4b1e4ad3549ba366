# database/session.py

import logging
from datetime import datetime, timezone

from sqlalchemy import (
    Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base, relationship

from config import settings

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession


logger = logging.getLogger(settings.LOGGER_NAME)


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo, so we never store it)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create the async engine; pool sizing only applies to server databases."""
    options = {"echo": False, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    options.update(kwargs)
    return create_async_engine(database_url, **options)


# Setup SQLAlchemy async engine and session maker
async_engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)
Base = declarative_base()

# ============= Models =============

class FolderEntity(Base):
    __tablename__ = "folders"
    name = Column(String, primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class DocumentEntity(Base):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("folder_name", "name", name="uq_document_folder_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    folder_name = Column(String, ForeignKey("folders.name", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    versions = relationship("VersionEntity", back_populates="document",
                            order_by="VersionEntity.version_number")


class VersionEntity(Base):
    __tablename__ = "document_versions"
    __table_args__ = (UniqueConstraint("document_id", "version_number", name="uq_version_document_number"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    document = relationship("DocumentEntity", back_populates="versions")
    items = relationship("RecommendationEntity", back_populates="version",
                         order_by="RecommendationEntity.position")


class RecommendationEntity(Base):
    __tablename__ = "recommendation_items"
    __table_args__ = (UniqueConstraint("version_id", "item_id", name="uq_item_version_id"),)

    pk = Column(Integer, primary_key=True, autoincrement=True)
    version_id = Column(Integer, ForeignKey("document_versions.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String, nullable=False)  # 'r1', 'r2', ... unique within a version
    position = Column(Integer, nullable=False)  # extraction order
    point = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    version = relationship("VersionEntity", back_populates="items")


class ChatMessageEntity(Base):
    __tablename__ = "chat_messages"
    id = Column(Integer, primary_key=True, index=True)
    folder_name = Column(String, ForeignKey("folders.name", ondelete="CASCADE"), nullable=False, index=True)
    document_name = Column(String, nullable=True)
    sender = Column(String, nullable=False)  # 'user' or 'ai'
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)


# ============= Dependencies =============

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for FastAPI dependency injection"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables(engine: AsyncEngine = async_engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")

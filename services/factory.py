from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends

from config import settings
from core.interfaces import (
    IChatRepository, IFileStorage, IFolderRepository, IRecommendationEngine, IRecommendationRepository
)
from database.session import get_db
from infrastructure.file_storage import LocalFileStorage
from infrastructure.repositories import (
    SQLChatRepository, SQLFolderRepository, SQLRecommendationRepository
)
from services.decision_processor import DecisionProcessor
from services.llm_service import LLMService
from services.recommendation_engine import LLMRecommendationEngine
from services.recommendation_store import RecommendationStore
from services.regeneration import RegenerationService
from services.storage_service import StorageService

# Provider functions for each component
def get_file_storage() -> IFileStorage:
    """Create file storage based on configuration."""
    return LocalFileStorage(base_path=settings.UPLOADS_DIR)

def get_llm_service() -> LLMService:
    return LLMService(settings.LLM_BASE_URL, settings.LLM_MODEL_NAME)

def get_recommendation_engine(llm: LLMService = Depends(get_llm_service)) -> IRecommendationEngine:
    """Create the AI engine adapter."""
    return LLMRecommendationEngine(llm)

def get_folder_repository(session: AsyncSession = Depends(get_db)) -> IFolderRepository:
    return SQLFolderRepository(session)

def get_recommendation_repository(session: AsyncSession = Depends(get_db)) -> IRecommendationRepository:
    return SQLRecommendationRepository(session)

def get_chat_repository(session: AsyncSession = Depends(get_db)) -> IChatRepository:
    return SQLChatRepository(session)

def get_recommendation_store(
    folder_repo: IFolderRepository = Depends(get_folder_repository),
    recommendation_repo: IRecommendationRepository = Depends(get_recommendation_repository),
) -> RecommendationStore:
    return RecommendationStore(folder_repo, recommendation_repo)

def get_decision_processor(
    recommendation_repo: IRecommendationRepository = Depends(get_recommendation_repository),
) -> DecisionProcessor:
    return DecisionProcessor(recommendation_repo)

def get_storage_service(
    folder_repo: IFolderRepository = Depends(get_folder_repository),
    recommendation_repo: IRecommendationRepository = Depends(get_recommendation_repository),
    store: RecommendationStore = Depends(get_recommendation_store),
    file_storage: IFileStorage = Depends(get_file_storage),
    engine: IRecommendationEngine = Depends(get_recommendation_engine),
) -> StorageService:
    """
    Create storage service with full dependency injection.

    All repositories share the request's session, so a request sees one
    consistent view of the database.
    """
    return StorageService(
        folder_repo=folder_repo,
        recommendation_repo=recommendation_repo,
        store=store,
        file_storage=file_storage,
        engine=engine,
    )

def get_regeneration_service(
    store: RecommendationStore = Depends(get_recommendation_store),
    file_storage: IFileStorage = Depends(get_file_storage),
    engine: IRecommendationEngine = Depends(get_recommendation_engine),
    chat_repo: IChatRepository = Depends(get_chat_repository),
) -> RegenerationService:
    return RegenerationService(
        store=store,
        file_storage=file_storage,
        engine=engine,
        chat_repo=chat_repo,
    )

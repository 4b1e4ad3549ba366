# api/endpoints.py
"""
API endpoints for folder storage and recommendation review.

All write endpoints require the x-api-key header. Role capabilities come
from the x-user-role header (see services/permissions.py).
"""
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from config import settings
from api.schemas import (
    ApplyChangesRequest,
    ApplyChangesResponse,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    CreateFolderRequest,
    DecisionRequest,
    DeleteFileRequest,
    FilesResponse,
    FolderRequest,
    FoldersResponse,
    PermissionsResponse,
    TrailResponse,
    UploadResponse,
    chat_message_schema,
    trail_entry_schema,
    version_schema,
)
from api.security import get_user_role, require_permission, verify_api_key
from core.domain import RecommendationItem
from services.decision_processor import DecisionProcessor
from services.factory import (
    get_decision_processor,
    get_recommendation_store,
    get_regeneration_service,
    get_storage_service,
)
from services.permissions import capabilities
from services.recommendation_store import RecommendationStore
from services.regeneration import RegenerationService
from services.storage_service import StorageService

router = APIRouter()


# ---------- Folders ----------
@router.post(
    "/storage/folders",
    dependencies=[Depends(verify_api_key), Depends(require_permission("storage:upload"))],
)
async def create_folder(
    body: CreateFolderRequest,
    storage: StorageService = Depends(get_storage_service),
) -> dict:
    await storage.create_folder(body.name)
    return {}


@router.get(
    "/storage/folders",
    response_model=FoldersResponse,
    dependencies=[Depends(require_permission("storage:view"))],
)
async def list_folders(storage: StorageService = Depends(get_storage_service)) -> FoldersResponse:
    return FoldersResponse(folders=await storage.list_folders())


@router.delete(
    "/storage/folders",
    dependencies=[Depends(verify_api_key), Depends(require_permission("storage:delete"))],
)
async def delete_folder(
    body: FolderRequest,
    storage: StorageService = Depends(get_storage_service),
) -> dict:
    await storage.delete_folder(body.folder)
    return {}


# ---------- Files ----------
@router.get(
    "/storage/files",
    response_model=FilesResponse,
    dependencies=[Depends(require_permission("storage:view"))],
)
async def list_files(
    folder: str = Query(...),
    storage: StorageService = Depends(get_storage_service),
) -> FilesResponse:
    return FilesResponse(files=await storage.list_files(folder))


@router.post(
    "/storage/upload",
    response_model=UploadResponse,
    dependencies=[Depends(verify_api_key), Depends(require_permission("storage:upload"))],
)
async def upload_files(
    folder: str = Form(...),
    files: List[UploadFile] = File(...),
    storage: StorageService = Depends(get_storage_service),
) -> UploadResponse:
    payload = []
    for upload in files:
        payload.append((upload.filename or "", await upload.read()))

    versions = await storage.upload(folder, payload)
    return UploadResponse(
        message=f"Uploaded {len(versions)} file(s) to '{folder}'",
        versions=[version_schema(v) for v in versions],
    )


@router.get(
    "/storage/download",
    dependencies=[Depends(require_permission("storage:view"))],
)
async def download_file(
    folder: str = Query(...),
    file: str = Query(...),
    storage: StorageService = Depends(get_storage_service),
) -> Response:
    content = await storage.read_file(folder, file)
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(file)}"},
    )


@router.delete(
    "/storage/files",
    dependencies=[Depends(verify_api_key), Depends(require_permission("storage:delete"))],
)
async def delete_file(
    body: DeleteFileRequest,
    storage: StorageService = Depends(get_storage_service),
) -> dict:
    await storage.delete_file(body.folder, body.file_name)
    return {}


# ---------- Recommendations ----------
@router.get(
    "/storage/recommendations",
    response_model=TrailResponse,
    dependencies=[Depends(require_permission("recommendations:view"))],
)
async def list_recommendations(
    folder: str = Query(...),
    document: Optional[str] = Query(None),
    store: RecommendationStore = Depends(get_recommendation_store),
) -> TrailResponse:
    trail = await store.list_trail(folder, document or None)
    return TrailResponse(trail=[trail_entry_schema(t) for t in trail])


@router.post(
    "/storage/recommendations/decision",
    dependencies=[Depends(verify_api_key), Depends(require_permission("recommendations:modify"))],
)
async def decide_recommendations(
    body: DecisionRequest,
    processor: DecisionProcessor = Depends(get_decision_processor),
) -> dict:
    await processor.decide(
        body.folder,
        body.document,
        body.version,
        body.accept_ids,
        body.reject_ids,
        expected_updated_at=body.expected_updated_at,
    )
    return {}


# ---------- Chat / regeneration ----------
@router.post(
    "/storage/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_api_key), Depends(require_permission("chat:access"))],
)
async def chat_about_recommendations(
    body: ChatRequest,
    regeneration: RegenerationService = Depends(get_regeneration_service),
) -> ChatResponse:
    result = await regeneration.chat(body.folder, body.document or None, body.message)
    response = ChatResponse(reply=result.reply, applied=result.applied)
    if result.regeneration:
        response.modified_content = result.regeneration.modified_content
        response.new_file_name = result.regeneration.suggested_file_name
    return response


@router.get(
    "/storage/chat",
    response_model=ChatHistoryResponse,
    dependencies=[Depends(require_permission("chat:access"))],
)
async def get_chat_history(
    folder: str = Query(...),
    document: Optional[str] = Query(None),
    regeneration: RegenerationService = Depends(get_regeneration_service),
) -> ChatHistoryResponse:
    messages = await regeneration.chat_history(folder, document or None)
    return ChatHistoryResponse(messages=[chat_message_schema(m) for m in messages])


@router.post(
    "/storage/apply-changes",
    response_model=ApplyChangesResponse,
    dependencies=[Depends(verify_api_key), Depends(require_permission("chat:access"))],
)
async def apply_changes(
    body: ApplyChangesRequest,
    regeneration: RegenerationService = Depends(get_regeneration_service),
) -> ApplyChangesResponse:
    items = [
        RecommendationItem(id=rec.id or f"rec-{idx}", point=rec.point, status=rec.status)
        for idx, rec in enumerate(body.recommendations)
    ]
    result = await regeneration.apply_changes(body.folder, body.document, items)
    return ApplyChangesResponse(
        modified_content=result.modified_content,
        new_file_name=result.suggested_file_name,
    )


# ---------- Capabilities ----------
@router.get("/storage/permissions", response_model=PermissionsResponse)
async def get_permissions(role: str = Depends(get_user_role)) -> PermissionsResponse:
    return PermissionsResponse(role=role, permissions=capabilities(role))


# ---------- Health Check ----------
@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "llm_model": settings.LLM_MODEL_NAME,
    }

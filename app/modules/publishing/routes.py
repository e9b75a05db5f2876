from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from app.core.dependencies import get_current_user, get_publishing_service
from app.modules.publishing.schemas import (
    FilesPreviewResponse,
    PublishRequest,
    PublishResponse,
    StackBlitzRequest,
    StackBlitzResponse,
)
from app.modules.publishing.service import PublishingService
from app.modules.publishing.stackblitz import build_stackblitz_project
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publishing", tags=["publishing"])


@router.post("/github", response_model=PublishResponse)
async def publish_to_github(
    publish_request: PublishRequest,
    user_data: Dict = Depends(get_current_user),
    service: PublishingService = Depends(get_publishing_service)
):
    """Publish the board's last generated files as a new GitHub repository"""
    logger.info(f"Preparing GitHub deploy for board {publish_request.board_id}")
    return await run_in_threadpool(
        service.publish,
        publish_request.board_id,
        publish_request.repo_name,
        publish_request.github_token,
    )


@router.get("/board/{board_id}/files", response_model=FilesPreviewResponse)
async def preview_repository_files(
    board_id: str,
    user_data: Dict = Depends(get_current_user),
    service: PublishingService = Depends(get_publishing_service)
):
    """Files a GitHub publish would push for this board"""
    _, files = service.prepare_files(board_id)
    return FilesPreviewResponse(board_id=board_id, files_count=len(files), files=files)


@router.post("/stackblitz", response_model=StackBlitzResponse)
async def create_stackblitz_project(
    stackblitz_request: StackBlitzRequest,
    user_data: Dict = Depends(get_current_user)
):
    """Build a StackBlitz project payload from a file map"""
    return build_stackblitz_project(stackblitz_request.files, stackblitz_request.project_name)

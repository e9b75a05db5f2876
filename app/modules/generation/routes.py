from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from app.core.dependencies import get_current_user, get_generation_orchestrator
from app.modules.deployments.schemas import GenerateResponse
from app.modules.generation.orchestrator import GenerationOrchestrator
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boards", tags=["generation"])


@router.post("/{board_id}/generate", response_model=GenerateResponse)
async def generate_board(
    board_id: str,
    user_data: Dict = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_generation_orchestrator)
):
    """
    Generate the application for a board with the language model.
    Blocks until the deployment record is deployed or failed.
    """
    logger.info(f"User {user_data.get('email')} requested generation for board {board_id}")
    return await run_in_threadpool(orchestrator.run, board_id)

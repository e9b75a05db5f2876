from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_user, get_deployment_service
from app.modules.deployments.schemas import DeploymentLogsResponse, DeploymentResponse, DeploymentStatus
from app.modules.deployments.service import DeploymentService
from typing import Dict

router = APIRouter(prefix="/deployments", tags=["deployments"])


@router.get("/board/{board_id}", response_model=DeploymentResponse)
async def get_board_deployment(
    board_id: str,
    user_data: Dict = Depends(get_current_user),
    service: DeploymentService = Depends(get_deployment_service)
):
    """Get the deployment record of a board"""
    return service.get_by_board(board_id)


@router.get("/board/{board_id}/logs", response_model=DeploymentLogsResponse)
async def get_board_deployment_logs(
    board_id: str,
    user_data: Dict = Depends(get_current_user),
    service: DeploymentService = Depends(get_deployment_service)
):
    """
    Poll for deployment logs.
    Returns current logs and deployment status.
    """
    deployment = service.get_by_board(board_id)
    return DeploymentLogsResponse(
        deployment_id=deployment.id,
        board_id=deployment.board_id,
        logs=deployment.deployment_logs,
        status=deployment.deployment_status,
        has_more=deployment.deployment_status == DeploymentStatus.BUILDING
    )

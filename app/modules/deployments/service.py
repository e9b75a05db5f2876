from supabase import Client
from app.config.settings import settings
from app.core.errors import ConcurrentUpdateError, InvalidTransition, NoDeploymentFound, UpstreamError
from app.modules.deployments.schemas import (
    DeploymentLog,
    DeploymentResponse,
    DeploymentStatus,
    DeploymentMetrics,
    GeneratedFiles,
)
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

TABLE = "project_deployments"

# A new run may always re-enter building; terminal states are only left by a new run
ALLOWED_TRANSITIONS = {
    None: {DeploymentStatus.BUILDING},
    DeploymentStatus.BUILDING: {DeploymentStatus.BUILDING, DeploymentStatus.DEPLOYED, DeploymentStatus.FAILED},
    DeploymentStatus.DEPLOYED: {DeploymentStatus.BUILDING},
    DeploymentStatus.FAILED: {DeploymentStatus.BUILDING},
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def log_entry(message: str, level: str = "info") -> DeploymentLog:
    return DeploymentLog(timestamp=_now(), message=message, level=level)


def check_transition(current: Optional[DeploymentStatus], target: DeploymentStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move deployment from '{current.value if current else 'none'}' to '{target.value}'"
        )


class DeploymentService:
    def __init__(self, supabase: Client, log_retention: Optional[int] = None):
        self.supabase = supabase
        self.log_retention = log_retention or settings.deployment_log_retention

    def find_by_board(self, board_id: str) -> Optional[DeploymentResponse]:
        """Return the board's deployment record, or None"""
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .eq("board_id", board_id)\
                .order("created_at")\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error getting deployment for board {board_id}: {str(e)}")
            raise UpstreamError("Failed to read deployment record", details=str(e))

        if not result.data:
            return None
        return DeploymentResponse(**result.data[0])

    def get_by_board(self, board_id: str) -> DeploymentResponse:
        deployment = self.find_by_board(board_id)
        if deployment is None:
            raise NoDeploymentFound(board_id)
        return deployment

    def start_build(self, board_id: str, message: str) -> DeploymentResponse:
        """Locate or create the board's record and move it to building."""
        entry = log_entry(message)
        existing = self.find_by_board(board_id)
        if existing is not None:
            return self._transition(existing, DeploymentStatus.BUILDING, [entry])

        check_transition(None, DeploymentStatus.BUILDING)
        try:
            result = self.supabase.table(TABLE).insert({
                "board_id": board_id,
                "deployment_status": DeploymentStatus.BUILDING.value,
                "deployment_logs": [entry.model_dump(mode="json")],
                "version": 1,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating deployment record: {str(e)}")
            raise UpstreamError("Failed to create deployment record", details=str(e))

        if not result.data:
            raise UpstreamError("Failed to create deployment record")
        deployment = DeploymentResponse(**result.data[0])
        logger.info(f"Deployment {deployment.id} created for board {board_id}")
        return deployment

    def mark_deployed(
        self,
        deployment: DeploymentResponse,
        generated_files: GeneratedFiles,
        deployed_code: str,
        metrics: DeploymentMetrics,
        technical_specification: Dict[str, Any],
        message: str,
    ) -> DeploymentResponse:
        return self._transition(
            deployment,
            DeploymentStatus.DEPLOYED,
            [log_entry(message)],
            {
                "deployed_code": deployed_code,
                "technical_specification": technical_specification,
                "generated_files": generated_files.model_dump(),
                "metrics": metrics.model_dump(),
                "last_deployed_at": _now().isoformat(),
            },
        )

    def mark_failed(self, deployment: DeploymentResponse, message: str) -> DeploymentResponse:
        """Status and log only; the last successful artifacts stay as they are."""
        return self._transition(deployment, DeploymentStatus.FAILED, [log_entry(message, "error")])

    def _transition(
        self,
        deployment: DeploymentResponse,
        status: DeploymentStatus,
        entries: List[DeploymentLog],
        fields: Optional[Dict[str, Any]] = None,
    ) -> DeploymentResponse:
        check_transition(deployment.deployment_status, status)

        logs = [log.model_dump(mode="json") for log in deployment.deployment_logs]
        logs.extend(entry.model_dump(mode="json") for entry in entries)
        version = deployment.version + 1
        update_data = {
            "deployment_status": status.value,
            "deployment_logs": logs[-self.log_retention:],
            "version": version,
            "updated_at": _now().isoformat(),
        }
        if fields:
            update_data.update(fields)

        try:
            result = self.supabase.table(TABLE)\
                .update(update_data)\
                .eq("id", deployment.id)\
                .eq("version", deployment.version)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating deployment {deployment.id}: {str(e)}")
            raise UpstreamError("Failed to update deployment record", details=str(e))

        if result.data:
            updated = DeploymentResponse(**result.data[0])
        else:
            # Empty response is either a lost version race or a PostgREST config without return=representation
            updated = self.find_by_board(deployment.board_id)
            if updated is None or updated.version != version or updated.deployment_status != status:
                raise ConcurrentUpdateError(
                    f"Deployment {deployment.id} was modified by another run",
                    details={"expected_version": deployment.version},
                )

        logger.info(f"Deployment {deployment.id}: {deployment.deployment_status.value} -> {status.value}")
        return updated

"""
Core dependencies shared by the routers: authentication and service factories.
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.boards.service import BoardService
from app.modules.deployments.service import DeploymentService
from app.modules.generation.llm_provider import LanguageModelProvider, get_language_model_provider
from app.modules.generation.orchestrator import GenerationOrchestrator
from app.modules.publishing.service import PublishingService
from supabase import Client
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from the Supabase JWT"""
    return auth_service.get_current_user(credentials.credentials)


def get_board_service(supabase: Client = Depends(get_service_supabase)) -> BoardService:
    return BoardService(supabase)


def get_deployment_service(supabase: Client = Depends(get_service_supabase)) -> DeploymentService:
    return DeploymentService(supabase)


def get_generation_orchestrator(
    board_service: BoardService = Depends(get_board_service),
    deployment_service: DeploymentService = Depends(get_deployment_service),
    provider: LanguageModelProvider = Depends(get_language_model_provider),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(board_service, deployment_service, provider)


def get_publishing_service(
    board_service: BoardService = Depends(get_board_service),
    deployment_service: DeploymentService = Depends(get_deployment_service),
) -> PublishingService:
    return PublishingService(board_service, deployment_service)

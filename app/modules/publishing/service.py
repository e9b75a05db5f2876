import re
import time
from typing import Callable, Dict, Optional, Tuple
import logging

from app.config.settings import settings
from app.core.errors import NoDeploymentFound, RefUpdateFailed, UpstreamError, ValidationError
from app.modules.boards.schemas import BoardResponse
from app.modules.boards.service import BoardService
from app.modules.deployments.service import DeploymentService
from app.modules.publishing.github_client import GitHubClient
from app.modules.publishing.scaffold import ENTRY_POINT, REQUIRED_ENV_VARS, build_repository_files
from app.modules.publishing.schemas import NextSteps, PublishResponse, RepositoryInfo

logger = logging.getLogger(__name__)

REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,100}$")


def validate_publish_input(board_id: Optional[str], repo_name: Optional[str], github_token: Optional[str]) -> None:
    missing = [
        field for field, value in (("boardId", board_id), ("repoName", repo_name), ("githubToken", github_token))
        if not value or not str(value).strip()
    ]
    if missing:
        raise ValidationError(
            "Missing required parameters: boardId, repoName, githubToken",
            details={"missing": missing},
        )
    if repo_name in (".", "..") or not REPO_NAME_PATTERN.match(repo_name):
        raise ValidationError(
            "Invalid repository name",
            details="Use up to 100 letters, digits, '.', '-' or '_'",
        )


class PublishingService:
    def __init__(
        self,
        board_service: BoardService,
        deployment_service: DeploymentService,
        client_factory: Callable[[str], GitHubClient] = GitHubClient,
        sleep: Callable[[float], None] = time.sleep,
        ref_wait_initial: Optional[float] = None,
        ref_wait_attempts: Optional[int] = None,
        rollback_on_failure: Optional[bool] = None,
    ):
        self.board_service = board_service
        self.deployment_service = deployment_service
        self.client_factory = client_factory
        self.sleep = sleep
        self.ref_wait_initial = settings.github_ref_wait_initial_seconds if ref_wait_initial is None else ref_wait_initial
        self.ref_wait_attempts = ref_wait_attempts or settings.github_ref_wait_max_attempts
        self.rollback_on_failure = (
            settings.github_rollback_on_failure if rollback_on_failure is None else rollback_on_failure
        )

    def prepare_files(self, board_id: str) -> Tuple[BoardResponse, Dict[str, str]]:
        """Board plus the full file map that a publish would push."""
        deployment = self.deployment_service.find_by_board(board_id)
        if deployment is None:
            raise NoDeploymentFound(board_id)
        if deployment.generated_files is None or deployment.generated_files.is_empty():
            raise NoDeploymentFound(board_id, "No generated files found in deployment")

        board = self.board_service.get_board(board_id)
        files = build_repository_files(board.name, deployment.generated_files, settings.deploy_platform_url)
        logger.info(f"Files prepared for board {board_id}: {len(files)}")
        return board, files

    def publish(self, board_id: str, repo_name: str, github_token: str) -> PublishResponse:
        """
        Create a public repository and push every file as one initial commit.

        Steps run strictly in order (repo, ref, tree, commit, ref update) since
        each needs the previous step's sha. Nothing is persisted locally.
        """
        validate_publish_input(board_id, repo_name, github_token)
        board, files = self.prepare_files(board_id)

        client = self.client_factory(github_token)
        logger.info(f"Creating GitHub repository {repo_name}")
        repo = client.create_repository(repo_name, f"{board.name} - Generated by Intent Flow Designer")
        full_name = repo["full_name"]
        branch = repo.get("default_branch") or settings.github_default_branch
        logger.info(f"Repository created: {full_name}")

        try:
            base_sha = self._wait_for_branch(client, full_name, branch)
            tree_sha = client.create_tree(full_name, files, base_sha)
            commit_sha = client.create_commit(
                full_name, settings.github_commit_message, tree_sha, [base_sha] if base_sha else []
            )
            if base_sha:
                client.update_ref(full_name, branch, commit_sha, force=True)
            else:
                self._create_branch(client, full_name, branch, commit_sha)
        except UpstreamError as e:
            self._handle_partial_failure(client, repo, e)
            raise

        logger.info(f"Files pushed to {full_name}: {len(files)}")
        return PublishResponse(
            repository=RepositoryInfo(
                name=repo["name"],
                full_name=full_name,
                html_url=repo["html_url"],
                clone_url=repo["clone_url"],
            ),
            files_count=len(files),
            next_steps=NextSteps(
                deno_deploy_url=settings.deploy_platform_url,
                entry_point=ENTRY_POINT,
                required_env_vars=list(REQUIRED_ENV_VARS),
            ),
        )

    def _wait_for_branch(self, client: GitHubClient, full_name: str, branch: str) -> Optional[str]:
        """Poll the default branch with doubling delays while GitHub initializes the repository."""
        delay = self.ref_wait_initial
        for attempt in range(1, self.ref_wait_attempts + 1):
            self.sleep(delay)
            sha = client.get_branch_sha(full_name, branch)
            if sha:
                return sha
            logger.info(f"Branch {branch} of {full_name} not ready (attempt {attempt}/{self.ref_wait_attempts})")
            delay *= 2
        logger.warning(f"Branch {branch} of {full_name} never became readable; committing without parent")
        return None

    def _create_branch(self, client: GitHubClient, full_name: str, branch: str, commit_sha: str) -> None:
        try:
            client.create_ref(full_name, branch, commit_sha)
        except RefUpdateFailed:
            # The branch may have been initialized after the last read
            logger.info(f"Creating refs/heads/{branch} failed, forcing update instead")
            client.update_ref(full_name, branch, commit_sha, force=True)

    def _handle_partial_failure(self, client: GitHubClient, repo: Dict, error: UpstreamError) -> None:
        full_name = repo["full_name"]
        rolled_back = False
        if self.rollback_on_failure:
            rolled_back = client.delete_repository(full_name)
            logger.info(f"Rollback of {full_name}: {'deleted' if rolled_back else 'failed'}")
        else:
            logger.warning(f"Repository {full_name} left in place after failure: {error.error}")
        error.details = {
            "reason": error.details,
            "repository": repo.get("html_url"),
            "rolled_back": rolled_back,
        }
